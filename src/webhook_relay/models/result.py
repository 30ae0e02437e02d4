"""
Module: result.py
Description: Signal returned by one delivery worker invocation.
"""

from enum import Enum


class DeliveryResult(str, Enum):
    """
    Outcome of a single worker invocation, as seen by the scheduler.

    SUCCESS: the endpoint accepted the event, delivery is finished.
    RETRYABLE_FAILURE: rejected or unreachable, invoke again after a backoff.
    STOP: event/endpoint missing or not subscribed, nothing more to do.
    """

    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"
    STOP = "stop"

    @property
    def should_retry(self) -> bool:
        return self is DeliveryResult.RETRYABLE_FAILURE
