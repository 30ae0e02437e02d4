"""
Module: delivery/classifier.py
Description: Maps a transport result onto the attempt record to persist.
"""

from webhook_relay.delivery.transport import Completed, TransportResult
from webhook_relay.models.attempt import (
    AttemptRecord,
    DeliveredAttempt,
    RejectedAttempt,
    TimedOutAttempt,
)


def classify(result: TransportResult) -> AttemptRecord:
    """
    Classify a transport result.

    2xx responses are delivered, any other response is rejected and a
    transport fault of any kind is recorded as a timeout.
    """
    if isinstance(result, Completed):
        fields = {
            'headers': result.headers,
            'status_code': result.status_code,
            'body': result.body
        }
        if 200 <= result.status_code <= 299:
            return DeliveredAttempt(**fields)
        return RejectedAttempt(**fields)

    return TimedOutAttempt()


def is_success(record: AttemptRecord) -> bool:
    return isinstance(record, DeliveredAttempt)
