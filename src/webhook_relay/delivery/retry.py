"""
Module: delivery/retry.py
Description: Retry policy for webhook delivery.

Computes the backoff before the next delivery attempt: a steep
polynomial term (attempt ** 5) plus a fresh random jitter drawn on
every evaluation, bounded by a maximum attempt count. The worker never
retries by itself; the policy is consulted by whatever schedules it,
either the SQS handler or the local tenacity-driven scheduler below.

Key Components:
- RetryPolicy: max attempts and backoff formula as one config value
- wait_delivery_backoff: tenacity wait strategy backed by a RetryPolicy
- deliver_with_retries(): in-process scheduler for local runs

Dependencies: tenacity, pydantic, random, asyncio
Author: Webhook Relay Team
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from webhook_relay.models.result import DeliveryResult
from webhook_relay.utils.logger import get_logger

logger = get_logger(__name__)


class RetryPolicy(BaseModel):
    """
    Backoff configuration for failed deliveries.

    Attributes:
        max_attempts: Total attempts (the first one included) before giving up
        jitter_min: Inclusive lower bound of the jitter, in seconds
        jitter_max: Exclusive upper bound of the jitter, in seconds
        exponent: Power applied to the attempt number
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=10, ge=1)
    jitter_min: int = Field(default=30, ge=0)
    jitter_max: int = Field(default=600, ge=1)
    exponent: int = Field(default=5, ge=1)

    @model_validator(mode='after')
    def validate_jitter_range(self) -> 'RetryPolicy':
        if self.jitter_min >= self.jitter_max:
            raise ValueError("jitter_min must be lower than jitter_max")
        return self

    def next_delay(self, attempt_number: int, rng: Optional[random.Random] = None) -> int:
        """
        Seconds to wait before the attempt following attempt_number.

        Args:
            attempt_number: Number of the attempt that just failed (1-based)
            rng: Optional random source, the module generator otherwise

        Returns:
            attempt_number ** exponent + jitter, jitter in [jitter_min, jitter_max)

        Raises:
            ValueError: If attempt_number is lower than 1
        """
        if attempt_number < 1:
            raise ValueError("attempt_number must be at least 1")

        jitter = (rng or random).randrange(self.jitter_min, self.jitter_max)
        return attempt_number ** self.exponent + jitter

    def has_attempts_remaining(self, attempt_number: int) -> bool:
        return attempt_number < self.max_attempts


class wait_delivery_backoff(wait_base):
    """Tenacity wait strategy delegating to RetryPolicy.next_delay."""

    def __init__(self, policy: RetryPolicy, rng: Optional[random.Random] = None):
        self.policy = policy
        self.rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        return float(self.policy.next_delay(retry_state.attempt_number, self.rng))


def _log_before_sleep(retry_state: RetryCallState) -> None:
    logger.warning(
        "Webhook delivery failed, retry scheduled",
        event_id=retry_state.args[0] if retry_state.args else None,
        attempt=retry_state.attempt_number,
        delay_seconds=retry_state.next_action.sleep if retry_state.next_action else None
    )


def _give_up(retry_state: RetryCallState) -> DeliveryResult:
    logger.error(
        "Webhook delivery attempts exhausted, giving up",
        event_id=retry_state.args[0] if retry_state.args else None,
        attempts=retry_state.attempt_number
    )
    return retry_state.outcome.result()


async def deliver_with_retries(
    deliver: Callable[[str], Awaitable[DeliveryResult]],
    event_id: str,
    policy: RetryPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    rng: Optional[random.Random] = None
) -> DeliveryResult:
    """
    Run deliver(event_id) until it stops asking for a retry.

    Only RETRYABLE_FAILURE results are retried. Exceptions (persistence
    faults) are not retried here and propagate to the caller.

    Args:
        deliver: Worker entry point, usually DeliveryWorker.deliver
        event_id: Event to deliver
        policy: Retry policy providing the ceiling and the backoff
        sleep: Awaitable sleep, replaceable in tests
        rng: Optional random source for the jitter

    Returns:
        The last DeliveryResult; RETRYABLE_FAILURE means attempts ran out
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_delivery_backoff(policy, rng),
        retry=retry_if_result(lambda result: result.should_retry),
        before_sleep=_log_before_sleep,
        retry_error_callback=_give_up,
        sleep=sleep
    )
    return await retrying(deliver, event_id)
