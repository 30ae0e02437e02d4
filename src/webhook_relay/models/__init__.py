"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains all data models used by the webhook relay:
- Event: webhook event with its latest attempt record
- Endpoint: subscriber endpoint and its subscriptions
- DeliveredAttempt / RejectedAttempt / TimedOutAttempt: attempt records
- DeliveryResult: signal returned by the delivery worker

All models are exported here for convenient importing.
"""

from .attempt import (
    AttemptRecord,
    DeliveredAttempt,
    RejectedAttempt,
    TimedOutAttempt,
    attempt_from_record,
)
from .endpoint import Endpoint
from .event import Event
from .result import DeliveryResult

__all__ = [
    "AttemptRecord",
    "DeliveredAttempt",
    "RejectedAttempt",
    "TimedOutAttempt",
    "attempt_from_record",
    "Endpoint",
    "Event",
    "DeliveryResult",
]
