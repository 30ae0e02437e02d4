"""
Module: attempt.py
Description: Attempt record models for webhook deliveries.

An event carries the record of its most recent delivery attempt only.
The record is one of three shapes, tagged by outcome, and is persisted
in the compact wire form shared with the rest of the system:

    {"headers": {...}, "code": 200, "body": "ok"}    delivered or rejected
    {"error": "TIMEOUT_ERROR"}                       timed out

Key Components:
- DeliveredAttempt / RejectedAttempt / TimedOutAttempt: outcome variants
- AttemptRecord: discriminated union of the variants
- attempt_from_record(): parse the persisted wire form

Dependencies: pydantic, typing
Author: Webhook Relay Team
"""

from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

TIMEOUT_ERROR = "TIMEOUT_ERROR"


class _ResponseAttempt(BaseModel):
    """Fields shared by attempts that received an HTTP response."""

    model_config = ConfigDict(frozen=True)

    headers: Dict[str, str] = Field(default_factory=dict, description="Response headers")
    status_code: int = Field(..., ge=100, le=999, description="Response status code")
    body: str = Field(default="", description="Response body as text")

    def to_record(self) -> Dict[str, Any]:
        return {
            'headers': dict(self.headers),
            'code': self.status_code,
            'body': self.body
        }


class DeliveredAttempt(_ResponseAttempt):
    """The endpoint answered with a 2xx status."""

    outcome: Literal["delivered"] = "delivered"


class RejectedAttempt(_ResponseAttempt):
    """The endpoint answered with a status outside 2xx."""

    outcome: Literal["rejected"] = "rejected"


class TimedOutAttempt(BaseModel):
    """No response: timeout, refused connection, DNS or TLS failure."""

    model_config = ConfigDict(frozen=True)

    outcome: Literal["timed_out"] = "timed_out"

    def to_record(self) -> Dict[str, Any]:
        return {'error': TIMEOUT_ERROR}


AttemptRecord = Annotated[
    Union[DeliveredAttempt, RejectedAttempt, TimedOutAttempt],
    Field(discriminator="outcome")
]

_attempt_adapter = TypeAdapter(AttemptRecord)


def attempt_from_record(record: Dict[str, Any]) -> AttemptRecord:
    """
    Parse a persisted attempt record back into its model.

    Args:
        record: Wire-form record as produced by ``to_record()``

    Returns:
        The matching attempt variant

    Raises:
        ValueError: If the record matches none of the known shapes
    """
    if not isinstance(record, dict):
        raise ValueError("attempt record must be a dictionary")

    if 'error' in record:
        if record['error'] != TIMEOUT_ERROR:
            raise ValueError(f"Unknown attempt error: {record['error']!r}")
        return TimedOutAttempt()

    if 'code' not in record:
        raise ValueError("attempt record must carry either 'code' or 'error'")

    code = int(record['code'])
    return _attempt_adapter.validate_python({
        'outcome': 'delivered' if 200 <= code <= 299 else 'rejected',
        'headers': record.get('headers') or {},
        'status_code': code,
        'body': record.get('body') or ''
    })
