"""
Module: event.py
Description: Webhook event model.

Defines the Event model produced by the publishing application and
consumed by the delivery worker. An event is immutable apart from its
last_attempt field, which is replaced after every delivery attempt.

Key Components:
- Event: webhook event with a reference to its endpoint
- Validation: Pydantic v2 with custom field validators

Dependencies: pydantic, datetime, typing
Author: Webhook Relay Team
"""

import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from webhook_relay.models.attempt import AttemptRecord


class Event(BaseModel):
    """
    Event model representing one webhook to deliver.

    Attributes:
        event_id: Unique event identifier (opaque)
        event_type: Type of event (e.g., 'order.created')
        payload: Event data payload (any JSON value)
        endpoint_id: Identifier of the endpoint that receives this event
        last_attempt: Record of the most recent delivery attempt, if any
        created_at: Timestamp when the event was created
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True
    )

    event_id: str = Field(
        ...,
        min_length=1,
        description="Unique event identifier"
    )
    event_type: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Event type identifier"
    )
    payload: Any = Field(
        default=None,
        description="Event payload data"
    )
    endpoint_id: str = Field(
        ...,
        min_length=1,
        description="Endpoint this event is delivered to"
    )
    last_attempt: Optional[AttemptRecord] = Field(
        default=None,
        description="Most recent delivery attempt"
    )
    created_at: Optional[datetime] = Field(
        default=None,
        description="Event creation timestamp"
    )

    @field_validator('event_type')
    @classmethod
    def validate_event_type(cls, v: str) -> str:
        """Validate event type follows naming conventions."""
        # Allow lowercase letters, numbers, dots, and underscores
        if not re.match(r'^[a-z0-9._]+$', v):
            raise ValueError(
                "event_type must contain only lowercase letters, numbers, dots, and underscores"
            )

        return v
