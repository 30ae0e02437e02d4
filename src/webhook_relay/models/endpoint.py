"""
Module: endpoint.py
Description: Webhook endpoint (subscriber) model.

Endpoints are created and maintained by subscription management; the
delivery worker only reads them.
"""

from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field, field_validator

WILDCARD = "*"


class Endpoint(BaseModel):
    """
    Subscriber endpoint receiving webhook events.

    Attributes:
        endpoint_id: Unique endpoint identifier
        url: Destination URL for deliveries
        subscribed_event_types: Event type matchers this endpoint wants.
            An entry matches an identical event type, ``*`` matches every
            type and ``order.*`` matches every type under ``order.``.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    endpoint_id: str = Field(..., min_length=1, description="Unique endpoint identifier")
    url: str = Field(..., description="Destination URL")
    subscribed_event_types: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Event type matchers"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(('http://', 'https://')):
            raise ValueError("url must be a valid HTTP/HTTPS URL")
        return v

    def is_subscribed(self, event_type: str) -> bool:
        """Return True if any subscription matcher accepts event_type."""
        for matcher in self.subscribed_event_types:
            if matcher == WILDCARD or matcher == event_type:
                return True
            if matcher.endswith('.' + WILDCARD) and event_type.startswith(matcher[:-1]):
                return True
        return False
