"""
Module: delivery/subscription.py
Description: Subscription gate applied before any delivery attempt.
"""

from webhook_relay.models.endpoint import Endpoint


def is_subscribed(endpoint: Endpoint, event_type: str) -> bool:
    """
    Decide whether endpoint should receive events of event_type.

    Pure and total: an unmatched type means the event is skipped,
    never that delivery failed.
    """
    return endpoint.is_subscribed(event_type)
