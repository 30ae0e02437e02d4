"""
Package: webhook_relay
Description: Asynchronous webhook delivery to subscriber endpoints.

Delivers events over HTTP, records the outcome of the latest attempt
on the event and retries failed deliveries with a jittered polynomial
backoff.
"""

__version__ = "1.0.0"
