"""
Package: delivery
Description: Webhook delivery for the webhook relay.

Provides the HTTP transport, outcome classification, subscription
gate, retry policy and the delivery worker that composes them.
"""
