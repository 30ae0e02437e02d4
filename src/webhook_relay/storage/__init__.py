"""
Module: storage
Description: Package initialization for data persistence layer.

This package contains data storage implementations for the webhook relay:
- dynamodb: DynamoDB client for events, endpoints and attempt records

All storage implementations follow async interfaces for consistency.
"""

__all__ = []
