"""
Module: utils
Description: Package initialization for utility functions.

This package contains shared utility functions and helpers used
throughout the webhook relay.

Current utilities:
- logger: Structured logging configuration and helpers
- metrics: CloudWatch delivery metrics
"""

__all__ = []
