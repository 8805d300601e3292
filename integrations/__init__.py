"""
External service integrations.
"""

from integrations.webflow import (
    WebflowClient,
    is_valid_token,
    validate_token,
)

__all__ = [
    "WebflowClient",
    "is_valid_token",
    "validate_token",
]
