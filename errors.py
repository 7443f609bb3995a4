"""
Error taxonomy for shipment lookups.

A lookup that finds nothing is not an error: see ``LookupOutcome.NOT_FOUND``.
"""
from typing import Optional

from config import EMPTY_QUERY_MESSAGE, UPSTREAM_FAILURE_MESSAGE


class TrackingError(Exception):
    """Base class for recoverable tracking errors"""

    user_message = "Something went wrong."

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        if user_message is not None:
            self.user_message = user_message


class ValidationError(TrackingError):
    """Malformed or empty input. Shown inline, no retry needed."""

    user_message = EMPTY_QUERY_MESSAGE


class UpstreamFailure(TrackingError):
    """
    The shipment source failed or returned malformed data.

    ``detail`` carries the internal reason for logging; it is never part of
    ``user_message``.
    """

    user_message = UPSTREAM_FAILURE_MESSAGE

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail or message
