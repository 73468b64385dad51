"""
Broker request and transport exceptions.
"""

from typing import Optional


class BrokerError(Exception):
    """Base exception for errors raised while handling a connection."""

    code = "BROKER_ERROR"


class FieldValidationError(BrokerError):
    """Raised when a required field is missing or oversized."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        """
        Initialize FieldValidationError.

        Args:
            message: Human-readable reason
            field: Offending field name, if a single one
        """
        super().__init__(message)
        self.field = field


class ProtocolError(BrokerError):
    """Raised when a frame cannot be parsed or has an unknown kind."""

    code = "PROTOCOL_ERROR"


class TransportFailure(BrokerError):
    """Raised when a frame or probe cannot reach a connection."""

    code = "TRANSPORT_FAILURE"

    def __init__(self, handle: str, reason: str):
        """
        Initialize TransportFailure.

        Args:
            handle: Connection handle that could not be reached
            reason: What went wrong
        """
        super().__init__(f"Transport failure on {handle}: {reason}")
        self.handle = handle
        self.reason = reason
