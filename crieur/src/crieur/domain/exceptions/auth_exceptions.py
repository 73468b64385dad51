"""
Authentication exceptions.
"""


class AuthenticationError(Exception):
    """Base exception for authentication errors."""

    code = "AUTHENTICATION_ERROR"


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is invalid or lacks a username."""
