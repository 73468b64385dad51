"""
Domain exceptions for Crieur.
"""

from crieur.domain.exceptions.auth_exceptions import (
    AuthenticationError,
    TokenExpiredError,
    TokenInvalidError,
)
from crieur.domain.exceptions.broker_exceptions import (
    BrokerError,
    FieldValidationError,
    ProtocolError,
    TransportFailure,
)
from crieur.domain.exceptions.channel_exceptions import (
    ChannelAlreadyExistsError,
    ChannelError,
    ChannelNotFoundError,
    InvalidChannelNameError,
)

__all__ = [
    "AuthenticationError",
    "TokenExpiredError",
    "TokenInvalidError",
    "BrokerError",
    "FieldValidationError",
    "ProtocolError",
    "TransportFailure",
    "ChannelError",
    "ChannelAlreadyExistsError",
    "ChannelNotFoundError",
    "InvalidChannelNameError",
]
