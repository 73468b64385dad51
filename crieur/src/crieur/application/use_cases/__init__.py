"""
Application use cases for Crieur.
"""

from crieur.application.use_cases.authenticate_websocket import (
    AuthenticateWebSocketUseCase,
)
from crieur.application.use_cases.manage_channel import ManageChannelUseCase
from crieur.application.use_cases.parse_frame import ParseFrameUseCase

__all__ = [
    "AuthenticateWebSocketUseCase",
    "ManageChannelUseCase",
    "ParseFrameUseCase",
]
