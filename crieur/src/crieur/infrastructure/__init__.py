"""
Infrastructure layer.

Provides concrete implementations of domain interfaces using external
frameworks and libraries.
"""

from crieur.infrastructure.auth import JWTVerifier
from crieur.infrastructure.channels import ChannelStore
from crieur.infrastructure.monitoring import CrieurHealthChecker, LivenessMonitor
from crieur.infrastructure.websocket import (
    Broker,
    ConnectionRegistry,
    WebSocketSink,
)

__all__ = [
    "JWTVerifier",
    "ChannelStore",
    "ConnectionRegistry",
    "Broker",
    "WebSocketSink",
    "LivenessMonitor",
    "CrieurHealthChecker",
]
