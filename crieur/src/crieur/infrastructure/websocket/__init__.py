"""
WebSocket infrastructure for Crieur.
"""

from crieur.infrastructure.websocket.broker import HISTORY_REPLAY_LIMIT, Broker
from crieur.infrastructure.websocket.connection_registry import ConnectionRegistry
from crieur.infrastructure.websocket.outbound_sink import (
    PROBE_FRAME,
    OutboundSink,
    SlowConsumerPolicy,
    WebSocketSink,
)

__all__ = [
    "Broker",
    "ConnectionRegistry",
    "HISTORY_REPLAY_LIMIT",
    "OutboundSink",
    "PROBE_FRAME",
    "SlowConsumerPolicy",
    "WebSocketSink",
]
