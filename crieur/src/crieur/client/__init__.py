"""
Client side of the Crieur wire protocol.
"""

from crieur.client.backoff import ReconnectBackoff
from crieur.client.session import ClientSession, SessionNotConnected, SessionState

__all__ = [
    "ClientSession",
    "ReconnectBackoff",
    "SessionNotConnected",
    "SessionState",
]
