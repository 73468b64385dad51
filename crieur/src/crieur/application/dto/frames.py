"""
Wire frames for the WebSocket protocol.

Inbound frames are validated with pydantic; required-field checks are
left to the Broker so that missing fields produce a validation error
rather than a protocol error. Outbound frames serialize with their wire
aliases via to_wire().
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ============================================================
# Inbound
# ============================================================


class InboundFrame(BaseModel):
    """Base class for frames received from a client."""

    model_config = ConfigDict(extra="ignore", strict=True)

    type: str


class SubscribeFrame(InboundFrame):
    """subscribe{channel, username} (alias: join)."""

    channel: Optional[str] = None
    username: Optional[str] = None


class UnsubscribeFrame(InboundFrame):
    """unsubscribe{channel} (alias: leave)."""

    channel: Optional[str] = None


class PublishFrame(InboundFrame):
    """publish{channel, text, username}."""

    channel: Optional[str] = None
    text: Optional[str] = None
    username: Optional[str] = None


class PingFrame(InboundFrame):
    """ping{}."""


INBOUND_FRAME_TYPES = {
    "subscribe": SubscribeFrame,
    "join": SubscribeFrame,
    "unsubscribe": UnsubscribeFrame,
    "leave": UnsubscribeFrame,
    "publish": PublishFrame,
    "ping": PingFrame,
}

# ============================================================
# Outbound
# ============================================================


class OutboundFrame(BaseModel):
    """Base class for frames sent to a client."""

    model_config = ConfigDict(populate_by_name=True)

    type: str

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class SubscribedFrame(OutboundFrame):
    type: str = "subscribed"
    channel: str
    username: str
    message: str


class HistoryFrame(OutboundFrame):
    type: str = "messages"
    channel: str
    messages: List[Dict[str, Any]]


class UnsubscribedFrame(OutboundFrame):
    type: str = "unsubscribed"
    channel: str
    message: str


class NewMessageFrame(OutboundFrame):
    type: str = "new_message"
    message: Dict[str, Any]


class MessageSentFrame(OutboundFrame):
    type: str = "message_sent"
    message_id: str = Field(..., alias="messageId")
    channel: str
    message: str


class PongFrame(OutboundFrame):
    type: str = "pong"
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class ErrorFrame(OutboundFrame):
    type: str = "error"
    message: str
    code: Optional[str] = None
