"""
Data transfer objects for Crieur.
"""

from crieur.application.dto.channel_dto import (
    ChannelInfoResponse,
    ChannelListResponse,
    ChannelResponse,
    CreateChannelRequest,
    MessageListResponse,
    PublishRequest,
    PublishResponse,
)
from crieur.application.dto.frames import (
    INBOUND_FRAME_TYPES,
    ErrorFrame,
    HistoryFrame,
    InboundFrame,
    MessageSentFrame,
    NewMessageFrame,
    OutboundFrame,
    PingFrame,
    PongFrame,
    PublishFrame,
    SubscribedFrame,
    SubscribeFrame,
    UnsubscribedFrame,
    UnsubscribeFrame,
)

__all__ = [
    "ChannelResponse",
    "ChannelListResponse",
    "ChannelInfoResponse",
    "MessageListResponse",
    "CreateChannelRequest",
    "PublishRequest",
    "PublishResponse",
    "INBOUND_FRAME_TYPES",
    "InboundFrame",
    "SubscribeFrame",
    "UnsubscribeFrame",
    "PublishFrame",
    "PingFrame",
    "OutboundFrame",
    "SubscribedFrame",
    "HistoryFrame",
    "UnsubscribedFrame",
    "NewMessageFrame",
    "MessageSentFrame",
    "PongFrame",
    "ErrorFrame",
]
