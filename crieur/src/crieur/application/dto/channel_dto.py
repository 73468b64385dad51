"""
DTOs for the channel REST endpoints.

Required fields are declared optional here: presence and length checks
live in the Broker so that REST and WebSocket callers get the same
validation messages.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from crieur.domain.value_objects import MessageKind


class CreateChannelRequest(BaseModel):
    """
    Request DTO for creating a channel.

    Attributes:
        name: Channel name
        created_by: Creator username (JSON key "createdBy")
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, description="Channel name")
    created_by: Optional[str] = Field(
        None, alias="createdBy", description="Creator username"
    )


class ChannelResponse(BaseModel):
    """Response DTO for channel creation."""

    success: bool = True
    channel: Dict[str, Any]
    message: str


class ChannelListResponse(BaseModel):
    channels: List[Dict[str, Any]]


class ChannelInfoResponse(BaseModel):
    channel: Dict[str, Any]


class MessageListResponse(BaseModel):
    messages: List[Dict[str, Any]]


class PublishRequest(BaseModel):
    """
    Request DTO for publishing over HTTP.

    Attributes:
        channel: Target channel
        text: Message body
        username: Author
        type: Optional message kind ("message" or "system")
    """

    channel: Optional[str] = Field(None, description="Target channel name")
    text: Optional[str] = Field(None, description="Message body")
    username: Optional[str] = Field(None, description="Author username")
    type: MessageKind = Field(MessageKind.MESSAGE, description="Message kind")


class PublishResponse(BaseModel):
    """Response DTO for HTTP publishing."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: Dict[str, Any]
    clients_reached: int = Field(..., alias="clientsReached", ge=0)
