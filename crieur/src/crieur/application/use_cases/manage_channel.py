"""
Use case for managing channels over HTTP.
"""

from typing import Any, Dict, List, Optional, Tuple

from crieur.domain.value_objects import Message, MessageKind
from crieur.infrastructure.websocket import Broker

DEFAULT_MESSAGE_LIMIT = 50


class ManageChannelUseCase:
    """
    Use case for channel lifecycle and read access.

    Thin layer over the Broker for the REST surface: creation and publish
    go through the Broker's write path, listing and history through its
    read-only accessors.
    """

    def __init__(self, broker: Broker):
        """
        Initialize use case.

        Args:
            broker: Broker owning channel and connection state
        """
        self.broker = broker

    def create_channel(self, name: Optional[str], created_by: Optional[str]) -> Dict[str, Any]:
        """
        Create a channel.

        Returns:
            Channel summary

        Raises:
            InvalidChannelNameError: If the name is empty or too long
            FieldValidationError: If created_by is missing or too long
            ChannelAlreadyExistsError: If the name is taken
        """
        return self.broker.create_channel(name, created_by).summary()

    def list_channels(self) -> List[Dict[str, Any]]:
        return self.broker.list_channels()

    def get_channel(self, name: str) -> Dict[str, Any]:
        """
        Get channel info including its subscriber list.

        Raises:
            ChannelNotFoundError: If the channel does not exist
        """
        return self.broker.channel_info(name)

    def get_messages(
        self, name: str, limit: Optional[int] = DEFAULT_MESSAGE_LIMIT
    ) -> List[Dict[str, Any]]:
        """
        Get the most recent messages of a channel, oldest first.

        Raises:
            ChannelNotFoundError: If the channel does not exist
            ValueError: If limit is negative
        """
        return [m.to_dict() for m in self.broker.channel_messages(name, limit)]

    def publish(
        self,
        channel: Optional[str],
        text: Optional[str],
        username: Optional[str],
        kind: MessageKind = MessageKind.MESSAGE,
    ) -> Tuple[Message, int]:
        """
        Publish on behalf of an HTTP caller.

        Returns:
            Tuple of (stored message, number of subscribers reached)
        """
        return self.broker.publish(None, channel, text, username, kind)
