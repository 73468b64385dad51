"""
In-memory channel store with bounded per-channel history.
"""

from typing import Any, Dict, List, Optional, Union

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from crieur.domain.entities import Channel
from crieur.domain.exceptions import (
    ChannelAlreadyExistsError,
    ChannelNotFoundError,
)
from crieur.domain.value_objects import Message, MessageKind


class ChannelStore:
    """
    Owns every live channel: history, subscriber usernames and metadata.

    Pure state with accessors; performs no I/O. Only the Broker (and
    read-only endpoints, through its accessors) touches a store.
    """

    def __init__(
        self,
        max_messages: int = 50,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize ChannelStore.

        Args:
            max_messages: History bound applied to every channel
            reporter: Optional SystemReporter for logging
        """
        if max_messages < 1:
            raise ValueError("max_messages must be at least 1")

        self._channels: Dict[str, Channel] = {}
        self.max_messages = max_messages
        self.reporter = reporter

    def _get(self, name: str) -> Channel:
        channel = self._channels.get(name)
        if channel is None:
            raise ChannelNotFoundError(name)
        return channel

    def create(self, name: str, created_by: str) -> Channel:
        """
        Create a new channel.

        Args:
            name: Channel name (must not be taken)
            created_by: Creator username

        Returns:
            Created Channel

        Raises:
            ChannelAlreadyExistsError: If name is already taken
        """
        if name in self._channels:
            raise ChannelAlreadyExistsError(name)

        channel = Channel(name=name, created_by=created_by, max_messages=self.max_messages)
        self._channels[name] = channel

        if self.reporter:
            self.reporter.info(
                f"{Emoji.MESSAGE.CHANNEL} Channel created: name={name}, "
                f"by={created_by}, total={len(self._channels)}",
                context="ChannelStore",
                verbose_level=1,
            )

        return channel

    def add_message(
        self,
        name: str,
        username: str,
        text: str,
        kind: Union[str, MessageKind, None] = None,
    ) -> Message:
        """
        Append a message to a channel's history.

        Keeps only the most recent max_messages entries.

        Args:
            name: Channel name
            username: Author
            text: Message body
            kind: Optional message kind (defaults to plain message)

        Returns:
            The stored Message with its assigned id and timestamp

        Raises:
            ChannelNotFoundError: If channel does not exist
            ValueError: If kind is unknown
        """
        channel = self._get(name)
        message = Message(
            channel=name,
            username=username,
            text=text,
            kind=MessageKind.parse(kind),
        )
        channel.append(message)

        if self.reporter:
            self.reporter.debug(
                f"{Emoji.MESSAGE.PUBLISHED} Message added: channel={name}, "
                f"id={message.id}, by={username}, "
                f"history={channel.message_count}/{channel.max_messages}",
                context="ChannelStore",
                verbose_level=3,
            )

        return message

    def messages(self, name: str, limit: Optional[int] = None) -> List[Message]:
        """
        Get recent messages of a channel, oldest first.

        Args:
            name: Channel name
            limit: Number of most recent messages; None for all retained

        Raises:
            ChannelNotFoundError: If channel does not exist
        """
        return self._get(name).recent(limit)

    def add_subscriber(self, name: str, username: str) -> None:
        """
        Add a username to a channel's subscriber set.

        Raises:
            ChannelNotFoundError: If channel does not exist
        """
        self._get(name).add_subscriber(username)

    def remove_subscriber(self, name: str, username: str) -> bool:
        """
        Remove a username from a channel's subscriber set.

        Never raises: an absent channel or subscriber is a no-op.

        Returns:
            True if the username was removed
        """
        channel = self._channels.get(name)
        if channel is None:
            return False
        return channel.remove_subscriber(username)

    def is_subscriber(self, name: str, username: str) -> bool:
        channel = self._channels.get(name)
        return channel is not None and channel.has_subscriber(username)

    def info(self, name: str) -> Dict[str, Any]:
        """
        Get channel details including subscriber names.

        Raises:
            ChannelNotFoundError: If channel does not exist
        """
        return self._get(name).info()

    def list(self) -> List[Dict[str, Any]]:
        """Get summaries of all channels (no message payloads)."""
        return [channel.summary() for channel in self._channels.values()]

    def exists(self, name: str) -> bool:
        return name in self._channels

    def count(self) -> int:
        return len(self._channels)

    def total_messages(self) -> int:
        """Sum of retained messages over all channels."""
        return sum(channel.message_count for channel in self._channels.values())
