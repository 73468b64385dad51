"""
Broker: dispatches client requests against the channel and connection
state and fans published messages out to subscribers.
"""

from typing import Any, Dict, List, Optional, Tuple

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from crieur.application.dto import (
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
from crieur.domain.entities import Channel, Connection
from crieur.domain.exceptions import (
    BrokerError,
    ChannelError,
    ChannelNotFoundError,
    FieldValidationError,
    ProtocolError,
    TransportFailure,
)
from crieur.domain.value_objects import ChannelName, Message, MessageKind
from crieur.infrastructure.channels import ChannelStore
from crieur.infrastructure.websocket.connection_registry import ConnectionRegistry

HISTORY_REPLAY_LIMIT = 20


class Broker:
    """
    Owns the ChannelStore and ConnectionRegistry and is the only writer
    to either.

    Every handler validates first and mutates after, with no await in
    between, so on a single event loop each handler runs atomically:
    a publish always fans out to the subscriber set as it stands once
    every earlier subscribe/unsubscribe has fully applied.

    Membership is tracked per (channel, connection): a username leaves a
    channel's visible subscriber set only when its last connection
    subscribed to that channel goes away.
    """

    def __init__(
        self,
        channel_store: ChannelStore,
        registry: ConnectionRegistry,
        max_text_length: int = 1000,
        max_username_length: int = 50,
        max_channel_name_length: int = 100,
        reporter: Optional[SystemReporter] = None,
    ):
        self.channel_store = channel_store
        self.registry = registry
        self.max_text_length = max_text_length
        self.max_username_length = max_username_length
        self.max_channel_name_length = max_channel_name_length
        self.reporter = reporter

        self.stats = {
            "messages_published": 0,
            "frames_delivered": 0,
            "requests_rejected": 0,
            "teardowns": 0,
        }

    # ================================================================
    # Transport callbacks
    # ================================================================

    def open(self, handle: str, sink: Any) -> Connection:
        """Register a freshly accepted connection and its outbound sink."""
        return self.registry.register(handle, sink)

    def dispatch(self, handle: str, frame: InboundFrame) -> None:
        """
        Route a parsed inbound frame to its handler.

        Request errors are reported to the requesting handle only as an
        error frame; they never close the connection.
        """
        try:
            if isinstance(frame, SubscribeFrame):
                self.subscribe(handle, frame.channel, frame.username)
            elif isinstance(frame, UnsubscribeFrame):
                self.unsubscribe(handle, frame.channel)
            elif isinstance(frame, PublishFrame):
                self.publish(handle, frame.channel, frame.text, frame.username)
            elif isinstance(frame, PingFrame):
                self.ping(handle)
            else:
                raise ProtocolError("Unknown message type")
        except (ChannelError, FieldValidationError, ProtocolError) as e:
            self.reject(handle, e)

    def reject(self, handle: str, error: Exception) -> None:
        """Send an error frame for a rejected request to its sender."""
        self.stats["requests_rejected"] += 1
        code = getattr(error, "code", None)

        if self.reporter:
            self.reporter.warning(
                f"{Emoji.ERROR.WARNING} Request rejected "
                f"[conn={handle}] [code={code}]: {error}",
                context="Broker",
                verbose_level=2,
            )

        self._send(handle, ErrorFrame(message=str(error), code=code))

    # ================================================================
    # Handlers
    # ================================================================

    def subscribe(
        self, handle: str, channel: Optional[str], username: Optional[str]
    ) -> None:
        """
        Subscribe a connection to an existing channel as username.

        Sends a subscribed ack followed by the last 20 messages.

        Raises:
            FieldValidationError: If channel or username is missing/oversized
            ChannelNotFoundError: If the channel does not exist
        """
        if _is_blank(channel) or _is_blank(username):
            raise FieldValidationError("Channel and username are required")
        self._validate_channel_name(channel)
        self._validate_username(username)
        if not self.channel_store.exists(channel):
            raise ChannelNotFoundError(channel)

        connection = self.registry.register(handle)
        previous = connection.username
        if previous is not None and previous != username:
            self._move_memberships(connection, previous, username)

        self.registry.set_identity(handle, username)
        self.registry.subscribe(handle, channel)
        self.channel_store.add_subscriber(channel, username)

        history = self.channel_store.messages(channel, HISTORY_REPLAY_LIMIT)

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.SUBSCRIPTION} {username} subscribed "
                f"[conn={handle}] [channel={channel}] "
                f"[subscribers={len(self.registry.subscribers_of(channel))}] "
                f"[history={len(history)}]",
                context="Broker",
                verbose_level=2,
            )

        self._send(
            handle,
            SubscribedFrame(
                channel=channel,
                username=username,
                message=f"Successfully subscribed to channel '{channel}'",
            ),
        )
        self._send(
            handle,
            HistoryFrame(
                channel=channel,
                messages=[message.to_dict() for message in history],
            ),
        )

    def unsubscribe(self, handle: str, channel: Optional[str]) -> None:
        """
        Remove a connection's subscription. A no-op when not subscribed.

        Raises:
            FieldValidationError: If channel is missing
        """
        if _is_blank(channel):
            raise FieldValidationError("Channel is required", field="channel")

        connection = self.registry.get(handle)
        if connection is not None and self.registry.unsubscribe(handle, channel):
            self._release_membership(connection, channel)

            if self.reporter:
                self.reporter.info(
                    f"{Emoji.NETWORK.UNSUBSCRIBE} {connection.username} "
                    f"unsubscribed [conn={handle}] [channel={channel}]",
                    context="Broker",
                    verbose_level=2,
                )

        self._send(
            handle,
            UnsubscribedFrame(
                channel=channel,
                message=f"Unsubscribed from channel '{channel}'",
            ),
        )

    def publish(
        self,
        handle: Optional[str],
        channel: Optional[str],
        text: Optional[str],
        username: Optional[str],
        kind: MessageKind = MessageKind.MESSAGE,
    ) -> Tuple[Message, int]:
        """
        Append a message and fan it out to every subscribed connection.

        Args:
            handle: Publishing connection, or None for publishes that do
                not come from a connection (HTTP); only a handle gets the
                message_sent ack
            channel: Target channel
            text: Message body
            username: Author
            kind: Message kind

        Returns:
            Tuple of (stored message, number of subscribers reached)

        Raises:
            FieldValidationError: If a field is missing or oversized
            ChannelNotFoundError: If the channel does not exist
        """
        if _is_blank(channel) or _is_blank(text) or _is_blank(username):
            raise FieldValidationError("Channel, text, and username are required")
        self._validate_username(username)
        if len(text) > self.max_text_length:
            raise FieldValidationError(
                f"Message too long (max {self.max_text_length} characters)",
                field="text",
            )

        message = self.channel_store.add_message(channel, username, text, kind)
        self.stats["messages_published"] += 1

        reached = self._fan_out(channel, NewMessageFrame(message=message.to_dict()))

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.BROADCAST} Message published "
                f"[channel={channel}] [id={message.id}] [by={username}] "
                f"[reached={reached}]",
                context="Broker",
                verbose_level=2,
            )

        if handle is not None:
            self._send(
                handle,
                MessageSentFrame(
                    message_id=message.id,
                    channel=channel,
                    message="Message sent successfully",
                ),
            )

        return message, reached

    def ping(self, handle: str) -> None:
        """Reply with a pong carrying the server time."""
        self._send(handle, PongFrame())

    def teardown(self, handle: str) -> Optional[Connection]:
        """
        Remove a connection and its memberships.

        The only path that removes a connection. Calling it again for the
        same handle is a no-op.

        Returns:
            The removed connection, or None if it was already gone
        """
        connection = self.registry.deregister(handle)
        if connection is None:
            return None

        for channel in connection.subscribed_channels:
            self._release_membership(connection, channel)

        self.stats["teardowns"] += 1

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.DISCONNECT} Connection torn down "
                f"[conn={handle}] [user={connection.username}] "
                f"[channels={sorted(connection.subscribed_channels)}]",
                context="Broker",
                verbose_level=1,
            )

        return connection

    # ================================================================
    # Channel management and read-only accessors
    # ================================================================

    def create_channel(self, name: Optional[str], created_by: Optional[str]) -> Channel:
        """
        Create a channel.

        Raises:
            InvalidChannelNameError: If name is empty or too long
            FieldValidationError: If created_by is missing or too long
            ChannelAlreadyExistsError: If name is taken
        """
        self._validate_channel_name(name)
        if _is_blank(created_by):
            raise FieldValidationError(
                "Created by username is required", field="createdBy"
            )
        self._validate_username(created_by)
        return self.channel_store.create(name, created_by)

    def list_channels(self) -> List[Dict[str, Any]]:
        return self.channel_store.list()

    def channel_info(self, name: str) -> Dict[str, Any]:
        info = self.channel_store.info(name)
        info["connectionCount"] = len(self.registry.subscribers_of(name))
        return info

    def channel_messages(self, name: str, limit: Optional[int] = None) -> List[Message]:
        return self.channel_store.messages(name, limit)

    def metrics(self) -> Dict[str, Any]:
        return {
            "connectedSockets": self.registry.size(),
            "activeChannels": self.channel_store.count(),
            "totalMessages": self.channel_store.total_messages(),
        }

    # ================================================================
    # Internals
    # ================================================================

    def _validate_channel_name(self, name: Optional[str]) -> None:
        ChannelName(name or "", max_length=self.max_channel_name_length)

    def _validate_username(self, username: str) -> None:
        if len(username) > self.max_username_length:
            raise FieldValidationError(
                f"Username too long (max {self.max_username_length} characters)",
                field="username",
            )

    def _release_membership(self, connection: Connection, channel: str) -> None:
        """Drop the connection's username from channel unless still held."""
        username = connection.username
        if username is None:
            return
        if not self.registry.has_other_member(channel, username, connection.handle):
            self.channel_store.remove_subscriber(channel, username)

    def _move_memberships(
        self, connection: Connection, previous: str, username: str
    ) -> None:
        """Carry a connection's memberships over to a reasserted username."""
        for channel in connection.subscribed_channels:
            if not self.registry.has_other_member(channel, previous, connection.handle):
                self.channel_store.remove_subscriber(channel, previous)
            self.channel_store.add_subscriber(channel, username)

    def _fan_out(self, channel: str, frame: OutboundFrame) -> int:
        wire = frame.to_wire()
        failed = []
        reached = 0

        for handle in self.registry.subscribers_of(channel):
            if self._deliver(handle, wire):
                reached += 1
            else:
                failed.append(handle)

        for handle in failed:
            self.teardown(handle)

        return reached

    def _send(self, handle: str, frame: OutboundFrame) -> bool:
        """Deliver a frame to one handle, tearing it down on failure."""
        if self._deliver(handle, frame.to_wire()):
            return True
        self.teardown(handle)
        return False

    def _deliver(self, handle: str, wire: Dict[str, Any]) -> bool:
        connection = self.registry.get(handle)
        if connection is None or connection.sink is None:
            return False

        try:
            connection.sink.send(wire)
        except TransportFailure as e:
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.MESSAGE.FAILED} {e}",
                    context="Broker",
                    verbose_level=1,
                )
            return False

        self.stats["frames_delivered"] += 1
        return True


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


__all__ = ["Broker", "BrokerError", "HISTORY_REPLAY_LIMIT"]
