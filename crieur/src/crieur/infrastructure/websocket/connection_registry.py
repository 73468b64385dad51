"""
Registry of live connections and their channel subscriptions.
"""

from typing import Any, Dict, List, Optional, Set

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from crieur.domain.entities import Connection


class ConnectionRegistry:
    """
    Maps each live connection handle to its identity and subscriptions.

    Keeps a per-channel index of subscribed handles so fan-out cost is
    proportional to the subscriber count, not the connection count.
    Pure state with accessors; performs no I/O and never touches the
    ChannelStore (the Broker sequences both).
    """

    def __init__(self, reporter: Optional[SystemReporter] = None):
        self._connections: Dict[str, Connection] = {}
        self._channel_index: Dict[str, Set[str]] = {}
        self.reporter = reporter

    def register(self, handle: str, sink: Any = None) -> Connection:
        """
        Register a handle. Idempotent.

        Args:
            handle: Connection handle
            sink: Outbound sink for the connection (kept on first register,
                replaced only when a new one is given)

        Returns:
            The connection record
        """
        connection = self._connections.get(handle)
        if connection is None:
            connection = Connection(handle=handle, sink=sink)
            self._connections[handle] = connection

            if self.reporter:
                self.reporter.info(
                    f"{Emoji.NETWORK.CONNECTED} Connection registered: "
                    f"handle={handle}, total={len(self._connections)}",
                    context="ConnectionRegistry",
                    verbose_level=2,
                )
        elif sink is not None:
            connection.sink = sink

        return connection

    def get(self, handle: str) -> Optional[Connection]:
        return self._connections.get(handle)

    def set_identity(self, handle: str, username: str) -> Optional[str]:
        """
        Associate a username with a handle, registering it if needed.

        Returns:
            The previous username (None if there was none)
        """
        connection = self.register(handle)
        previous = connection.username
        connection.username = username
        return previous

    def subscribe(self, handle: str, channel: str) -> bool:
        """
        Add a channel to the handle's subscription set.

        Returns:
            True if the subscription is new
        """
        connection = self.register(handle)
        if channel in connection.subscribed_channels:
            return False
        connection.subscribed_channels.add(channel)
        self._channel_index.setdefault(channel, set()).add(handle)
        return True

    def unsubscribe(self, handle: str, channel: str) -> bool:
        """
        Remove a channel from the handle's subscription set.

        Returns:
            True if the handle was subscribed
        """
        connection = self._connections.get(handle)
        if connection is None or channel not in connection.subscribed_channels:
            return False
        connection.subscribed_channels.discard(channel)
        self._drop_from_index(channel, handle)
        return True

    def _drop_from_index(self, channel: str, handle: str) -> None:
        handles = self._channel_index.get(channel)
        if handles is None:
            return
        handles.discard(handle)
        if not handles:
            del self._channel_index[channel]

    def deregister(self, handle: str) -> Optional[Connection]:
        """
        Remove a handle and return its record for teardown.

        Returns:
            The removed Connection, or None if the handle was unknown
        """
        connection = self._connections.pop(handle, None)
        if connection is None:
            return None

        for channel in connection.subscribed_channels:
            self._drop_from_index(channel, handle)

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.DISCONNECT} Connection deregistered: "
                f"handle={handle}, user={connection.username}, "
                f"channels={len(connection.subscribed_channels)}, "
                f"total={len(self._connections)}",
                context="ConnectionRegistry",
                verbose_level=2,
            )

        return connection

    def subscribers_of(self, channel: str) -> List[str]:
        """
        Handles currently subscribed to a channel.

        Returns a fresh list built from the registry state at call time.
        """
        return sorted(self._channel_index.get(channel, ()))

    def has_other_member(
        self, channel: str, username: str, exclude_handle: str
    ) -> bool:
        """
        Check whether another live handle holds username in channel.

        Args:
            channel: Channel name
            username: Username to look for
            exclude_handle: Handle to ignore (the one leaving)
        """
        for handle in self._channel_index.get(channel, ()):
            if handle == exclude_handle:
                continue
            if self._connections[handle].username == username:
                return True
        return False

    def handles(self) -> List[str]:
        """Snapshot of all registered handles."""
        return list(self._connections)

    def size(self) -> int:
        return len(self._connections)

    def __contains__(self, handle: str) -> bool:
        return handle in self._connections
