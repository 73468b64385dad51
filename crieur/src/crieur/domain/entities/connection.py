"""
Connection entity - one live transport session.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Set


class Connection:
    """
    Connection entity tracked by the ConnectionRegistry.

    Attributes:
        handle: Opaque connection identifier, never reused while alive
        username: Identity last asserted by the peer (None until a subscribe)
        subscribed_channels: Channels this connection receives broadcasts for
        sink: Outbound sink owned by the transport layer (referenced only)
        connected_at: Registration timestamp
    """

    def __init__(
        self,
        handle: str,
        sink: Any = None,
        username: Optional[str] = None,
        connected_at: Optional[datetime] = None,
    ):
        self.handle: str = handle
        self.sink = sink
        self.username: Optional[str] = username
        self.subscribed_channels: Set[str] = set()
        self.connected_at: datetime = connected_at or datetime.now(timezone.utc)

    def is_identified(self) -> bool:
        """Check if the peer has asserted a username."""
        return self.username is not None

    def __eq__(self, other) -> bool:
        if not isinstance(other, Connection):
            return False
        return self.handle == other.handle

    def __hash__(self) -> int:
        return hash(self.handle)

    def __repr__(self) -> str:
        who = f"username={self.username}" if self.username else "anonymous"
        return (
            f"Connection(handle={self.handle}, {who}, "
            f"channels={sorted(self.subscribed_channels)})"
        )
