"""
Message value object - immutable chat message appended to a channel.
"""

import itertools
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union


class MessageKind(str, Enum):
    """
    Kind of a channel message.

    MESSAGE is a user-authored chat line, SYSTEM an event the service
    itself records (joins, announcements).
    """

    MESSAGE = "message"
    SYSTEM = "system"

    @classmethod
    def parse(cls, value: Optional[Union[str, "MessageKind"]]) -> "MessageKind":
        """
        Coerce a wire value into a MessageKind.

        Args:
            value: Kind name, MessageKind, or None for the default kind

        Returns:
            MessageKind

        Raises:
            ValueError: If value is not a known kind
        """
        if value is None:
            return cls.MESSAGE
        return cls(value)


_sequence = itertools.count(1)
_sequence_lock = threading.Lock()


def generate_message_id() -> str:
    """
    Generate a unique, roughly time-ordered message ID.

    Millisecond timestamp plus a process-wide sequence number, so two
    messages created within the same millisecond still get distinct,
    ordered IDs.
    """
    with _sequence_lock:
        seq = next(_sequence)
    return f"{int(time.time() * 1000):x}-{seq:06x}"


@dataclass(frozen=True)
class Message:
    """
    Value object representing a message stored in a channel history.

    Messages are immutable once created.

    Attributes:
        id: Unique message identifier
        channel: Channel the message was published to
        username: Author
        text: Message body
        kind: MessageKind (serialized as "type")
        timestamp: Creation timestamp (UTC)
    """

    channel: str
    username: str
    text: str
    kind: MessageKind = MessageKind.MESSAGE
    id: str = field(default_factory=generate_message_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation of the message."""
        return {
            "id": self.id,
            "channel": self.channel,
            "username": self.username,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
            "type": self.kind.value,
        }

    def __repr__(self) -> str:
        return (
            f"Message(id={self.id}, channel={self.channel}, "
            f"username={self.username}, type={self.kind.value})"
        )
