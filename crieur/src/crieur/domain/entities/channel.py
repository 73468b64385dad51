"""
Channel entity - named topic with bounded history and subscribers.
"""

from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional, Set

from crieur.domain.value_objects import Message


class Channel:
    """
    Channel entity representing a group-messaging topic.

    Holds the most recent messages (oldest evicted first once
    max_messages is reached) and the usernames currently subscribed.

    Attributes:
        name: Channel name, unique among live channels
        created_by: Username that created the channel
        created_at: Channel creation timestamp
        max_messages: History bound
    """

    def __init__(
        self,
        name: str,
        created_by: str,
        max_messages: int = 50,
        created_at: Optional[datetime] = None,
    ):
        """
        Initialize Channel entity.

        Args:
            name: Channel name
            created_by: Creator username
            max_messages: Maximum number of retained messages
            created_at: Optional creation timestamp

        Raises:
            ValueError: If max_messages is not positive
        """
        if max_messages < 1:
            raise ValueError("max_messages must be at least 1")

        self._name = name
        self._created_by = created_by
        self._created_at = created_at or datetime.now(timezone.utc)
        self._messages: Deque[Message] = deque(maxlen=max_messages)
        self._subscribers: Set[str] = set()

    @property
    def name(self) -> str:
        return self._name

    @property
    def created_by(self) -> str:
        return self._created_by

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def max_messages(self) -> int:
        return self._messages.maxlen

    @property
    def subscribers(self) -> Set[str]:
        """Copy of the subscribed usernames."""
        return set(self._subscribers)

    @property
    def user_count(self) -> int:
        return len(self._subscribers)

    @property
    def message_count(self) -> int:
        return len(self._messages)

    def append(self, message: Message) -> None:
        """Append a message, evicting the oldest one when full."""
        self._messages.append(message)

    def recent(self, limit: Optional[int] = None) -> List[Message]:
        """
        Get the most recent messages in publish order.

        Args:
            limit: Number of messages to return; None or 0 for all

        Returns:
            List of messages, oldest first

        Raises:
            ValueError: If limit is negative
        """
        if limit is not None and limit < 0:
            raise ValueError("limit cannot be negative")
        messages = list(self._messages)
        if not limit:
            return messages
        return messages[-limit:]

    def add_subscriber(self, username: str) -> None:
        self._subscribers.add(username)

    def remove_subscriber(self, username: str) -> bool:
        """
        Remove a username from the subscriber set.

        Returns:
            True if the username was subscribed
        """
        if username in self._subscribers:
            self._subscribers.remove(username)
            return True
        return False

    def has_subscriber(self, username: str) -> bool:
        return username in self._subscribers

    def summary(self) -> Dict[str, Any]:
        """Channel summary without messages or subscriber names."""
        return {
            "name": self._name,
            "userCount": self.user_count,
            "messageCount": self.message_count,
            "createdAt": self._created_at.isoformat(),
            "createdBy": self._created_by,
        }

    def info(self) -> Dict[str, Any]:
        """Channel summary plus the sorted subscriber list."""
        info = self.summary()
        info["subscribers"] = sorted(self._subscribers)
        return info

    def __repr__(self) -> str:
        return (
            f"Channel(name={self._name}, users={self.user_count}, "
            f"messages={self.message_count}/{self.max_messages})"
        )
