"""
Main Emoji registry class with centralized access to all emoji categories.

Usage:
    >>> from shared.reporter.emojis import Emoji
    >>>
    >>> Emoji.SYSTEM.STARTUP        # "🚀"
    >>> Emoji.NETWORK.BROADCAST     # "📡"
    >>> Emoji.format("SYSTEM", "STARTUP", "Server started")
    '🚀 Server started'
"""

from typing import Dict, Type

from shared.reporter.emojis.base_emojis import ComponentEmoji
from shared.reporter.emojis.errors_emojis import ErrorEmoji
from shared.reporter.emojis.messaging_emojis import MessageEmoji
from shared.reporter.emojis.network_emojis import NetworkEmoji
from shared.reporter.emojis.system_emojis import SystemEmoji


class Emoji:
    """
    Central emoji registry with semantic categories.

    Categories:
        SYSTEM: System operations and lifecycle
        NETWORK: Connections and data flow
        MESSAGE: Channels and message delivery
        ERROR: Error levels and recovery
    """

    # ============================================================
    # Emoji Categories
    # ============================================================

    SYSTEM = SystemEmoji
    NETWORK = NetworkEmoji
    MESSAGE = MessageEmoji
    ERROR = ErrorEmoji

    # ============================================================
    # Common Shortcuts
    # ============================================================

    SUCCESS = "✅"
    FAILURE = "❌"
    WARNING = "⚠️"

    @classmethod
    def get_all_categories(cls) -> Dict[str, Type[ComponentEmoji]]:
        """
        Get all emoji categories.

        Returns:
            Dictionary mapping category name to emoji class
        """
        return {
            name: value
            for name, value in vars(cls).items()
            if isinstance(value, type) and issubclass(value, ComponentEmoji)
        }

    @classmethod
    def get(cls, category: str, name: str, default: str = "❓") -> str:
        """
        Get emoji by category and name.

        Args:
            category: Category name (e.g., "SYSTEM")
            name: Emoji name within category (e.g., "STARTUP")
            default: Returned when category or name is unknown

        Returns:
            Emoji character
        """
        emoji_class = cls.get_all_categories().get(category.upper())
        if emoji_class is None:
            return default
        return emoji_class.get_all().get(name.upper(), default)

    @classmethod
    def format(cls, category: str, name: str, message: str) -> str:
        """
        Format message with emoji prefix.

        Args:
            category: Category name
            name: Emoji name
            message: Message text

        Returns:
            Message prefixed with the emoji
        """
        return f"{cls.get(category, name)} {message}"
