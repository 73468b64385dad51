"""
Channel and chat message emoji definitions.

Usage:
    >>> from shared.reporter.emojis import MessageEmoji
    >>> print(f"{MessageEmoji.CHANNEL} Channel created")
    💬 Channel created
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class MessageEmoji(ComponentEmoji):
    """
    Channels and message delivery.

    Categories:
        - Channels: Creation, history
        - Delivery: Queue, drop, failure
    """

    # ============================================================
    # Channels
    # ============================================================

    CHANNEL = "💬"  # Channel created
    HISTORY = "📜"  # History replay
    PUBLISHED = "📝"  # Message appended

    # ============================================================
    # Queue & Delivery
    # ============================================================

    QUEUED = "📬"  # Frame queued
    DELIVERED = "✅"  # Frame delivered
    DROPPED = "🗑️"  # Frame dropped (slow consumer)
    FAILED = "❌"  # Delivery failed
