"""
Network operations and communication emoji definitions.

Covers WebSocket connections, data flow and reconnection.

Usage:
    >>> from shared.reporter.emojis import NetworkEmoji
    >>> print(f"{NetworkEmoji.CONNECTED} WebSocket connected")
    🔗 WebSocket connected
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class NetworkEmoji(ComponentEmoji):
    """
    Network operations and communication.

    Categories:
        - Connection: Connect, disconnect, reconnect
        - Data Flow: Send, receive, broadcast
    """

    # ============================================================
    # Connection States
    # ============================================================

    CONNECTED = "🔗"  # Connection established
    DISCONNECT = "🔌"  # Connection closed
    DISCONNECTED = "⚠️"  # Connection lost
    RECONNECTING = "🔄"  # Reconnection attempt
    TIMEOUT = "⏱️"  # Connection timeout

    # ============================================================
    # Data Flow
    # ============================================================

    SEND = "📤"  # Data sent
    RECEIVE = "📥"  # Data received
    BROADCAST = "📡"  # Broadcasting to subscribers

    # ============================================================
    # Subscriptions
    # ============================================================

    SUBSCRIPTION = "📬"  # Channel subscription
    UNSUBSCRIBE = "📭"  # Channel unsubscription
