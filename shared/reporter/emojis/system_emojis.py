"""
System-level operations and lifecycle emoji definitions.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class SystemEmoji(ComponentEmoji):
    """System-level operations and lifecycle events."""

    # ============================================================
    # Lifecycle Operations
    # ============================================================
    STARTUP = "🚀"  # System/component initialization
    SHUTDOWN = "🛑"  # System/component shutdown
    READY = "✅"  # Component initialized successfully

    # ============================================================
    # Configuration
    # ============================================================
    CONFIG = "⚙️"  # Configuration operation
    CONFIG_LOAD = "📋"  # Configuration loading

    # ============================================================
    # Health & Monitoring
    # ============================================================
    HEARTBEAT = "❤️"  # Liveness pass
    HEALTH_CHECK = "🩺"  # Health check performed
    PING = "🏓"  # Ping operation

    # ============================================================
    # Maintenance & Cleanup
    # ============================================================
    CLEANUP = "🧹"  # Resource cleanup
