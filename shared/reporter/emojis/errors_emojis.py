"""
Error and warning level emoji definitions.

Usage:
    >>> from shared.reporter.emojis import ErrorEmoji
    >>> print(f"{ErrorEmoji.CRITICAL} Listener crashed")
    🔴 Listener crashed
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class ErrorEmoji(ComponentEmoji):
    """
    Error levels and warning indicators.

    Categories:
        - Severity: Critical, error, warning
        - Recovery: Retry, timeout
    """

    # ============================================================
    # Severity Levels
    # ============================================================

    CRITICAL = "🔴"  # Critical error (system failure)
    ERROR = "❌"  # Error (operation failed)
    WARNING = "⚠️"  # Warning (potential issue)

    # ============================================================
    # Recovery Operations
    # ============================================================

    RETRY = "🔄"  # Retry attempt
    GAVE_UP = "⛔"  # Retries exhausted
    TIMEOUT = "⏱️"  # Operation timed out
