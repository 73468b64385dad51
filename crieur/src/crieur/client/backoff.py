"""
Reconnect backoff schedule for client sessions.
"""

from dataclasses import dataclass
from typing import List


@dataclass
class ReconnectBackoff:
    """
    Exponential reconnect backoff without jitter.

    Attempt n (1-based) waits min(base_delay_ms * 2**n, max_delay_ms).
    With the defaults the five attempts wait 2s, 4s, 8s, 16s and 30s;
    there is no sixth attempt.
    """

    base_delay_ms: int = 1000
    """Base delay in milliseconds"""

    max_delay_ms: int = 30000
    """Cap on a single delay in milliseconds"""

    max_attempts: int = 5
    """Attempts before giving up for good"""

    def __post_init__(self):
        if self.base_delay_ms <= 0:
            raise ValueError("base_delay_ms must be positive")
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("max_delay_ms must be at least base_delay_ms")
        if self.max_attempts < 0:
            raise ValueError("max_attempts must not be negative")

    @classmethod
    def from_settings(cls, settings) -> "ReconnectBackoff":
        """
        Build the schedule from the reconnect_* fields of Settings.

        Args:
            settings: crieur.config.Settings (or any object with the
                reconnect_max_attempts, reconnect_base_delay_ms and
                reconnect_max_delay_ms attributes)
        """
        return cls(
            base_delay_ms=settings.reconnect_base_delay_ms,
            max_delay_ms=settings.reconnect_max_delay_ms,
            max_attempts=settings.reconnect_max_attempts,
        )

    def delay_ms(self, attempt: int) -> int:
        """
        Delay before the given attempt.

        Args:
            attempt: Attempt number, starting at 1

        Returns:
            Delay in milliseconds
        """
        if attempt < 1:
            raise ValueError("attempt numbers start at 1")
        return min(self.base_delay_ms * (2**attempt), self.max_delay_ms)

    def delay(self, attempt: int) -> float:
        """Delay before the given attempt, in seconds."""
        return self.delay_ms(attempt) / 1000

    def allows(self, attempt: int) -> bool:
        """Whether an attempt with this number may still be made."""
        return 1 <= attempt <= self.max_attempts

    def schedule(self) -> List[int]:
        """Every delay this backoff will ever wait, in milliseconds."""
        return [self.delay_ms(n) for n in range(1, self.max_attempts + 1)]
