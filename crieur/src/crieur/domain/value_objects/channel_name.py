"""
ChannelName value object - immutable channel name with validation.
"""

from dataclasses import dataclass
from typing import ClassVar

from crieur.domain.exceptions import InvalidChannelNameError


@dataclass(frozen=True)
class ChannelName:
    """
    Value object representing a validated channel name.

    Channel naming rules:
    - Not empty or whitespace only
    - Maximum 100 characters by default

    Examples:
        - general
        - random
        - team-backend
    """

    name: str
    max_length: int = 100

    DEFAULT_MAX_LENGTH: ClassVar[int] = 100

    def __post_init__(self):
        """Validate channel name on creation."""
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidChannelNameError(str(self.name), "Channel name is required")

        if len(self.name) > self.max_length:
            raise InvalidChannelNameError(
                self.name,
                f"Channel name too long (max {self.max_length} characters)",
            )

    @property
    def value(self) -> str:
        """Get channel name value."""
        return self.name

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ChannelName({self.name!r})"
