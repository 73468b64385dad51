"""
Channel-related exceptions.
"""


class ChannelError(Exception):
    """Base exception for channel errors."""

    code = "CHANNEL_ERROR"


class ChannelNotFoundError(ChannelError):
    """Raised when an operation targets a channel that does not exist."""

    code = "NOT_FOUND"

    def __init__(self, channel_name: str):
        """
        Initialize ChannelNotFoundError.

        Args:
            channel_name: Name of channel that was not found
        """
        super().__init__(f"Channel not found: {channel_name}")
        self.channel_name = channel_name


class ChannelAlreadyExistsError(ChannelError):
    """Raised when creating a channel whose name is already taken."""

    code = "ALREADY_EXISTS"

    def __init__(self, channel_name: str):
        """
        Initialize ChannelAlreadyExistsError.

        Args:
            channel_name: Name that is already in use
        """
        super().__init__(f"Channel already exists: {channel_name}")
        self.channel_name = channel_name


class InvalidChannelNameError(ChannelError):
    """Raised when channel name is empty or too long."""

    code = "VALIDATION_ERROR"

    def __init__(self, channel_name: str, reason: str):
        """
        Initialize InvalidChannelNameError.

        Args:
            channel_name: Invalid channel name
            reason: Reason why name is invalid
        """
        super().__init__(reason)
        self.channel_name = channel_name
        self.reason = reason
