"""
Channel state infrastructure for Crieur.
"""

from crieur.infrastructure.channels.channel_store import ChannelStore

__all__ = ["ChannelStore"]
