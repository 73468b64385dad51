"""
Domain value objects for Crieur.
"""
from crieur.domain.value_objects.channel_name import ChannelName
from crieur.domain.value_objects.message import (
    Message,
    MessageKind,
    generate_message_id,
)

__all__ = ["ChannelName", "Message", "MessageKind", "generate_message_id"]
