"""
Domain entities for Crieur.
"""

from crieur.domain.entities.channel import Channel
from crieur.domain.entities.connection import Connection

__all__ = ["Channel", "Connection"]
