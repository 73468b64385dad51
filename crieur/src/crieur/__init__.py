"""
Crieur - Real-time group messaging bus

Clean Architecture implementation of named channels with bounded history,
live fan-out over WebSockets and a reconnecting client session.
"""

__version__ = "0.1.0"
