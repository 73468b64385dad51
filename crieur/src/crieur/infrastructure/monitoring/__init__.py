"""
Monitoring infrastructure for Crieur.

Provides:
- Connection liveness probing
- Health checks (liveness/readiness)
"""

from crieur.infrastructure.monitoring.crieur_health_checker import (
    CrieurHealthChecker,
)
from crieur.infrastructure.monitoring.liveness_monitor import LivenessMonitor

__all__ = [
    "CrieurHealthChecker",
    "LivenessMonitor",
]
