"""
Health check primitives for Crieur services.

Provides Kubernetes-compatible health reports with:
- Overall health status
- Liveness probe support
- Readiness probe support
"""

from shared.health.checks import (
    HealthCheck,
    HealthChecker,
    HealthReport,
    HealthStatus,
)

__all__ = [
    "HealthChecker",
    "HealthStatus",
    "HealthCheck",
    "HealthReport",
]
