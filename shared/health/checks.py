"""
Health check definitions and status types.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Protocol


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    """Health status levels."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheck:
    """Result of a single health check operation."""

    name: str
    status: HealthStatus
    message: Optional[str] = None
    duration: Optional[float] = None
    timestamp: datetime = field(default_factory=utcnow)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result: Dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.message:
            result["message"] = self.message
        if self.duration is not None:
            result["duration"] = self.duration
        if self.metadata:
            result["metadata"] = self.metadata
        return result


@dataclass
class HealthReport:
    """
    Overall health report.

    Aggregates multiple health checks into one status. The overall
    status is the worst status among the checks unless given explicitly.
    """

    service: str
    version: str
    checks: Dict[str, HealthCheck] = field(default_factory=dict)
    status: Optional[HealthStatus] = None
    timestamp: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if self.status is None:
            self.status = self._worst_status()

    def _worst_status(self) -> HealthStatus:
        statuses = {check.status for check in self.checks.values()}
        if HealthStatus.UNHEALTHY in statuses:
            return HealthStatus.UNHEALTHY
        if HealthStatus.DEGRADED in statuses:
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "service": self.service,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "checks": {name: check.to_dict() for name, check in self.checks.items()},
        }

    @property
    def is_healthy(self) -> bool:
        """Check if overall status is healthy."""
        return self.status == HealthStatus.HEALTHY

    @property
    def is_ready(self) -> bool:
        """Check if service is ready (healthy or degraded)."""
        return self.status in (HealthStatus.HEALTHY, HealthStatus.DEGRADED)


class HealthChecker(Protocol):
    """Protocol for service-specific health checkers."""

    def check_liveness(self) -> HealthReport:
        """
        Perform liveness check.

        Failure indicates the service needs a restart.
        """
        ...

    def check_readiness(self) -> HealthReport:
        """
        Perform readiness check.

        Failure indicates the service should not receive traffic.
        """
        ...
