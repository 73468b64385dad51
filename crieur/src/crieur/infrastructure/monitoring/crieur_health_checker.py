"""
Crieur Health Checker implementation.

Implements HealthChecker protocol from shared.health.
"""

import time
from typing import Optional

from shared.health import HealthCheck, HealthChecker, HealthReport, HealthStatus

from crieur import __version__
from crieur.infrastructure.monitoring.liveness_monitor import LivenessMonitor
from crieur.infrastructure.websocket import Broker

SERVICE_NAME = "crieur"


class CrieurHealthChecker(HealthChecker):
    """
    Health checker for the Crieur message bus.

    Checks:
    - Service liveness (basic check)
    - Broker state (channel store and registry readable)
    - Liveness monitor running
    """

    def __init__(
        self,
        broker: Optional[Broker] = None,
        liveness_monitor: Optional[LivenessMonitor] = None,
    ):
        self.broker = broker
        self.liveness_monitor = liveness_monitor

    def check_liveness(self) -> HealthReport:
        """
        Liveness probe - is the service alive?

        Returns basic service info without checking dependencies.
        """
        checks = {
            "service": HealthCheck(
                name=SERVICE_NAME,
                status=HealthStatus.HEALTHY,
                message="Service is alive",
            )
        }
        return HealthReport(service=SERVICE_NAME, version=__version__, checks=checks)

    def check_readiness(self) -> HealthReport:
        """
        Readiness probe - can the service take traffic?

        Unhealthy without a broker; degraded when the liveness monitor
        is not running (dead connections would pile up).
        """
        checks = {"broker": self._check_broker()}
        if self.liveness_monitor is not None:
            checks["liveness_monitor"] = self._check_liveness_monitor()

        return HealthReport(service=SERVICE_NAME, version=__version__, checks=checks)

    def _check_broker(self) -> HealthCheck:
        if self.broker is None:
            return HealthCheck(
                name="broker",
                status=HealthStatus.UNHEALTHY,
                message="Broker not initialized",
            )

        start = time.time()
        try:
            metrics = self.broker.metrics()
        except Exception as e:
            return HealthCheck(
                name="broker",
                status=HealthStatus.UNHEALTHY,
                message=f"Broker check failed: {e}",
                duration=time.time() - start,
            )

        return HealthCheck(
            name="broker",
            status=HealthStatus.HEALTHY,
            message=(
                f"Operational ({metrics['activeChannels']} channels, "
                f"{metrics['connectedSockets']} connections)"
            ),
            duration=time.time() - start,
            metadata=metrics,
        )

    def _check_liveness_monitor(self) -> HealthCheck:
        monitor = self.liveness_monitor
        metadata = {"passes": monitor.passes, "reaped": monitor.reaped}

        if monitor.is_running:
            return HealthCheck(
                name="liveness_monitor",
                status=HealthStatus.HEALTHY,
                message="Running",
                metadata=metadata,
            )
        return HealthCheck(
            name="liveness_monitor",
            status=HealthStatus.DEGRADED,
            message="Not running",
            metadata=metadata,
        )
