"""
Health check API routes.

Kubernetes-compatible liveness and readiness probes.
"""

from fastapi import APIRouter, Depends, Response, status

from crieur.di import Container
from crieur.infrastructure.monitoring import CrieurHealthChecker
from crieur.presentation.api.dependencies import get_container

router = APIRouter(tags=["health"])


def get_health_checker(container: Container = Depends(get_container)):
    """Dependency for health checker."""
    return container.get_health_checker()


@router.get("/health/live", status_code=status.HTTP_200_OK)
async def liveness_probe(
    response: Response,
    health_checker: CrieurHealthChecker = Depends(get_health_checker),
):
    """
    Liveness probe endpoint.

    Returns 200 if service is alive, 503 if dead.
    """
    report = health_checker.check_liveness()

    if not report.is_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return report.to_dict()


@router.get("/health/ready", status_code=status.HTTP_200_OK)
async def readiness_probe(
    response: Response,
    health_checker: CrieurHealthChecker = Depends(get_health_checker),
):
    """
    Readiness probe endpoint.

    Returns 200 if ready (healthy or degraded), 503 if not ready.
    """
    report = health_checker.check_readiness()

    if not report.is_ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return report.to_dict()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check_endpoint(
    response: Response,
    health_checker: CrieurHealthChecker = Depends(get_health_checker),
):
    """General health check endpoint (alias for readiness)."""
    return await readiness_probe(response, health_checker)
