"""
Metrics endpoint.

Provides operational counters about the Crieur service.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from crieur.di import Container
from crieur.presentation.api.dependencies import get_container

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
async def get_metrics(container: Container = Depends(get_container)):
    """
    Get Crieur service metrics.

    Returns:
        connectedSockets, activeChannels, totalMessages and timestamp,
        plus an extended `stats` block with runtime counters
    """
    broker = container.broker
    metrics = broker.metrics()
    metrics["timestamp"] = datetime.now(timezone.utc).isoformat()
    metrics["stats"] = {
        **broker.stats,
        "total_connections": container.stats["total_connections"],
        "total_frames_received": container.stats["total_frames_received"],
        "protocol_errors": container.stats["protocol_errors"],
        "auth_rejections": container.stats["auth_rejections"],
        "uptime_seconds": round(container.get_uptime_seconds(), 3),
    }
    return metrics
