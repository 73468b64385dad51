"""
API routes for Crieur.
"""

from crieur.presentation.api.routes.channels import router as channels_router
from crieur.presentation.api.routes.health import router as health_router
from crieur.presentation.api.routes.metrics import router as metrics_router
from crieur.presentation.api.routes.publish import router as publish_router
from crieur.presentation.api.routes.websocket import router as websocket_router

__all__ = [
    "channels_router",
    "health_router",
    "metrics_router",
    "publish_router",
    "websocket_router",
]
