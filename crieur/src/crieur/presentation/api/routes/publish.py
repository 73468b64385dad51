"""
Publishing endpoint for callers without a WebSocket.
"""

from fastapi import APIRouter, Depends

from crieur.application.dto import PublishRequest, PublishResponse
from crieur.di import Container
from crieur.presentation.api.dependencies import get_container

router = APIRouter(prefix="/api", tags=["publish"])


@router.post("/publish", response_model=PublishResponse, response_model_by_alias=True)
async def publish_message(
    publish_request: PublishRequest,
    container: Container = Depends(get_container),
):
    """
    Publish a message to a channel.

    Goes through the Broker write path, so every live subscriber of the
    channel receives a new_message frame.

    Args:
        publish_request: Channel, text and username
        container: DI container

    Returns:
        Stored message and number of subscribers reached

    Errors:
        400: Missing or oversized field
        404: Channel not found
    """
    uc = container.get_manage_channel_use_case()
    message, reached = uc.publish(
        publish_request.channel,
        publish_request.text,
        publish_request.username,
        publish_request.type,
    )
    return PublishResponse(message=message.to_dict(), clients_reached=reached)
