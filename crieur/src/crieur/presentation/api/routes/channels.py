"""
Channel REST endpoints.

Domain exceptions raised here are turned into JSON error responses by
the handlers in crieur.presentation.api.errors.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from crieur.application.dto import (
    ChannelInfoResponse,
    ChannelListResponse,
    ChannelResponse,
    CreateChannelRequest,
    MessageListResponse,
)
from crieur.application.use_cases import ManageChannelUseCase
from crieur.application.use_cases.manage_channel import DEFAULT_MESSAGE_LIMIT
from crieur.di import Container
from crieur.presentation.api.dependencies import get_container

router = APIRouter(prefix="/api", tags=["channels"])


def get_manage_channel_use_case(
    container: Container = Depends(get_container),
) -> ManageChannelUseCase:
    """Dependency for the channel use case."""
    return container.get_manage_channel_use_case()


@router.get("/channels", response_model=ChannelListResponse)
async def list_channels(uc: ManageChannelUseCase = Depends(get_manage_channel_use_case)):
    """List every channel with its counts."""
    return ChannelListResponse(channels=uc.list_channels())


@router.post(
    "/channels",
    response_model=ChannelResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_channel(
    request: CreateChannelRequest,
    uc: ManageChannelUseCase = Depends(get_manage_channel_use_case),
):
    """
    Create a channel.

    Returns:
        201 with the channel summary

    Errors:
        400: Missing or oversized name/createdBy
        409: Channel already exists
    """
    summary = uc.create_channel(request.name, request.created_by)
    return ChannelResponse(
        channel=summary,
        message=f"Channel '{summary['name']}' created successfully",
    )


@router.get("/channels/{name}", response_model=ChannelInfoResponse)
async def get_channel(
    name: str,
    uc: ManageChannelUseCase = Depends(get_manage_channel_use_case),
):
    """Channel info including subscribers. 404 if absent."""
    return ChannelInfoResponse(channel=uc.get_channel(name))


@router.get("/channels/{name}/messages", response_model=MessageListResponse)
async def get_channel_messages(
    name: str,
    limit: int = Query(DEFAULT_MESSAGE_LIMIT),
    uc: ManageChannelUseCase = Depends(get_manage_channel_use_case),
):
    """Most recent messages of a channel, oldest first. 404 if absent."""
    if limit < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="limit must not be negative",
        )
    return MessageListResponse(messages=uc.get_messages(name, limit or DEFAULT_MESSAGE_LIMIT))
