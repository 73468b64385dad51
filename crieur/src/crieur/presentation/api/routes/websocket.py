"""
WebSocket endpoint: the bidirectional wire protocol.
"""

import time
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from shared.reporter.emojis import Emoji

from crieur.application.dto import PublishFrame, SubscribeFrame
from crieur.di import Container
from crieur.domain.exceptions import AuthenticationError, ProtocolError
from crieur.presentation.api.dependencies import get_container

router = APIRouter(tags=["websocket"])


def _generate_connection_id() -> str:
    """Generate unique connection handle."""
    return f"conn_{uuid.uuid4().hex[:12]}"


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    container: Container = Depends(get_container),
):
    """
    WebSocket endpoint for channel subscriptions and publishing.

    Each text frame is one JSON request (subscribe/join, unsubscribe/leave,
    publish, ping). Rejected requests are answered with an error frame and
    never close the connection.

    When authentication is required, the `token` query parameter must
    carry a valid JWT; its username claim overrides the username sent in
    subscribe and publish frames.

    Connection examples:
        - ws://localhost:3001/ws
        - ws://localhost:3001/ws?token=eyJ...
    """
    connection_id = _generate_connection_id()
    reporter = container.reporter
    broker = container.broker

    identity: Optional[str] = None
    auth_use_case = container.get_authenticate_use_case()
    if auth_use_case is not None:
        try:
            identity = auth_use_case.execute(token).username
        except AuthenticationError as e:
            container.increment_stat("auth_rejections")
            reporter.warning(
                f"{Emoji.ERROR.WARNING} Connection rejected: {e} "
                f"[conn={connection_id}]",
                context="WebSocket",
                verbose_level=1,
            )
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e))
            return

    await websocket.accept()

    sink = container.create_sink(connection_id, websocket)
    sink.start()
    broker.open(connection_id, sink)
    container.increment_stat("total_connections")

    reporter.info(
        f"{Emoji.NETWORK.CONNECTED} Client connected [conn={connection_id}] "
        f"[user={identity}] [total_connections={broker.registry.size()}]",
        context="WebSocket",
        verbose_level=1,
    )

    parser = container.get_parse_frame_use_case()
    connection_start_time = time.time()
    frames_processed = 0

    try:
        while True:
            data = await websocket.receive_text()
            frames_processed += 1
            container.increment_stat("total_frames_received")

            # Torn down while waiting (writer failure or liveness reap)
            if connection_id not in broker.registry:
                break

            try:
                frame = parser.execute(data)
            except ProtocolError as e:
                container.increment_stat("protocol_errors")
                broker.reject(connection_id, e)
                continue

            if identity is not None and isinstance(frame, (SubscribeFrame, PublishFrame)):
                frame = frame.model_copy(update={"username": identity})

            reporter.debug(
                f"{Emoji.NETWORK.RECEIVE} Frame received [conn={connection_id}] "
                f"[type={frame.type}]",
                context="WebSocket",
                verbose_level=3,
            )

            broker.dispatch(connection_id, frame)

    except WebSocketDisconnect:
        reporter.info(
            f"{Emoji.NETWORK.DISCONNECTED} Client disconnected [conn={connection_id}]",
            context="WebSocket",
            verbose_level=2,
        )

    except Exception as e:
        reporter.error(
            f"{Emoji.ERROR.ERROR} WebSocket connection error [conn={connection_id}]: "
            f"{type(e).__name__}: {str(e)}",
            context="WebSocket",
        )

    finally:
        broker.teardown(connection_id)
        await sink.close()

        reporter.info(
            f"Connection closed [conn={connection_id}] "
            f"[duration={time.time() - connection_start_time:.2f}s] "
            f"[frames={frames_processed}] [dropped={sink.dropped}]",
            context="WebSocket",
            verbose_level=2,
        )
