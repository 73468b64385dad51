"""
Outbound sinks: per-connection bounded delivery queues.
"""

import asyncio
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol

from fastapi import WebSocket
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from crieur.domain.exceptions import TransportFailure

PROBE_FRAME = {"type": "ping"}


class SlowConsumerPolicy(str, Enum):
    """What a sink does when its outbound queue is full."""

    DROP_OLDEST = "drop_oldest"
    DISCONNECT = "disconnect"


class OutboundSink(Protocol):
    """
    Transport-side endpoint the Broker pushes frames into.

    send() must never block: it either queues the frame or raises
    TransportFailure, after which the sink is closed and the Broker
    tears the handle down.
    """

    handle: str

    def send(self, frame: Dict[str, Any]) -> None: ...

    async def probe(self) -> None: ...

    async def close(self, code: int = 1000, reason: str = "") -> None: ...


class WebSocketSink:
    """
    OutboundSink over a FastAPI WebSocket.

    Frames are queued in a bounded asyncio.Queue and written by a single
    writer task, so a slow peer only ever delays its own frames. Every
    write to the socket (frames and probes) goes through one lock.
    """

    def __init__(
        self,
        handle: str,
        websocket: WebSocket,
        max_queue_size: int = 256,
        policy: SlowConsumerPolicy = SlowConsumerPolicy.DROP_OLDEST,
        on_failure: Optional[Callable[[str], None]] = None,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize WebSocketSink.

        Args:
            handle: Connection handle
            websocket: Accepted WebSocket
            max_queue_size: Outbound queue bound
            policy: Overflow policy
            on_failure: Called with the handle when the writer hits a
                broken transport
            reporter: Optional SystemReporter for logging
        """
        self.handle = handle
        self.websocket = websocket
        self.policy = SlowConsumerPolicy(policy)
        self.on_failure = on_failure
        self.reporter = reporter

        self._queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue(maxsize=max_queue_size)
        self._write_lock = asyncio.Lock()
        self._writer_task: Optional[asyncio.Task] = None
        self._close_task: Optional[asyncio.Task] = None
        self._closed = False
        self.dropped = 0
        self.delivered = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """Start the writer task on the running loop."""
        if self._writer_task is None:
            self._writer_task = asyncio.create_task(
                self._writer(), name=f"sink-writer-{self.handle}"
            )

    def send(self, frame: Dict[str, Any]) -> None:
        """
        Queue a frame for delivery without blocking.

        Raises:
            TransportFailure: If the sink is closed, or the queue is full
                under the disconnect policy
        """
        if self._closed:
            raise TransportFailure(self.handle, "connection closed")

        try:
            self._queue.put_nowait(frame)
            return
        except asyncio.QueueFull:
            pass

        if self.policy == SlowConsumerPolicy.DISCONNECT:
            self._abort("outbound queue full")
            raise TransportFailure(self.handle, "outbound queue full")

        self._queue.get_nowait()
        self._queue.put_nowait(frame)
        self.dropped += 1

        if self.reporter:
            self.reporter.warning(
                f"{Emoji.MESSAGE.DROPPED} Slow consumer, oldest frame dropped "
                f"[conn={self.handle}] [dropped={self.dropped}]",
                context="WebSocketSink",
                verbose_level=2,
            )

    async def _writer(self) -> None:
        while True:
            frame = await self._queue.get()
            try:
                async with self._write_lock:
                    await self.websocket.send_json(frame)
                self.delivered += 1
            except Exception as e:
                if self.reporter:
                    self.reporter.warning(
                        f"{Emoji.MESSAGE.FAILED} Delivery failed "
                        f"[conn={self.handle}]: {type(e).__name__}: {e}",
                        context="WebSocketSink",
                        verbose_level=2,
                    )
                self._closed = True
                if self.on_failure:
                    self.on_failure(self.handle)
                return

    async def probe(self, timeout: Optional[float] = None) -> None:
        """
        Write a liveness ping straight to the socket.

        Args:
            timeout: Optional bound in seconds (lock wait included)

        Raises:
            TransportFailure: If the socket is closed, broken or too slow
        """
        if self._closed:
            raise TransportFailure(self.handle, "connection closed")

        async def _ping() -> None:
            async with self._write_lock:
                await self.websocket.send_json(PROBE_FRAME)

        try:
            if timeout is None:
                await _ping()
            else:
                await asyncio.wait_for(_ping(), timeout=timeout)
        except asyncio.TimeoutError:
            raise TransportFailure(self.handle, "probe timed out")
        except Exception as e:
            raise TransportFailure(self.handle, f"{type(e).__name__}: {e}")

    def _abort(self, reason: str) -> None:
        """Mark closed and close the socket in the background."""
        if self._closed:
            return
        self._closed = True
        if self.reporter:
            self.reporter.warning(
                f"{Emoji.NETWORK.DISCONNECTED} Disconnecting slow consumer "
                f"[conn={self.handle}] [reason={reason}]",
                context="WebSocketSink",
                verbose_level=1,
            )
        self._close_task = asyncio.get_running_loop().create_task(
            self.close(code=1008, reason=reason),
            name=f"sink-abort-{self.handle}",
        )

    async def close(self, code: int = 1000, reason: str = "") -> None:
        """Stop the writer and close the socket. Safe to call repeatedly."""
        self._closed = True

        task = self._writer_task
        self._writer_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        try:
            await self.websocket.close(code=code, reason=reason)
        except Exception:
            # Peer already gone
            pass
