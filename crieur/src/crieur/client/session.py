"""
Reconnecting client session for the Crieur WebSocket protocol.
"""

import asyncio
import json
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set
from urllib.parse import urlencode

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException
from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from crieur.client.backoff import ReconnectBackoff

ConnectFn = Callable[[str], Awaitable[Any]]
FrameCallback = Callable[[Dict[str, Any]], None]


class SessionState(str, Enum):
    """Lifecycle states of a ClientSession."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"
    FAILED = "failed"


class SessionNotConnected(RuntimeError):
    """Raised when sending while the session has no open connection."""


class ClientSession:
    """
    One user's connection to a Crieur server.

    Keeps the set of active channels and their message history. On an
    unexpected drop it reconnects with ReconnectBackoff; after a
    successful reconnect every active channel is subscribed again before
    the session reports itself connected, so no publish can slip in
    ahead of the re-subscription. When the attempts are used up the
    session moves to FAILED and stays there.

    The reconnect loop is a task owned by the session; close() cancels it
    together with the reader, so no retry fires after an intentional
    disconnect.

    Example:
        session = ClientSession("ws://localhost:3001/ws", "alice")
        await session.connect()
        await session.subscribe("general")
        await session.publish("general", "hello")
        ...
        await session.close()
    """

    def __init__(
        self,
        url: str,
        username: str,
        token: Optional[str] = None,
        backoff: Optional[ReconnectBackoff] = None,
        connect: ConnectFn = websockets.connect,
        on_frame: Optional[FrameCallback] = None,
        on_state_change: Optional[Callable[[SessionState], None]] = None,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize ClientSession.

        Args:
            url: Server WebSocket URL (e.g. ws://localhost:3001/ws)
            username: Identity sent with subscribe and publish frames
            token: Optional JWT appended as ?token=
            backoff: Reconnect schedule (defaults: 1s base, 30s cap, 5 tries)
            connect: Coroutine function opening a connection to a URL
            on_frame: Called with every server frame that is not a
                duplicate new_message
            on_state_change: Called with the new state on every transition
            reporter: Optional SystemReporter for logging
        """
        self.url = url if not token else f"{url}?{urlencode({'token': token})}"
        self.username = username
        self.backoff = backoff or ReconnectBackoff()
        self._connect = connect
        self.on_frame = on_frame
        self.on_state_change = on_state_change
        self.reporter = reporter

        self._state = SessionState.DISCONNECTED
        self._ws: Any = None
        self._reader_task: Optional[asyncio.Task] = None
        self._reconnect_task: Optional[asyncio.Task] = None

        self.active_channels: Set[str] = set()
        self.messages: Dict[str, List[Dict[str, Any]]] = {}
        self._seen_ids: Dict[str, Set[str]] = {}
        self.attempts = 0
        self.duplicates_dropped = 0
        self.frames_failed = 0

    # ================================================================
    # State
    # ================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == SessionState.CONNECTED

    @property
    def reconnect_task(self) -> Optional[asyncio.Task]:
        return self._reconnect_task

    def _set_state(self, state: SessionState) -> None:
        if state == self._state:
            return
        self._state = state

        if self.reporter:
            self.reporter.debug(
                f"Session state -> {state.value} [user={self.username}]",
                context="ClientSession",
                verbose_level=3,
            )

        if self.on_state_change:
            self.on_state_change(state)

    # ================================================================
    # Public API
    # ================================================================

    async def connect(self) -> None:
        """
        Open the connection.

        Raises:
            RuntimeError: If the session was closed or has failed
            OSError, WebSocketException: If the first connection attempt
                fails (no automatic retry for the initial connect)
        """
        if self._state in (SessionState.CLOSED, SessionState.FAILED):
            raise RuntimeError(f"Session is {self._state.value}")
        if self._state in (SessionState.CONNECTED, SessionState.CONNECTING):
            return

        self._set_state(SessionState.CONNECTING)
        try:
            ws = await self._connect(self.url)
        except BaseException:
            self._set_state(SessionState.DISCONNECTED)
            raise

        await self._attach(ws)

        if self.reporter:
            self.reporter.info(
                f"{Emoji.NETWORK.CONNECTED} Connected to {self.url} "
                f"[user={self.username}]",
                context="ClientSession",
                verbose_level=1,
            )

    async def subscribe(self, channel: str) -> None:
        """
        Mark a channel active and subscribe to it.

        While disconnected the channel is only recorded; it is subscribed
        as soon as a connection is back.
        """
        self.active_channels.add(channel)
        if self.is_connected:
            await self._send_subscribe(channel)

    async def unsubscribe(self, channel: str) -> None:
        self.active_channels.discard(channel)
        if self.is_connected:
            await self._send({"type": "unsubscribe", "channel": channel})

    async def publish(self, channel: str, text: str) -> None:
        """
        Publish a message.

        Raises:
            SessionNotConnected: If there is no open connection
        """
        self._require_connected()
        await self._send(
            {
                "type": "publish",
                "channel": channel,
                "text": text,
                "username": self.username,
            }
        )

    async def ping(self) -> None:
        self._require_connected()
        await self._send({"type": "ping"})

    async def close(self) -> None:
        """
        Disconnect for good.

        Cancels any pending reconnect and forgets the active channels.
        Safe to call more than once.
        """
        self._set_state(SessionState.CLOSED)

        for task in (self._reconnect_task, self._reader_task):
            if task is not None and task is not asyncio.current_task():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._reconnect_task = None
        self._reader_task = None

        await self._close_ws()

        self.active_channels.clear()
        self.messages.clear()
        self._seen_ids.clear()

    async def wait_reconnected(self) -> None:
        """Wait for a running reconnect loop to finish (success or failure)."""
        task = self._reconnect_task
        if task is not None:
            await asyncio.shield(task)

    # ================================================================
    # Connection handling
    # ================================================================

    async def _attach(self, ws: Any) -> None:
        """Adopt an open connection: re-subscribe, then start reading."""
        self._ws = ws
        self.attempts = 0

        for channel in sorted(self.active_channels):
            await self._send_subscribe(channel)

        self._reader_task = asyncio.create_task(
            self._reader(ws), name=f"session-reader-{self.username}"
        )
        self._set_state(SessionState.CONNECTED)

    async def _reader(self, ws: Any) -> None:
        try:
            async for raw in ws:
                try:
                    self._handle_raw(raw)
                except Exception as e:
                    self.frames_failed += 1
                    if self.reporter:
                        self.reporter.error(
                            f"{Emoji.ERROR.ERROR} Failed to handle frame "
                            f"[user={self.username}]: {type(e).__name__}: {e}",
                            context="ClientSession",
                        )
        except ConnectionClosed:
            pass

        if self._ws is ws and self._state == SessionState.CONNECTED:
            self._on_drop()

    def _on_drop(self) -> None:
        self._ws = None
        self._reader_task = None
        self._set_state(SessionState.RECONNECTING)

        if self.reporter:
            self.reporter.warning(
                f"{Emoji.NETWORK.DISCONNECTED} Connection lost, reconnecting "
                f"[user={self.username}]",
                context="ClientSession",
                verbose_level=1,
            )

        self._reconnect_task = asyncio.create_task(
            self._reconnect_loop(), name=f"session-reconnect-{self.username}"
        )

    async def _reconnect_loop(self) -> None:
        attempt = 0
        while self.backoff.allows(attempt + 1):
            attempt += 1
            self.attempts = attempt
            delay = self.backoff.delay(attempt)

            if self.reporter:
                self.reporter.info(
                    f"{Emoji.NETWORK.RECONNECTING} Reconnecting in {delay:.1f}s "
                    f"(attempt {attempt}/{self.backoff.max_attempts})",
                    context="ClientSession",
                    verbose_level=1,
                )

            await asyncio.sleep(delay)

            try:
                ws = await self._connect(self.url)
            except (OSError, WebSocketException, asyncio.TimeoutError) as e:
                if self.reporter:
                    self.reporter.warning(
                        f"{Emoji.ERROR.RETRY} Reconnect attempt {attempt} failed: "
                        f"{type(e).__name__}: {e}",
                        context="ClientSession",
                        verbose_level=2,
                    )
                continue

            try:
                await self._attach(ws)
            except (OSError, WebSocketException) as e:
                self._ws = None
                try:
                    await ws.close()
                except (OSError, WebSocketException):
                    pass
                if self.reporter:
                    self.reporter.warning(
                        f"{Emoji.ERROR.RETRY} Re-subscribe after reconnect failed: "
                        f"{type(e).__name__}: {e}",
                        context="ClientSession",
                        verbose_level=2,
                    )
                continue

            self._reconnect_task = None
            if self.reporter:
                self.reporter.info(
                    f"{Emoji.NETWORK.CONNECTED} Reconnected after {attempt} attempts, "
                    f"re-subscribed to {len(self.active_channels)} channels",
                    context="ClientSession",
                    verbose_level=1,
                )
            return

        self._reconnect_task = None
        self._set_state(SessionState.FAILED)

        if self.reporter:
            self.reporter.error(
                f"{Emoji.ERROR.GAVE_UP} Max reconnection attempts reached "
                f"({self.backoff.max_attempts})",
                context="ClientSession",
            )

    async def _close_ws(self) -> None:
        ws = self._ws
        self._ws = None
        if ws is None:
            return
        try:
            await ws.close()
        except (OSError, WebSocketException):
            pass

    # ================================================================
    # Frames
    # ================================================================

    def _require_connected(self) -> None:
        if not self.is_connected:
            raise SessionNotConnected(
                f"Session is {self._state.value}, not connected"
            )

    async def _send_subscribe(self, channel: str) -> None:
        await self._send(
            {"type": "subscribe", "channel": channel, "username": self.username}
        )

    async def _send(self, frame: Dict[str, Any]) -> None:
        if self._ws is None:
            raise SessionNotConnected("No open connection")
        await self._ws.send(json.dumps(frame))

    def _handle_raw(self, raw: Any) -> None:
        try:
            frame = json.loads(raw)
        except (TypeError, ValueError):
            if self.reporter:
                self.reporter.warning(
                    f"Unparseable frame dropped: {raw!r:.80}",
                    context="ClientSession",
                    verbose_level=2,
                )
            return
        if isinstance(frame, dict):
            self.handle_frame(frame)

    def handle_frame(self, frame: Dict[str, Any]) -> None:
        """
        Apply one server frame to the local channel state.

        A history frame replaces the channel's messages; a new_message
        whose id is already known for its channel is dropped.
        """
        kind = frame.get("type")

        if kind == "messages":
            channel = frame.get("channel")
            history = [m for m in frame.get("messages") or [] if isinstance(m, dict)]
            self.messages[channel] = history
            self._seen_ids[channel] = {m.get("id") for m in history}

        elif kind == "new_message":
            message = frame.get("message") or {}
            channel = message.get("channel")
            seen = self._seen_ids.setdefault(channel, set())
            if message.get("id") in seen:
                self.duplicates_dropped += 1
                return
            seen.add(message.get("id"))
            self.messages.setdefault(channel, []).append(message)

        elif kind == "error" and self.reporter:
            self.reporter.warning(
                f"{Emoji.ERROR.WARNING} Server error: {frame.get('message')}",
                context="ClientSession",
                verbose_level=1,
            )

        if self.on_frame:
            self.on_frame(frame)
