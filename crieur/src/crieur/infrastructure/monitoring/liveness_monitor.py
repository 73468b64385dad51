"""
Periodic liveness probing of registered connections.
"""

import asyncio
from typing import List, Optional

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji

from crieur.domain.exceptions import TransportFailure
from crieur.infrastructure.websocket import Broker, ConnectionRegistry


class LivenessMonitor:
    """
    Probes every registered connection on a fixed interval and tears down
    the ones that cannot be reached.

    All handles of a pass are probed concurrently, each bounded by its own
    timeout, so one unresponsive peer never delays reaping of the others.
    Probing holds no Broker state: the handle list is snapshotted first and
    teardown goes through the Broker like any other close.
    """

    def __init__(
        self,
        broker: Broker,
        registry: ConnectionRegistry,
        interval_ms: int = 30000,
        probe_timeout_ms: int = 5000,
        reporter: Optional[SystemReporter] = None,
    ):
        """
        Initialize LivenessMonitor.

        Args:
            broker: Broker used for teardown
            registry: Registry to read handles and sinks from
            interval_ms: Delay between passes
            probe_timeout_ms: Bound on a single handle's probe
            reporter: Optional SystemReporter for logging
        """
        self.broker = broker
        self.registry = registry
        self.interval = interval_ms / 1000
        self.probe_timeout = probe_timeout_ms / 1000
        self.reporter = reporter

        self._task: Optional[asyncio.Task] = None
        self.passes = 0
        self.reaped = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the probing loop on the running event loop."""
        if self.is_running:
            return

        self._task = asyncio.create_task(self._loop(), name="liveness-monitor")

        if self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.HEARTBEAT} Liveness monitor started "
                f"(interval: {self.interval}s, probe timeout: {self.probe_timeout}s)",
                context="LivenessMonitor",
                verbose_level=1,
            )

    async def stop(self) -> None:
        """Cancel the probing loop and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

        if self.reporter:
            self.reporter.info(
                f"{Emoji.SYSTEM.SHUTDOWN} Liveness monitor stopped "
                f"[passes={self.passes}] [reaped={self.reaped}]",
                context="LivenessMonitor",
                verbose_level=1,
            )

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.run_once()
            except Exception as e:
                if self.reporter:
                    self.reporter.error(
                        f"{Emoji.ERROR.ERROR} Liveness pass failed: "
                        f"{type(e).__name__}: {e}",
                        context="LivenessMonitor",
                    )

    async def run_once(self) -> List[str]:
        """
        Run a single probing pass.

        Returns:
            Handles torn down during this pass
        """
        self.passes += 1
        handles = self.registry.handles()
        if not handles:
            return []

        if self.reporter:
            self.reporter.debug(
                f"{Emoji.SYSTEM.PING} Probing {len(handles)} connections",
                context="LivenessMonitor",
                verbose_level=3,
            )

        results = await asyncio.gather(
            *(self._probe(handle) for handle in handles)
        )
        dead = [handle for handle, alive in zip(handles, results) if not alive]

        # Teardown is synchronous: every dead handle is gone before any close
        sinks = []
        for handle in dead:
            connection = self.broker.teardown(handle)
            if connection is not None and connection.sink is not None:
                sinks.append(connection.sink)

        self.reaped += len(dead)

        if sinks:
            await asyncio.gather(
                *(self._close_sink(sink) for sink in sinks),
                return_exceptions=True,
            )

        if dead and self.reporter:
            self.reporter.warning(
                f"{Emoji.NETWORK.TIMEOUT} Reaped {len(dead)} dead connections: "
                f"{dead}",
                context="LivenessMonitor",
                verbose_level=1,
            )

        return dead

    async def _close_sink(self, sink) -> None:
        """Close a reaped sink, bounded by the probe timeout."""
        try:
            await asyncio.wait_for(
                sink.close(code=1001, reason="Liveness probe failed"),
                timeout=self.probe_timeout,
            )
        except asyncio.TimeoutError:
            if self.reporter:
                self.reporter.warning(
                    f"{Emoji.NETWORK.TIMEOUT} Close handshake timed out "
                    f"[conn={getattr(sink, 'handle', '?')}]",
                    context="LivenessMonitor",
                    verbose_level=2,
                )

    async def _probe(self, handle: str) -> bool:
        connection = self.registry.get(handle)
        if connection is None:
            # Already torn down by someone else
            return True
        if connection.sink is None:
            return False

        try:
            await asyncio.wait_for(
                connection.sink.probe(), timeout=self.probe_timeout
            )
        except asyncio.TimeoutError:
            return False
        except TransportFailure:
            return False
        return True
