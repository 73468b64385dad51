"""
Integration tests for LivenessMonitor.

Usage:
    python -m crieur.tests.integration.infrastructure.test_liveness_monitor
    pytest crieur/tests/integration/infrastructure/test_liveness_monitor.py
"""

import asyncio
import time

from shared.tests import LaborantTest

from crieur.domain.exceptions import TransportFailure
from crieur.infrastructure.channels import ChannelStore
from crieur.infrastructure.monitoring import LivenessMonitor
from crieur.infrastructure.websocket import Broker, ConnectionRegistry


class ProbeSink:
    """Sink whose probe answers, fails, or hangs."""

    def __init__(self, handle: str, mode: str = "ok", stuck_close: bool = False):
        self.handle = handle
        self.mode = mode
        self.stuck_close = stuck_close
        self.frames = []
        self.closed_with = None

    def send(self, frame):
        self.frames.append(frame)

    async def probe(self):
        if self.mode == "broken":
            raise TransportFailure(self.handle, "socket gone")
        if self.mode == "hang":
            await asyncio.sleep(10)

    async def close(self, code=1000, reason=""):
        self.closed_with = (code, reason)
        if self.stuck_close:
            await asyncio.sleep(3600)


class TestLivenessMonitor(LaborantTest):
    """Integration tests for liveness probing and reaping."""

    component_name = "crieur"
    test_category = "integration"

    def setup_test(self):
        self.store = ChannelStore()
        self.store.create("general", "system")
        self.registry = ConnectionRegistry()
        self.broker = Broker(self.store, self.registry)

    def _open(self, handle: str, mode: str = "ok", **kwargs) -> ProbeSink:
        sink = ProbeSink(handle, mode, **kwargs)
        self.broker.open(handle, sink)
        self.broker.subscribe(handle, "general", f"user-{handle}")
        return sink

    # ================================================================
    # Single pass
    # ================================================================

    async def test_reaps_broken_and_unresponsive(self):
        """Test broken and hung handles are torn down, healthy ones kept."""
        self.reporter.info("Testing reaping pass", context="Test")

        monitor = LivenessMonitor(self.broker, self.registry, probe_timeout_ms=50)
        healthy = self._open("h1")
        broken = self._open("h2", mode="broken")
        hung = self._open("h3", mode="hang")

        dead = await monitor.run_once()

        assert sorted(dead) == ["h2", "h3"]
        assert self.registry.handles() == ["h1"]
        assert self.store.info("general")["subscribers"] == ["user-h1"]
        assert broken.closed_with == (1001, "Liveness probe failed")
        assert hung.closed_with == (1001, "Liveness probe failed")
        assert healthy.closed_with is None
        assert monitor.reaped == 2
        self.reporter.info("Dead handles reaped", context="Test")

    async def test_unresponsive_handles_probed_concurrently(self):
        """Test several hung handles cost one timeout, not one each."""
        self.reporter.info("Testing concurrent probing", context="Test")

        monitor = LivenessMonitor(self.broker, self.registry, probe_timeout_ms=100)
        for i in range(5):
            self._open(f"h{i}", mode="hang")

        start = time.monotonic()
        dead = await monitor.run_once()
        elapsed = time.monotonic() - start

        assert len(dead) == 5
        assert elapsed < 0.4
        self.reporter.info(f"Pass took {elapsed:.3f}s", context="Test")

    async def test_hung_close_does_not_block_other_reaps(self):
        """Test a peer whose close never returns does not hold up the pass."""
        self.reporter.info("Testing hung close handshake", context="Test")

        monitor = LivenessMonitor(self.broker, self.registry, probe_timeout_ms=100)
        stuck = self._open("a", mode="broken", stuck_close=True)
        other = self._open("b", mode="broken")

        pass_task = asyncio.create_task(monitor.run_once())
        await asyncio.sleep(0.05)

        assert self.registry.handles() == []
        assert self.store.info("general")["subscribers"] == []
        assert other.closed_with == (1001, "Liveness probe failed")
        assert stuck.closed_with == (1001, "Liveness probe failed")

        dead = await asyncio.wait_for(pass_task, timeout=1.0)

        assert sorted(dead) == ["a", "b"]
        assert monitor.reaped == 2
        self.reporter.info("Hung close bounded", context="Test")

    async def test_sinkless_connection_is_dead(self):
        """Test a registered handle without a sink is reaped."""
        self.reporter.info("Testing sinkless connection", context="Test")

        monitor = LivenessMonitor(self.broker, self.registry)
        self.registry.register("orphan")

        dead = await monitor.run_once()

        assert dead == ["orphan"]
        assert "orphan" not in self.registry
        self.reporter.info("Sinkless connection reaped", context="Test")

    async def test_empty_registry(self):
        """Test a pass over no connections does nothing."""
        self.reporter.info("Testing empty pass", context="Test")

        monitor = LivenessMonitor(self.broker, self.registry)

        assert await monitor.run_once() == []
        assert monitor.passes == 1
        self.reporter.info("Empty pass ok", context="Test")

    # ================================================================
    # Loop lifecycle
    # ================================================================

    async def test_loop_runs_until_stopped(self):
        """Test start() probes on the interval and stop() ends the loop."""
        self.reporter.info("Testing monitor loop", context="Test")

        monitor = LivenessMonitor(
            self.broker, self.registry, interval_ms=20, probe_timeout_ms=10
        )
        self._open("h1", mode="broken")

        monitor.start()
        assert monitor.is_running
        await asyncio.sleep(0.1)
        await monitor.stop()

        assert not monitor.is_running
        assert monitor.passes >= 2
        assert monitor.reaped == 1
        assert self.registry.size() == 0
        self.reporter.info("Loop started and stopped", context="Test")


if __name__ == "__main__":
    TestLivenessMonitor.run_as_main()
