"""
Unit tests for ReconnectBackoff.

Usage:
    python -m crieur.tests.unit.client.test_backoff
    pytest crieur/tests/unit/client/test_backoff.py
"""

from shared.tests import LaborantTest

from crieur.client import ReconnectBackoff
from crieur.config import Settings


class TestReconnectBackoff(LaborantTest):
    """Unit tests for the reconnect schedule."""

    component_name = "crieur"
    test_category = "unit"

    def test_default_schedule(self):
        """Test default delays are 2s, 4s, 8s, 16s, 30s."""
        self.reporter.info("Testing default schedule", context="Test")

        backoff = ReconnectBackoff()

        assert backoff.schedule() == [2000, 4000, 8000, 16000, 30000]
        assert backoff.delay(1) == 2.0
        assert backoff.delay(5) == 30.0
        self.reporter.info("Default schedule correct", context="Test")

    def test_no_sixth_attempt(self):
        """Test attempts stop after max_attempts."""
        self.reporter.info("Testing attempt limit", context="Test")

        backoff = ReconnectBackoff()

        assert all(backoff.allows(n) for n in range(1, 6))
        assert not backoff.allows(6)
        assert not backoff.allows(0)
        self.reporter.info("Attempt limit enforced", context="Test")

    def test_delay_is_capped(self):
        """Test delays never exceed max_delay_ms."""
        self.reporter.info("Testing delay cap", context="Test")

        backoff = ReconnectBackoff(base_delay_ms=100, max_delay_ms=500, max_attempts=10)

        assert backoff.delay_ms(2) == 400
        assert backoff.delay_ms(3) == 500
        assert backoff.delay_ms(10) == 500
        self.reporter.info("Delay cap applied", context="Test")

    def test_from_settings(self):
        """Test the schedule follows the reconnect_* settings."""
        self.reporter.info("Testing backoff from settings", context="Test")

        default = ReconnectBackoff.from_settings(Settings())
        custom = ReconnectBackoff.from_settings(
            Settings(
                reconnect_max_attempts=3,
                reconnect_base_delay_ms=100,
                reconnect_max_delay_ms=300,
            )
        )

        assert default.schedule() == [2000, 4000, 8000, 16000, 30000]
        assert custom.schedule() == [200, 300, 300]
        assert not custom.allows(4)
        self.reporter.info("Settings applied to backoff", context="Test")

    def test_invalid_arguments(self):
        """Test invalid configuration and attempt numbers are rejected."""
        self.reporter.info("Testing invalid arguments", context="Test")

        for kwargs in (
            {"base_delay_ms": 0},
            {"base_delay_ms": 1000, "max_delay_ms": 10},
            {"max_attempts": -1},
        ):
            try:
                ReconnectBackoff(**kwargs)
                assert False, f"Should have raised ValueError for {kwargs}"
            except ValueError:
                pass

        try:
            ReconnectBackoff().delay_ms(0)
            assert False, "Should have raised ValueError"
        except ValueError:
            self.reporter.info("Invalid arguments rejected", context="Test")


if __name__ == "__main__":
    TestReconnectBackoff.run_as_main()
