"""
End-to-end tests for the REST surface: channels, publish, metrics, health.

Usage:
    python -m crieur.tests.e2e.test_rest_api
    pytest crieur/tests/e2e/test_rest_api.py
"""

from fastapi.testclient import TestClient
from shared.tests import LaborantTest

from crieur.config import Settings
from crieur.main import CrieurApp


class TestRestApi(LaborantTest):
    """End-to-end tests for HTTP endpoints."""

    component_name = "crieur"
    test_category = "e2e"

    def setup_test(self):
        settings = Settings(
            env="test",
            channels=["general"],
            heartbeat_interval_ms=60000,
            log_level="warning",
        )
        self.crieur = CrieurApp(settings)

    # ================================================================
    # Channels
    # ================================================================

    def test_create_channel(self):
        """Test create returns 201 and a duplicate returns 409."""
        self.reporter.info("Testing channel creation", context="Test")

        with TestClient(self.crieur.app) as client:
            response = client.post(
                "/api/channels", json={"name": "random", "createdBy": "alice"}
            )
            assert response.status_code == 201
            body = response.json()
            assert body["success"] is True
            assert body["message"] == "Channel 'random' created successfully"
            assert body["channel"]["name"] == "random"
            assert body["channel"]["createdBy"] == "alice"
            assert body["channel"]["userCount"] == 0

            duplicate = client.post(
                "/api/channels", json={"name": "random", "createdBy": "bob"}
            )
            assert duplicate.status_code == 409
            assert duplicate.json() == {
                "error": "Channel already exists: random",
                "code": "ALREADY_EXISTS",
            }

            names = [c["name"] for c in client.get("/api/channels").json()["channels"]]
            assert names == ["general", "random"]

        self.reporter.info("Channel created once", context="Test")

    def test_create_channel_validation(self):
        """Test missing fields return 400 with the broker's messages."""
        self.reporter.info("Testing create validation", context="Test")

        with TestClient(self.crieur.app) as client:
            no_name = client.post("/api/channels", json={"createdBy": "alice"})
            no_creator = client.post("/api/channels", json={"name": "random"})
            too_long = client.post(
                "/api/channels", json={"name": "x" * 101, "createdBy": "alice"}
            )

        assert no_name.status_code == 400
        assert no_name.json()["error"] == "Channel name is required"
        assert no_creator.status_code == 400
        assert no_creator.json()["error"] == "Created by username is required"
        assert too_long.status_code == 400
        assert too_long.json()["error"] == "Channel name too long (max 100 characters)"
        self.reporter.info("Create validation enforced", context="Test")

    def test_channel_not_found(self):
        """Test channel info and messages return 404 for unknown channels."""
        self.reporter.info("Testing 404s", context="Test")

        with TestClient(self.crieur.app) as client:
            info = client.get("/api/channels/nope")
            messages = client.get("/api/channels/nope/messages")

        assert info.status_code == 404
        assert info.json()["error"] == "Channel not found: nope"
        assert messages.status_code == 404
        self.reporter.info("Unknown channels return 404", context="Test")

    def test_channel_messages_limit(self):
        """Test messages endpoint honours limit and rejects negatives."""
        self.reporter.info("Testing messages limit", context="Test")

        with TestClient(self.crieur.app) as client:
            for text in ("a", "b", "c"):
                client.post(
                    "/api/publish",
                    json={"channel": "general", "text": text, "username": "alice"},
                )

            last_two = client.get("/api/channels/general/messages?limit=2").json()
            default = client.get("/api/channels/general/messages?limit=0").json()
            negative = client.get("/api/channels/general/messages?limit=-1")

        assert [m["text"] for m in last_two["messages"]] == ["b", "c"]
        assert [m["text"] for m in default["messages"]] == ["a", "b", "c"]
        assert negative.status_code == 400
        self.reporter.info("Limit honoured", context="Test")

    # ================================================================
    # Publish
    # ================================================================

    def test_publish(self):
        """Test publish stores the message and reports no listeners."""
        self.reporter.info("Testing publish", context="Test")

        with TestClient(self.crieur.app) as client:
            response = client.post(
                "/api/publish",
                json={"channel": "general", "text": "hello", "username": "alice"},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["clientsReached"] == 0
        assert body["message"]["text"] == "hello"
        assert body["message"]["type"] == "message"
        assert body["message"]["id"]
        self.reporter.info("Message published", context="Test")

    def test_publish_errors(self):
        """Test publish validation and unknown channel errors."""
        self.reporter.info("Testing publish errors", context="Test")

        with TestClient(self.crieur.app) as client:
            missing = client.post(
                "/api/publish", json={"channel": "general", "username": "alice"}
            )
            too_long = client.post(
                "/api/publish",
                json={"channel": "general", "text": "x" * 1001, "username": "alice"},
            )
            unknown = client.post(
                "/api/publish",
                json={"channel": "nope", "text": "hi", "username": "alice"},
            )
            bad_kind = client.post(
                "/api/publish",
                json={"channel": "general", "text": "hi", "username": "a", "type": "shout"},
            )

        assert missing.status_code == 400
        assert missing.json()["error"] == "Channel, text, and username are required"
        assert too_long.status_code == 400
        assert too_long.json()["error"] == "Message too long (max 1000 characters)"
        assert unknown.status_code == 404
        assert bad_kind.status_code == 400
        assert bad_kind.json()["error"] == "Invalid request body"
        self.reporter.info("Publish errors mapped", context="Test")

    # ================================================================
    # Metrics and health
    # ================================================================

    def test_metrics(self):
        """Test metrics expose sockets, channels and messages."""
        self.reporter.info("Testing metrics", context="Test")

        with TestClient(self.crieur.app) as client:
            client.post(
                "/api/publish",
                json={"channel": "general", "text": "hello", "username": "alice"},
            )
            metrics = client.get("/metrics").json()

        assert metrics["connectedSockets"] == 0
        assert metrics["activeChannels"] == 1
        assert metrics["totalMessages"] == 1
        assert "timestamp" in metrics
        assert metrics["stats"]["messages_published"] == 1
        self.reporter.info("Metrics correct", context="Test")

    def test_health(self):
        """Test liveness and readiness probes."""
        self.reporter.info("Testing health endpoints", context="Test")

        with TestClient(self.crieur.app) as client:
            live = client.get("/health/live")
            ready = client.get("/health/ready")
            health = client.get("/health")

        assert live.status_code == 200
        assert live.json()["status"] == "healthy"
        assert ready.status_code == 200
        assert ready.json()["status"] == "healthy"
        assert ready.json()["checks"]["liveness_monitor"]["status"] == "healthy"
        assert health.json()["service"] == "crieur"
        self.reporter.info("Health endpoints healthy", context="Test")


if __name__ == "__main__":
    TestRestApi.run_as_main()
