"""
Integration tests for Broker.

Exercises the Broker against a real ChannelStore and ConnectionRegistry,
with recording sinks standing in for WebSocket connections.

Usage:
    python -m crieur.tests.integration.infrastructure.test_broker
    pytest crieur/tests/integration/infrastructure/test_broker.py
"""

from shared.tests import LaborantTest

from crieur.application.dto import (
    PingFrame,
    PublishFrame,
    SubscribeFrame,
    UnsubscribeFrame,
)
from crieur.domain.exceptions import (
    ChannelAlreadyExistsError,
    ChannelNotFoundError,
    FieldValidationError,
    InvalidChannelNameError,
    TransportFailure,
)
from crieur.infrastructure.channels import ChannelStore
from crieur.infrastructure.websocket import (
    HISTORY_REPLAY_LIMIT,
    Broker,
    ConnectionRegistry,
)


class RecordingSink:
    """Outbound sink that records every frame it is given."""

    def __init__(self, handle: str, fail: bool = False):
        self.handle = handle
        self.fail = fail
        self.frames = []
        self.closed = False

    def send(self, frame):
        if self.fail:
            raise TransportFailure(self.handle, "socket gone")
        self.frames.append(frame)

    async def probe(self):
        if self.fail:
            raise TransportFailure(self.handle, "socket gone")

    async def close(self, code=1000, reason=""):
        self.closed = True

    def of_type(self, frame_type):
        return [f for f in self.frames if f["type"] == frame_type]


class TestBroker(LaborantTest):
    """Integration tests for request handling and fan-out."""

    component_name = "crieur"
    test_category = "integration"

    def setup_test(self):
        self.store = ChannelStore(max_messages=50)
        self.registry = ConnectionRegistry()
        self.broker = Broker(self.store, self.registry)
        self.broker.create_channel("general", "system")

    def _open(self, handle: str, fail: bool = False) -> RecordingSink:
        sink = RecordingSink(handle, fail=fail)
        self.broker.open(handle, sink)
        return sink

    # ================================================================
    # Channel creation
    # ================================================================

    def test_create_duplicate_channel(self):
        """Test duplicate create fails and leaves the channel untouched."""
        self.reporter.info("Testing duplicate channel creation", context="Test")

        self.broker.create_channel("random", "alice")
        self.broker.publish(None, "random", "hello", "alice")

        try:
            self.broker.create_channel("random", "bob")
            assert False, "Should have raised ChannelAlreadyExistsError"
        except ChannelAlreadyExistsError:
            pass

        info = self.broker.channel_info("random")
        assert info["createdBy"] == "alice"
        assert info["messageCount"] == 1
        self.reporter.info("Existing channel untouched", context="Test")

    def test_create_channel_validation(self):
        """Test create rejects missing name and creator."""
        self.reporter.info("Testing create validation", context="Test")

        for name in ("", "   ", None, "x" * 101):
            try:
                self.broker.create_channel(name, "alice")
                assert False, f"Should have rejected name {name!r}"
            except InvalidChannelNameError:
                pass

        try:
            self.broker.create_channel("random", "")
            assert False, "Should have raised FieldValidationError"
        except FieldValidationError as e:
            assert str(e) == "Created by username is required"
            assert e.field == "createdBy"

        assert not self.store.exists("random")
        self.reporter.info("Create validation enforced", context="Test")

    # ================================================================
    # Subscribe / unsubscribe
    # ================================================================

    def test_subscribe_sends_ack_and_history(self):
        """Test subscribe replies with subscribed then messages."""
        self.reporter.info("Testing subscribe ack and history", context="Test")

        self.broker.publish(None, "general", "earlier", "bob")
        sink = self._open("h1")

        self.broker.dispatch(
            "h1", SubscribeFrame(type="subscribe", channel="general", username="alice")
        )

        assert [f["type"] for f in sink.frames] == ["subscribed", "messages"]
        assert sink.frames[0]["message"] == "Successfully subscribed to channel 'general'"
        assert sink.frames[0]["username"] == "alice"
        assert [m["text"] for m in sink.frames[1]["messages"]] == ["earlier"]
        assert self.store.is_subscriber("general", "alice")
        assert self.registry.subscribers_of("general") == ["h1"]
        self.reporter.info("Ack and history sent", context="Test")

    def test_history_replay_is_last_twenty(self):
        """Test replay window is fixed at 20 regardless of max_messages."""
        self.reporter.info("Testing history replay window", context="Test")

        for i in range(30):
            self.broker.publish(None, "general", f"m{i}", "bob")
        sink = self._open("h1")

        self.broker.subscribe("h1", "general", "alice")

        history = sink.of_type("messages")[0]["messages"]
        assert len(history) == HISTORY_REPLAY_LIMIT == 20
        assert history[0]["text"] == "m10"
        assert history[-1]["text"] == "m29"
        self.reporter.info("Last 20 replayed", context="Test")

    def test_subscribe_unknown_channel(self):
        """Test subscribe to a missing channel yields a not-found error."""
        self.reporter.info("Testing subscribe to unknown channel", context="Test")

        sink = self._open("h1")
        self.broker.dispatch(
            "h1", SubscribeFrame(type="subscribe", channel="random", username="alice")
        )

        assert sink.frames == [
            {"type": "error", "message": "Channel not found: random", "code": "NOT_FOUND"}
        ]
        assert not self.store.exists("random")
        assert self.registry.get("h1").subscribed_channels == set()
        self.reporter.info("Not found reported", context="Test")

    def test_subscribe_missing_fields(self):
        """Test subscribe without channel or username is rejected."""
        self.reporter.info("Testing subscribe validation", context="Test")

        sink = self._open("h1")
        self.broker.dispatch("h1", SubscribeFrame(type="subscribe", channel="general"))
        self.broker.dispatch("h1", SubscribeFrame(type="join", username="alice"))

        errors = sink.of_type("error")
        assert len(errors) == 2
        assert all(e["message"] == "Channel and username are required" for e in errors)
        assert all(e["code"] == "VALIDATION_ERROR" for e in errors)
        assert self.store.info("general")["userCount"] == 0
        self.reporter.info("Missing fields rejected", context="Test")

    def test_unsubscribe_when_not_subscribed(self):
        """Test unsubscribe without a subscription is a no-op with ack."""
        self.reporter.info("Testing idempotent unsubscribe", context="Test")

        sink = self._open("h1")
        self.broker.dispatch(
            "h1", UnsubscribeFrame(type="unsubscribe", channel="general")
        )
        self.broker.dispatch("h1", UnsubscribeFrame(type="leave", channel="nowhere"))

        assert [f["type"] for f in sink.frames] == ["unsubscribed", "unsubscribed"]
        assert sink.frames[0]["message"] == "Unsubscribed from channel 'general'"
        self.reporter.info("Unsubscribe was a no-op", context="Test")

    def test_unsubscribe_removes_membership(self):
        """Test unsubscribe removes the username and stops delivery."""
        self.reporter.info("Testing unsubscribe", context="Test")

        sink = self._open("h1")
        self.broker.subscribe("h1", "general", "alice")
        self.broker.unsubscribe("h1", "general")
        self.broker.publish(None, "general", "after", "bob")

        assert not self.store.is_subscriber("general", "alice")
        assert sink.of_type("new_message") == []
        self.reporter.info("Membership removed", context="Test")

    def test_unsubscribe_requires_channel(self):
        """Test unsubscribe without channel is rejected."""
        self.reporter.info("Testing unsubscribe validation", context="Test")

        sink = self._open("h1")
        self.broker.dispatch("h1", UnsubscribeFrame(type="unsubscribe"))

        assert sink.frames[0]["message"] == "Channel is required"
        self.reporter.info("Missing channel rejected", context="Test")

    def test_membership_tracked_per_connection(self):
        """Test username stays subscribed while another of its connections is."""
        self.reporter.info("Testing per-connection membership", context="Test")

        self._open("h1")
        self._open("h2")
        self.broker.subscribe("h1", "general", "alice")
        self.broker.subscribe("h2", "general", "alice")

        assert self.store.info("general")["userCount"] == 1

        self.broker.unsubscribe("h1", "general")
        assert self.store.is_subscriber("general", "alice")

        self.broker.teardown("h2")
        assert not self.store.is_subscriber("general", "alice")
        self.reporter.info("Membership follows last connection", context="Test")

    def test_username_switch_moves_memberships(self):
        """Test re-subscribing under a new name moves existing memberships."""
        self.reporter.info("Testing username switch", context="Test")

        self.broker.create_channel("random", "system")
        self._open("h1")
        self.broker.subscribe("h1", "general", "alice")
        self.broker.subscribe("h1", "random", "alicia")

        assert self.store.info("general")["subscribers"] == ["alicia"]
        assert self.store.info("random")["subscribers"] == ["alicia"]
        assert self.registry.get("h1").username == "alicia"
        self.reporter.info("Memberships moved", context="Test")

    # ================================================================
    # Publish
    # ================================================================

    def test_publish_fans_out_to_subscribers(self):
        """Test both subscribers get new_message and only the publisher gets the ack."""
        self.reporter.info("Testing publish fan-out", context="Test")

        s1 = self._open("h1")
        s2 = self._open("h2")
        self.broker.subscribe("h1", "general", "alice")
        self.broker.subscribe("h2", "general", "bob")

        self.broker.dispatch(
            "h1",
            PublishFrame(type="publish", channel="general", text="hi", username="alice"),
        )

        for sink in (s1, s2):
            new = sink.of_type("new_message")
            assert len(new) == 1
            assert new[0]["message"]["text"] == "hi"
            assert new[0]["message"]["username"] == "alice"

        acks = s1.of_type("message_sent")
        assert len(acks) == 1
        assert acks[0]["messageId"] == s1.of_type("new_message")[0]["message"]["id"]
        assert acks[0]["message"] == "Message sent successfully"
        assert s2.of_type("message_sent") == []
        self.reporter.info("Fan-out correct", context="Test")

    def test_publish_with_no_subscribers(self):
        """Test publish to an empty channel still acks the publisher."""
        self.reporter.info("Testing publish with zero subscribers", context="Test")

        sink = self._open("h1")
        message, reached = self.broker.publish("h1", "general", "alone", "alice")

        assert reached == 0
        assert sink.of_type("new_message") == []
        assert sink.of_type("message_sent")[0]["messageId"] == message.id
        self.reporter.info("Publisher acked", context="Test")

    def test_publish_preserves_order(self):
        """Test subscribers observe messages in append order."""
        self.reporter.info("Testing publish order", context="Test")

        sink = self._open("h1")
        self.broker.subscribe("h1", "general", "alice")
        for text in ("a", "b", "c"):
            self.broker.publish(None, "general", text, "bob")

        texts = [f["message"]["text"] for f in sink.of_type("new_message")]
        assert texts == ["a", "b", "c"]
        self.reporter.info("Order preserved", context="Test")

    def test_history_bound(self):
        """Test with max_messages=2 only the last two are retained."""
        self.reporter.info("Testing history bound", context="Test")

        broker = Broker(ChannelStore(max_messages=2), ConnectionRegistry())
        broker.create_channel("general", "system")
        for text in ("a", "b", "c"):
            broker.publish(None, "general", text, "alice")

        assert [m.text for m in broker.channel_messages("general")] == ["b", "c"]
        self.reporter.info("History bounded", context="Test")

    def test_publish_validation(self):
        """Test publish rejects missing and oversized fields without side effects."""
        self.reporter.info("Testing publish validation", context="Test")

        s1 = self._open("h1")
        s2 = self._open("h2")
        self.broker.subscribe("h2", "general", "bob")

        self.broker.dispatch("h1", PublishFrame(type="publish", channel="general", username="a"))
        self.broker.dispatch(
            "h1",
            PublishFrame(type="publish", channel="general", text="x" * 1001, username="a"),
        )
        self.broker.dispatch(
            "h1",
            PublishFrame(type="publish", channel="random", text="hi", username="a"),
        )

        messages = [e["message"] for e in s1.of_type("error")]
        assert messages == [
            "Channel, text, and username are required",
            "Message too long (max 1000 characters)",
            "Channel not found: random",
        ]
        assert s2.of_type("new_message") == []
        assert self.store.total_messages() == 0
        self.reporter.info("Invalid publishes rejected", context="Test")

    def test_ping(self):
        """Test ping replies with pong carrying a timestamp."""
        self.reporter.info("Testing ping", context="Test")

        sink = self._open("h1")
        self.broker.dispatch("h1", PingFrame(type="ping"))

        assert sink.frames[0]["type"] == "pong"
        assert sink.frames[0]["timestamp"]
        self.reporter.info("Pong sent", context="Test")

    # ================================================================
    # Teardown
    # ================================================================

    def test_teardown_is_idempotent(self):
        """Test teardown decrements userCount once."""
        self.reporter.info("Testing teardown idempotence", context="Test")

        self._open("h1")
        self._open("h2")
        self.broker.subscribe("h1", "general", "alice")
        self.broker.subscribe("h2", "general", "bob")
        before = self.broker.channel_info("general")["userCount"]

        assert self.broker.teardown("h1") is not None
        after_first = self.broker.channel_info("general")["userCount"]
        assert self.broker.teardown("h1") is None
        after_second = self.broker.channel_info("general")["userCount"]

        assert before == 2
        assert after_first == 1
        assert after_second == 1
        assert "h1" not in self.registry
        self.reporter.info("Teardown idempotent", context="Test")

    def test_transport_failure_tears_down_only_that_handle(self):
        """Test a failing sink is torn down and others still receive."""
        self.reporter.info("Testing transport failure during fan-out", context="Test")

        healthy = self._open("h1")
        broken = self._open("h2")
        self.broker.subscribe("h1", "general", "alice")
        self.broker.subscribe("h2", "general", "bob")

        broken.fail = True
        _, reached = self.broker.publish(None, "general", "hi", "carol")

        assert reached == 1
        assert len(healthy.of_type("new_message")) == 1
        assert "h2" not in self.registry
        assert "h1" in self.registry
        assert not self.store.is_subscriber("general", "bob")
        assert self.broker.stats["teardowns"] == 1
        self.reporter.info("Only failing handle torn down", context="Test")

    def test_metrics(self):
        """Test metrics reflect sockets, channels and messages."""
        self.reporter.info("Testing metrics", context="Test")

        self._open("h1")
        self.broker.publish(None, "general", "hi", "alice")

        assert self.broker.metrics() == {
            "connectedSockets": 1,
            "activeChannels": 1,
            "totalMessages": 1,
        }
        self.reporter.info("Metrics correct", context="Test")


if __name__ == "__main__":
    TestBroker.run_as_main()
