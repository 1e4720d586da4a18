"""Tests for the event bus."""

import logging

from retrace.core.bus import EventBus


class TestEventBus:
    def test_subscribe_publish(self):
        bus = EventBus()
        received = []
        bus.subscribe("test", lambda **kw: received.append(kw))
        bus.publish("test", value=42)
        assert received == [{"value": 42}]

    def test_multiple_subscribers(self):
        bus = EventBus()
        results = []
        bus.subscribe("evt", lambda **kw: results.append("a"))
        bus.subscribe("evt", lambda **kw: results.append("b"))
        bus.publish("evt")
        assert results == ["a", "b"]

    def test_no_crosstalk(self):
        bus = EventBus()
        results = []
        bus.subscribe("a", lambda **kw: results.append("a"))
        bus.subscribe("b", lambda **kw: results.append("b"))
        bus.publish("a")
        assert results == ["a"]

    def test_unsubscribe(self):
        bus = EventBus()
        results = []
        cb = lambda **kw: results.append(1)  # noqa: E731
        bus.subscribe("evt", cb)
        bus.publish("evt")
        bus.unsubscribe("evt", cb)
        bus.publish("evt")
        assert results == [1]

    def test_unsubscribe_unknown_is_noop(self):
        bus = EventBus()
        bus.unsubscribe("evt", lambda **kw: None)
        bus.publish("evt")

    def test_publish_no_subscribers(self):
        bus = EventBus()
        bus.publish("nothing", x=1)

    def test_failing_callback_isolated(self, caplog):
        bus = EventBus()
        results = []

        def bad(**kw):
            raise RuntimeError("subscriber failure")

        bus.subscribe("evt", bad)
        bus.subscribe("evt", lambda **kw: results.append("ok"))
        with caplog.at_level(logging.ERROR, logger="retrace.core.bus"):
            bus.publish("evt")
        assert results == ["ok"]
        assert "EventBus callback error on 'evt'" in caplog.text

    def test_callback_may_unsubscribe_itself(self):
        bus = EventBus()
        results = []

        def once(**kw):
            results.append(1)
            bus.unsubscribe("evt", once)

        bus.subscribe("evt", once)
        bus.publish("evt")
        bus.publish("evt")
        assert results == [1]
