"""Tests for the in-process publish/subscribe channel."""

from azhari_platform.platform.events import EventBus


def test_publish_reaches_every_subscriber_of_topic():
    bus = EventBus()
    first, second, other = [], [], []
    bus.subscribe("notifications.insert", first.append)
    bus.subscribe("notifications.insert", second.append)
    bus.subscribe("subscriptions.update", other.append)

    delivered = bus.publish("notifications.insert", {"id": "n-1"})

    assert delivered == 2
    assert first == [{"id": "n-1"}]
    assert second == [{"id": "n-1"}]
    assert other == []


def test_unsubscribe_stops_delivery():
    bus = EventBus()
    received = []
    token = bus.subscribe("topic", received.append)

    assert bus.unsubscribe(token) is True
    assert bus.publish("topic", {"x": 1}) == 0
    assert received == []


def test_unsubscribe_unknown_token_returns_false():
    assert EventBus().unsubscribe("missing") is False


def test_failing_handler_does_not_stop_others():
    bus = EventBus()
    received = []

    def broken(payload):
        raise RuntimeError("boom")

    bus.subscribe("topic", broken)
    bus.subscribe("topic", received.append)

    assert bus.publish("topic", {"x": 1}) == 1
    assert received == [{"x": 1}]


def test_publish_without_subscribers():
    assert EventBus().publish("nobody", {}) == 0
