"""
In-process publish/subscribe channel keyed by topic.

Replaces the hosted backend's realtime change feed for notification inserts:
producers publish after a successful commit, consumers (e.g. a websocket
fan-out or a test) subscribe per topic and receive the row payload.
"""

import logging
import threading
import uuid
from collections import defaultdict
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]

NOTIFICATION_INSERTED = "notifications.insert"


class EventBus:
    def __init__(self) -> None:
        self._handlers: Dict[str, Dict[str, Handler]] = defaultdict(dict)
        self._topics_by_token: Dict[str, str] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str, handler: Handler) -> str:
        """Register handler for topic; returns the token to unsubscribe with."""
        token = str(uuid.uuid4())
        with self._lock:
            self._handlers[topic][token] = handler
            self._topics_by_token[token] = topic
        return token

    def unsubscribe(self, token: str) -> bool:
        with self._lock:
            topic = self._topics_by_token.pop(token, None)
            if topic is None:
                return False
            self._handlers[topic].pop(token, None)
            return True

    def publish(self, topic: str, payload: Dict[str, Any]) -> int:
        """
        Deliver payload to every handler of topic.

        A failing handler is logged and skipped. Returns the number of
        handlers that completed.
        """
        with self._lock:
            handlers = list(self._handlers.get(topic, {}).items())

        delivered = 0
        for token, handler in handlers:
            try:
                handler(payload)
                delivered += 1
            except Exception:
                logger.warning(
                    "Event handler failed",
                    extra={"topic": topic, "subscription_token": token},
                    exc_info=True,
                )
        return delivered


_event_bus = EventBus()


def get_event_bus() -> EventBus:
    return _event_bus
