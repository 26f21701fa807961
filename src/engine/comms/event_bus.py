"""EventBus — pub/sub for simulation events.

Combat publishes per-kill and per-impact events, GameMode publishes
session transitions.  A subscriber can ask for specific event types
(``bus.subscribe("game_over")``) and only those reach its queue; an
unfiltered subscription sees everything.

Publishing never blocks the tick.  Queues are bounded and a full queue
loses its oldest message, so a slow reader falls behind on kills but
still receives the ``game_over`` that ends the session.
"""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass, field


@dataclass
class _Subscription:
    queue: queue.Queue
    event_types: frozenset[str] = field(default_factory=frozenset)

    def wants(self, event_type: str) -> bool:
        return not self.event_types or event_type in self.event_types


class EventBus:
    """Thread-safe fan-out of ``{"type", "data"}`` messages to subscriber queues."""

    def __init__(self, maxsize: int = 100) -> None:
        self._lock = threading.Lock()
        self._subscriptions: list[_Subscription] = []
        self._maxsize = maxsize

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, *event_types: str) -> queue.Queue:
        """Return a queue receiving *event_types*, or every event if none given."""
        sub = _Subscription(queue.Queue(maxsize=self._maxsize), frozenset(event_types))
        with self._lock:
            self._subscriptions.append(sub)
        return sub.queue

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s.queue is not q]

    def publish(self, event_type: str, data: dict | None = None) -> None:
        msg: dict = {"type": event_type}
        if data is not None:
            msg["data"] = data
        with self._lock:
            targets = [s.queue for s in self._subscriptions if s.wants(event_type)]
        for q in targets:
            _put_dropping_oldest(q, msg)


def _put_dropping_oldest(q: queue.Queue, msg: dict) -> None:
    while True:
        try:
            q.put_nowait(msg)
            return
        except queue.Full:
            try:
                q.get_nowait()
            except queue.Empty:
                pass
