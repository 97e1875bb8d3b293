"""In-process publication of tournament changes.

Result updates publish after their transaction commits, so a subscriber
never sees an event for state that was rolled back.
"""
import itertools
import json
import queue
import threading
from datetime import datetime, timezone

MATCH_RESULT_RECORDED = "match_result_recorded"
STANDINGS_UPDATED = "standings_updated"
GROUP_STAGE_COMPLETE = "group_stage_complete"
BRACKET_UPDATED = "bracket_updated"
SCORES_UPDATED = "scores_updated"


class EventBus:
    """Fan-out of tournament events to bounded subscriber queues.

    A subscriber may restrict itself to a set of event types. Queues that
    fill up are dropped on the next publish.
    """

    def __init__(self, maxsize=50):
        self._maxsize = maxsize
        self._subscribers = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    def subscribe(self, types=None):
        q = queue.Queue(maxsize=self._maxsize)
        with self._lock:
            self._subscribers[q] = frozenset(types) if types else None
        return q

    def unsubscribe(self, q):
        with self._lock:
            self._subscribers.pop(q, None)

    def publish(self, event_type, data):
        """Deliver an event; returns the number of queues it reached."""
        with self._lock:
            event = {
                "id": next(self._ids),
                "type": event_type,
                "data": data,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
            msg = json.dumps(event)
            delivered = 0
            for q, wanted in list(self._subscribers.items()):
                if wanted is not None and event_type not in wanted:
                    continue
                try:
                    q.put_nowait(msg)
                    delivered += 1
                except queue.Full:
                    del self._subscribers[q]
            return delivered

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._subscribers)

    def clear(self):
        with self._lock:
            self._subscribers.clear()


def format_sse(msg):
    """Frame a published message as a Server-Sent Events record."""
    event = json.loads(msg)
    return f"id: {event['id']}\nevent: {event['type']}\ndata: {msg}\n\n"


event_bus = EventBus()
