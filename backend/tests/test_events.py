"""Tests for the event bus and the SSE stream."""
import json
import queue
import threading
import time

from wcpool.events import EventBus, event_bus, format_sse


# ── EventBus unit tests ─────────────────────────────────────────────────────


class TestEventBus:
    def test_subscribe_creates_queue(self):
        bus = EventBus()
        q = bus.subscribe()
        assert isinstance(q, queue.Queue)
        assert bus.subscriber_count == 1
        bus.unsubscribe(q)

    def test_publish_delivers_to_subscriber(self):
        bus = EventBus()
        q = bus.subscribe()
        assert bus.publish("standings_updated", {"group_letter": "C"}) == 1
        msg = json.loads(q.get_nowait())
        assert msg["type"] == "standings_updated"
        assert msg["data"]["group_letter"] == "C"
        assert "timestamp" in msg

    def test_event_ids_increase(self):
        bus = EventBus()
        q = bus.subscribe()
        bus.publish("a", {})
        bus.publish("b", {})
        first, second = (json.loads(q.get_nowait()) for _ in range(2))
        assert second["id"] == first["id"] + 1

    def test_type_filter(self):
        bus = EventBus()
        everything = bus.subscribe()
        brackets = bus.subscribe(["bracket_updated"])
        assert bus.publish("standings_updated", {}) == 1
        assert bus.publish("bracket_updated", {}) == 2
        assert everything.qsize() == 2
        assert json.loads(brackets.get_nowait())["type"] == "bracket_updated"
        assert brackets.empty()

    def test_unsubscribe_removes_queue(self):
        bus = EventBus()
        q = bus.subscribe()
        bus.unsubscribe(q)
        assert bus.subscriber_count == 0
        bus.publish("after_unsub", {})
        assert q.empty()

    def test_full_queue_is_dropped(self):
        bus = EventBus(maxsize=3)
        bus.subscribe()
        for i in range(3):
            bus.publish("fill", {"i": i})
        assert bus.subscriber_count == 1
        assert bus.publish("overflow", {}) == 0
        assert bus.subscriber_count == 0

    def test_clear_removes_all_subscribers(self):
        bus = EventBus()
        bus.subscribe()
        bus.subscribe()
        bus.clear()
        assert bus.subscriber_count == 0

    def test_thread_safety(self):
        bus = EventBus()
        queues = []
        errors = []

        def sub_and_read():
            try:
                q = bus.subscribe()
                queues.append(q)
                json.loads(q.get(timeout=2))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=sub_and_read) for _ in range(5)]
        for t in threads:
            t.start()
        time.sleep(0.1)
        bus.publish("thread_test", {"ok": True})
        for t in threads:
            t.join(timeout=3)
        assert not errors


class TestFormatSse:
    def test_frames_id_event_and_data(self):
        bus = EventBus()
        q = bus.subscribe()
        bus.publish("scores_updated", {"forms": 3})
        msg = q.get_nowait()

        frame = format_sse(msg)
        lines = frame.split("\n")
        assert lines[0].startswith("id: ")
        assert lines[1] == "event: scores_updated"
        assert json.loads(lines[2].removeprefix("data: "))["data"] == {"forms": 3}
        assert frame.endswith("\n\n")


# ── SSE endpoint ─────────────────────────────────────────────────────────────


class TestSSEEndpoint:
    def test_stream_receives_published_event(self, client):
        chunks = []

        def read_stream():
            resp = client.get("/api/events/stream?types=match_result_recorded")
            for chunk in resp.response:
                if isinstance(chunk, bytes):
                    chunk = chunk.decode()
                chunks.append(chunk)
                break
            resp.close()

        t = threading.Thread(target=read_stream)
        t.start()
        for _ in range(50):
            if event_bus.subscriber_count:
                break
            time.sleep(0.02)

        event_bus.publish("standings_updated", {"group_letter": "A"})
        event_bus.publish("match_result_recorded", {"match_number": 1})
        t.join(timeout=5)

        assert chunks
        assert "event: match_result_recorded" in chunks[0]
