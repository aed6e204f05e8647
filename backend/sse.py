"""
Server-sent events: frame events and stream them from a background worker thread.
"""
import json
import queue
import threading
from typing import Any, Callable

from fastapi.responses import StreamingResponse


def format_sse(event: str, data: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


class EventChannel:
    """Thread-safe sink the worker writes events into."""

    def __init__(self):
        self.q: queue.Queue = queue.Queue()

    def send(self, event: str, data: Any) -> None:
        self.q.put(format_sse(event, data))

    def log(self, message: str) -> None:
        self.send("log", {"message": message})

    def error(self, message: str, **extra: Any) -> None:
        self.send("error", {"message": message, **extra})

    def close(self) -> None:
        self.q.put(None)


def stream_events(work: Callable[[EventChannel], None]) -> StreamingResponse:
    """
    Run `work` in a daemon thread and stream whatever it sends. Uncaught exceptions
    become a terminal `error` event; the stream always ends.
    """
    channel = EventChannel()

    def worker():
        try:
            work(channel)
        except Exception as e:
            print(f"[sse] worker error={type(e).__name__}: {e}")
            channel.error(str(e) or type(e).__name__)
        finally:
            channel.close()

    threading.Thread(target=worker, daemon=True).start()

    def event_stream():
        while True:
            item = channel.q.get()
            if item is None:
                break
            yield item

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
