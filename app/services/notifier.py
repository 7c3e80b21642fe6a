from __future__ import annotations

import asyncio
import json
import logging
import threading
import time
from typing import Any

logger = logging.getLogger(__name__)


def format_sse(event: dict[str, Any]) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


def connected_event() -> dict[str, Any]:
    return {"type": "connected"}


def update_event(stem: str, timestamp_ms: int | None = None) -> dict[str, Any]:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return {"type": "update", "file": stem, "timestamp": timestamp_ms}


class Broadcaster:
    """
    Fans server-sent events out to every connected preview client.

    Subscribers are asyncio queues owned by the server's event loop;
    ``publish`` may be called from any thread (the watcher runs on its own).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[tuple[asyncio.AbstractEventLoop, asyncio.Queue]] = []

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        with self._lock:
            self._subscribers.append((loop, queue))
        logger.debug("sse.subscribe clients=%s", self.subscriber_count)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        with self._lock:
            self._subscribers = [(loop, q) for loop, q in self._subscribers if q is not queue]
        logger.debug("sse.unsubscribe clients=%s", self.subscriber_count)

    def publish(self, event: dict[str, Any]) -> int:
        message = format_sse(event)
        with self._lock:
            subscribers = list(self._subscribers)

        delivered = 0
        for loop, queue in subscribers:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, message)
            except RuntimeError:
                # event loop already closed
                self.unsubscribe(queue)
                continue
            delivered += 1
        logger.info("sse.publish type=%s clients=%s", event.get("type"), delivered)
        return delivered
