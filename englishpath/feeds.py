# englishpath/feeds.py
"""
In-process push feeds.

A ``Feed`` keeps listeners per key (a document path, an auth session id, ...)
and calls every listener with the new value on ``publish``. ``listen`` hands
back a ``Subscription``; cancelling it removes the listener. Subscriptions are
context managers so callers can scope them to a mount/unmount pair.
"""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Callable

log = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class Subscription:
    def __init__(self, unsubscribe: Callable[[], None]):
        self._unsubscribe = unsubscribe
        self._lock = threading.Lock()
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._unsubscribe()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.cancel()
        return False


class Feed:
    def __init__(self, name: str = "feed"):
        self.name = name
        self._lock = threading.RLock()
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._subs: list[Subscription] = []
        self._closed = False

    def listen(self, key: str, callback: Listener) -> Subscription:
        with self._lock:
            if self._closed:
                raise RuntimeError(f"{self.name} is closed")
            self._listeners[key].append(callback)

        def _remove():
            with self._lock:
                cbs = self._listeners.get(key)
                if cbs and callback in cbs:
                    cbs.remove(callback)
                if not cbs:
                    self._listeners.pop(key, None)

        sub = Subscription(_remove)
        with self._lock:
            self._subs = [s for s in self._subs if s.active]
            self._subs.append(sub)
        return sub

    def publish(self, key: str, value: Any) -> None:
        with self._lock:
            targets = list(self._listeners.get(key, ()))
        for cb in targets:
            try:
                cb(value)
            except Exception:
                # a broken listener must not break the writer
                log.exception("%s listener failed for %s", self.name, key)

    def listener_count(self, key: str | None = None) -> int:
        with self._lock:
            if key is not None:
                return len(self._listeners.get(key, ()))
            return sum(len(v) for v in self._listeners.values())

    def close(self) -> None:
        with self._lock:
            self._closed = True
            subs, self._subs = self._subs, []
        for sub in subs:
            sub.cancel()
