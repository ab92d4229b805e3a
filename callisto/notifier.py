"""
notifier.py

best-effort change broadcast to observers (the ui layer).

listeners are plain callables taking (event, config). publishing never raises:
the mutation it reports is already on disk, so failures are only logged.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from .models import CallistoConfig

logger = logging.getLogger(__name__)

Listener = Callable[[str, CallistoConfig], None]


class ChangeNotifier:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_listeners(self) -> bool:
        with self._lock:
            return bool(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._listeners.clear()

    def publish(self, event: str, config: CallistoConfig) -> bool:
        """Deliver to every listener; returns True if at least one received it."""
        with self._lock:
            if self._closed:
                logger.warning("Failed to emit %s: channel closed", event)
                return False
            listeners = list(self._listeners)

        if not listeners:
            logger.warning("Failed to emit %s: no observer attached", event)
            return False

        delivered = 0
        for listener in listeners:
            try:
                listener(event, config)
                delivered += 1
            except Exception:
                logger.warning("Observer %r failed on %s", listener, event, exc_info=True)
        return delivered > 0
