from __future__ import annotations

import logging
import signal
import threading
from typing import Dict, Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownSignal:
    """Turns operator termination signals into a stop event.

    The handler only sets the event; the supervisor that owns the registry
    notices it and performs the checkpoint write itself.
    """

    def __init__(self, stop_event: Optional[threading.Event] = None):
        self.stop_event: threading.Event = stop_event if stop_event is not None else threading.Event()
        self.received: Optional[int] = None
        self._previous: Dict[int, object] = {}

    def _handle(self, signum, frame) -> None:
        self.received = signum
        logger.warning("Received %s, stopping crawl", signal.Signals(signum).name)
        self.stop_event.set()

    def install(self, signals: Iterable[int] = DEFAULT_SIGNALS) -> None:
        """Register handlers. Must be called from the main thread."""
        for sig in signals:
            self._previous[sig] = signal.signal(sig, self._handle)

    def restore(self) -> None:
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()

    def request(self) -> None:
        """Trigger the shutdown path without an OS signal."""
        self.stop_event.set()

    def is_set(self) -> bool:
        return self.stop_event.is_set()
