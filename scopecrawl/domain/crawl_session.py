import threading
from typing import Optional

from scopecrawl.services.url_registry import UrlRegistry


class CrawlSession:
    """
    State for a single crawl execution.

    Holds the registry (the only shared mutable state of the run), the
    effective seed that bounds the crawl scope, and the stop event used to
    interrupt it. A resumed session takes its seed from the first
    checkpointed record rather than from the command line.
    """

    def __init__(
        self,
        registry: UrlRegistry,
        seed: str,
        resumed: bool = False,
        stop_event: Optional[threading.Event] = None,
    ):
        self.registry = registry
        self.seed = seed
        self.resumed = resumed
        self.stop_event = stop_event if stop_event is not None else threading.Event()

    def is_stopped(self) -> bool:
        """Check if crawling has stopped."""
        return self.stop_event.is_set()

    def mark_stopped(self) -> None:
        """Mark that crawling should stop."""
        self.stop_event.set()

    def __repr__(self):
        return f"<CrawlSession seed={self.seed} urls={len(self.registry)} resumed={self.resumed}>"
