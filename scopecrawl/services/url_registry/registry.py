from __future__ import annotations

import logging
import threading
import time
from typing import Iterable, List, Optional, Tuple

from scopecrawl.domain.url_record import ErrorCode, UrlRecord

from .store import UrlRecordStore

logger = logging.getLogger(__name__)


class UrlRegistry:
    """Thread-safe registry of every discovered URL and its crawl state.

    One condition (and its lock) guards every read-modify-write, so an
    append can never interleave with a completion scan or a snapshot. The
    index returned at creation is the record's identity for the whole
    process.

    The registry also counts pending work: the counter goes up in the same
    critical section that makes a new incomplete record visible and comes
    down when that record is marked complete. `wait_for_quiescence` blocks
    on it, which is how the crawl knows it is finished without knowing the
    task total in advance.
    """

    def __init__(self, records: Optional[Iterable[UrlRecord]] = None):
        self._cond = threading.Condition(threading.Lock())
        self._store = UrlRecordStore()
        self._pending = 0
        for rec in records or []:
            if self._store.find(rec.url) is not None:
                logger.warning("Dropping duplicate url from loaded records: %s", rec.url)
                continue
            self._store.add(rec.copy())
            if not rec.completed:
                self._pending += 1

    def __len__(self) -> int:
        with self._cond:
            return len(self._store)

    @property
    def pending(self) -> int:
        with self._cond:
            return self._pending

    def append(self, address: str) -> int:
        """Register `address` and return its index; it must not be present yet."""
        with self._cond:
            index = self._store.add(UrlRecord(url=address))
            self._pending += 1
            return index

    def append_if_absent(self, address: str) -> Optional[int]:
        """Atomic already-seen check plus append.

        Returns the new index, or None when the address (ignoring case)
        is already registered.
        """
        with self._cond:
            if self._store.find(address) is not None:
                return None
            index = self._store.add(UrlRecord(url=address))
            self._pending += 1
            return index

    def get(self, index: int) -> UrlRecord:
        """Return a copy of the record at `index`."""
        with self._cond:
            return self._store.get(index).copy()

    def contains(self, address: str) -> bool:
        with self._cond:
            return self._store.find(address) is not None

    def mark_complete(self, index: int, error: ErrorCode = ErrorCode.NONE) -> bool:
        """Mark a record complete. Returns False if it already was."""
        with self._cond:
            changed = self._store.complete(index, error)
            if changed:
                self._pending -= 1
                if self._pending == 0:
                    self._cond.notify_all()
            return changed

    def append_discovered_link(self, index: int, link: str) -> None:
        with self._cond:
            self._store.append_link(index, link)

    def all_complete(self) -> bool:
        with self._cond:
            return self._store.all_complete()

    def incomplete(self) -> List[Tuple[int, str]]:
        """(index, url) of every record not yet complete, in index order."""
        with self._cond:
            return [(i, self._store.get(i).url) for i in self._store.incomplete()]

    def snapshot(self) -> List[UrlRecord]:
        """Consistent copy of every record, taken under the registry lock."""
        with self._cond:
            return self._store.copy_all()

    def wait_for_quiescence(self, timeout: Optional[float] = None) -> bool:
        """Block until no record is pending or `timeout` seconds pass.

        Returns True when quiescent.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while self._pending > 0:
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._cond.wait(remaining)
            return True
