import logging
import os
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import List

from scopecrawl.domain.crawl_result import CrawlResult
from scopecrawl.domain.crawl_session import CrawlSession
from scopecrawl.domain.url_record import ErrorCode, UrlRecord
from scopecrawl.services.checkpoint_store import CheckpointStore
from scopecrawl.services.fetch_task import FetchTask
from scopecrawl.services.link_extractor import LinkExtractor
from scopecrawl.services.scope_policy import PREFIX, ScopePolicy

logger = logging.getLogger(__name__)


class CrawlSupervisor:
    """Owns one crawl run from the first spawn to the final write.

    Fetch tasks run on a bounded thread pool; the pool size is the cap on
    concurrent outbound requests. The supervisor waits on the registry's
    pending counter and wakes every `poll_interval` seconds to check the
    session's stop event. On stop it writes the checkpoint and returns
    without waiting for in-flight requests. On quiescence it writes the
    output file and removes the checkpoint.
    """

    def __init__(
        self,
        *,
        session: CrawlSession,
        fetcher,
        link_extractor: LinkExtractor,
        checkpoint_store: CheckpointStore,
        checkpoint_path: str,
        output_path: str,
        max_workers: int = 4,
        scope_mode: str = PREFIX,
        poll_interval: float = 0.5,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.session = session
        self.registry = session.registry
        self.checkpoint_store = checkpoint_store
        self.checkpoint_path = checkpoint_path
        self.output_path = output_path
        self.max_workers = int(max_workers)
        self.poll_interval = float(poll_interval)
        self.scope_policy = ScopePolicy(session.seed, scope_mode)
        self.task = FetchTask(
            registry=self.registry,
            fetcher=fetcher,
            link_extractor=link_extractor,
            scope_policy=self.scope_policy,
            spawn=self._spawn,
            stop_event=session.stop_event,
            resuming=session.resumed,
        )
        self._executor = None

    def _spawn(self, index: int, url: str) -> None:
        if self.session.is_stopped():
            # Left incomplete; the checkpoint carries it to the next run.
            return
        try:
            self._executor.submit(self.task.run, index, url)
        except RuntimeError:
            # Pool already shut down by the stop path.
            logger.debug("[%d] not scheduled, crawl is stopping", index)

    def run(self) -> CrawlResult:
        logger.info(
            "Crawl starting from %s (%d urls, %d pending, scope=%s, workers=%d)",
            self.session.seed,
            len(self.registry),
            self.registry.pending,
            self.scope_policy.mode,
            self.max_workers,
        )
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="fetch")
        for index, url in self.registry.incomplete():
            self._spawn(index, url)

        while not self.registry.wait_for_quiescence(self.poll_interval):
            if self.session.is_stopped():
                return self._checkpoint_and_stop()

        self._executor.shutdown(wait=True)
        return self._finish()

    def _checkpoint_and_stop(self) -> CrawlResult:
        logger.warning("Crawl stopped by user")
        records = self.registry.snapshot()
        saved = True
        try:
            self.checkpoint_store.save(self.checkpoint_path, records)
            logger.info("Progress saved in %s (%d urls)", self.checkpoint_path, len(records))
        except OSError:
            logger.exception("Error writing checkpoint %s", self.checkpoint_path)
            saved = False
        self._executor.shutdown(wait=False, cancel_futures=True)
        return self._result(records, stopped=True, saved=saved)

    def _finish(self) -> CrawlResult:
        records = self.registry.snapshot()
        try:
            self.checkpoint_store.save(self.output_path, records)
        except OSError:
            logger.exception("Error writing output %s; keeping %s", self.output_path, self.checkpoint_path)
            return self._result(records, stopped=False, saved=False)

        try:
            os.remove(self.checkpoint_path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception("Could not remove checkpoint %s", self.checkpoint_path)

        logger.info("All done! File %s saved with %d urls", self.output_path, len(records))
        return self._result(records, stopped=False, saved=True)

    def _result(self, records: List[UrlRecord], *, stopped: bool, saved: bool) -> CrawlResult:
        completed = sum(1 for r in records if r.completed)
        errors = Counter(r.error for r in records if r.completed and r.error != ErrorCode.NONE)
        for code, count in sorted(errors.items()):
            logger.info("  %s: %d", code.name, count)
        return CrawlResult(urls_total=len(records), urls_completed=completed, stopped=stopped, saved=saved)
