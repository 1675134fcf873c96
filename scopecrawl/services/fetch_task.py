import logging
import threading
from typing import Callable, Optional

from scopecrawl.domain.http_response import HttpResponse
from scopecrawl.domain.url_record import ErrorCode
from scopecrawl.exceptions import HtmlParseError, HttpFetchError
from scopecrawl.services.link_extractor import LinkExtractor, is_html_content_type
from scopecrawl.services.scope_policy import ScopePolicy
from scopecrawl.services.url_registry import UrlRegistry

logger = logging.getLogger(__name__)

SpawnFn = Callable[[int, str], None]


class FetchTask:
    """Fetch one registered URL, record its links, and spawn in-scope children.

    Every run ends by marking its own record complete, either with an error
    code or with `ErrorCode.NONE`. Failures are terminal for the record;
    there are no retries.

    `spawn(index, url)` schedules another run for a newly registered record.
    It is wired by the supervisor to the worker pool.
    """

    def __init__(
        self,
        *,
        registry: UrlRegistry,
        fetcher,
        link_extractor: LinkExtractor,
        scope_policy: ScopePolicy,
        spawn: Optional[SpawnFn] = None,
        stop_event: Optional[threading.Event] = None,
        resuming: bool = False,
    ):
        self.registry = registry
        self.fetcher = fetcher
        self.link_extractor = link_extractor
        self.scope_policy = scope_policy
        self.spawn = spawn
        self.stop_event = stop_event
        self.resuming = resuming

    def _is_stopped(self) -> bool:
        return self.stop_event is not None and self.stop_event.is_set()

    def _complete(self, index: int, error: ErrorCode) -> ErrorCode:
        logger.debug("[%d] process ended with %s", index, error.name)
        self.registry.mark_complete(index, error)
        return error

    def run(self, index: int, url: str) -> Optional[ErrorCode]:
        """Process the record at `index`. Returns its final error code.

        Returns None without touching the record when the crawl is stopping;
        the record stays incomplete and is fetched again on resume.
        """
        if self._is_stopped():
            logger.debug("[%d] skipped %s, crawl is stopping", index, url)
            return None
        try:
            return self._run(index, url)
        except Exception:
            # Anything that escapes is a bug, not a per-url outcome. Still
            # complete the record so the crawl can reach quiescence.
            logger.exception("[%d] unexpected error while processing %s", index, url)
            return self._complete(index, ErrorCode.NETWORK_ERROR)

    def _run(self, index: int, url: str) -> ErrorCode:
        logger.info("[%d] %s url %s", index, "resuming" if self.resuming else "fetching", url)
        try:
            response: HttpResponse = self.fetcher.fetch(url)
        except HttpFetchError as e:
            logger.warning("[%d] fetch failed: %s", index, e)
            return self._complete(index, ErrorCode.NETWORK_ERROR)

        if response.status_code != 200:
            logger.info("[%d] non-success status for %s: %s", index, url, response.status_code)
            return self._complete(index, ErrorCode.NON_HTTP_OK_STATUS)

        if not is_html_content_type(response.content_type):
            logger.info("[%d] skipping non-html content %r at %s", index, response.content_type, url)
            return self._complete(index, ErrorCode.NON_HTML_CONTENT_TYPE)

        try:
            links = self.link_extractor.extract_links(url, response.text)
        except HtmlParseError as e:
            logger.warning("[%d] %s", index, e)
            return self._complete(index, ErrorCode.PARSE_ERROR)

        for link in links:
            logger.debug("[%d] found link %s", index, link)
            self.registry.append_discovered_link(index, link)
            if not self.scope_policy.matches_scope(link, index):
                continue
            child = self.registry.append_if_absent(link)
            if child is None:
                logger.debug("[%d] url %s already in registry", index, link)
                continue
            logger.debug("[%d] adding url %s as %d", index, link, child)
            if self.spawn is not None:
                self.spawn(child, link)

        return self._complete(index, ErrorCode.NONE)
