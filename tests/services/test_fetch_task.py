import threading
from unittest.mock import MagicMock

import pytest

from scopecrawl.domain import ErrorCode, HttpResponse
from scopecrawl.exceptions import HttpFetchError
from scopecrawl.services.fetch_task import FetchTask
from scopecrawl.services.link_extractor import LinkExtractor
from scopecrawl.services.scope_policy import ScopePolicy
from scopecrawl.services.url_registry import UrlRegistry

SEED = "http://x.test/a"


def _page(*hrefs):
    body = "".join(f'<a href="{h}">link</a>' for h in hrefs)
    return HttpResponse(200, f"<html><body>{body}</body></html>", "text/html; charset=utf-8")


@pytest.fixture
def registry():
    reg = UrlRegistry()
    reg.append(SEED)
    return reg


@pytest.fixture
def spawned():
    return []


def _task(registry, fetcher, spawned, **kwargs):
    return FetchTask(
        registry=registry,
        fetcher=fetcher,
        link_extractor=LinkExtractor(),
        scope_policy=ScopePolicy(SEED),
        spawn=lambda index, url: spawned.append((index, url)),
        **kwargs,
    )


def test_records_all_links_and_queues_only_in_scope(registry, spawned):
    fetcher = MagicMock()
    fetcher.fetch.return_value = _page("http://x.test/a/b", "http://other.test/x", "", "/a/b")
    task = _task(registry, fetcher, spawned)

    assert task.run(0, SEED) == ErrorCode.NONE

    rec = registry.get(0)
    assert rec.completed
    assert rec.error == ErrorCode.NONE
    # the empty href is ignored, everything else is recorded as written
    assert rec.links == ["http://x.test/a/b", "http://other.test/x", "/a/b"]
    assert spawned == [(1, "http://x.test/a/b")]
    assert [r.url for r in registry.snapshot()] == [SEED, "http://x.test/a/b"]


def test_not_found_status_is_terminal(registry, spawned):
    fetcher = MagicMock()
    fetcher.fetch.return_value = HttpResponse(404, "<a href='http://x.test/a/b'>x</a>", "text/html")
    task = _task(registry, fetcher, spawned)

    assert task.run(0, SEED) == ErrorCode.NON_HTTP_OK_STATUS
    rec = registry.get(0)
    assert rec.completed
    assert rec.links == []
    assert spawned == []


def test_other_2xx_status_is_not_success(registry, spawned):
    fetcher = MagicMock()
    fetcher.fetch.return_value = HttpResponse(204, "", "text/html")
    assert _task(registry, fetcher, spawned).run(0, SEED) == ErrorCode.NON_HTTP_OK_STATUS


def test_redirect_status_is_not_success(registry, spawned):
    fetcher = MagicMock()
    fetcher.fetch.return_value = HttpResponse(301, "", "text/html")
    assert _task(registry, fetcher, spawned).run(0, SEED) == ErrorCode.NON_HTTP_OK_STATUS
    assert spawned == []


def test_non_html_content_type_skips_parsing(registry, spawned):
    fetcher = MagicMock()
    fetcher.fetch.return_value = HttpResponse(200, '{"a": 1}', "application/json")
    extractor = MagicMock()
    task = FetchTask(
        registry=registry,
        fetcher=fetcher,
        link_extractor=extractor,
        scope_policy=ScopePolicy(SEED),
        spawn=lambda i, u: spawned.append((i, u)),
    )

    assert task.run(0, SEED) == ErrorCode.NON_HTML_CONTENT_TYPE
    assert not extractor.extract_links.called
    assert registry.get(0).completed


def test_network_error_classified(registry, spawned):
    fetcher = MagicMock()
    fetcher.fetch.side_effect = HttpFetchError(SEED, OSError("connection refused"))
    assert _task(registry, fetcher, spawned).run(0, SEED) == ErrorCode.NETWORK_ERROR
    assert registry.get(0).error == ErrorCode.NETWORK_ERROR
    assert registry.all_complete()


def test_parse_error_classified(registry, spawned):
    fetcher = MagicMock()
    fetcher.fetch.return_value = _page("http://x.test/a/b")

    def broken(_):
        raise ValueError("unparseable")

    task = FetchTask(
        registry=registry,
        fetcher=fetcher,
        link_extractor=LinkExtractor(soup_factory=broken),
        scope_policy=ScopePolicy(SEED),
        spawn=lambda i, u: spawned.append((i, u)),
    )
    assert task.run(0, SEED) == ErrorCode.PARSE_ERROR
    assert registry.get(0).links == []
    assert spawned == []


def test_unexpected_exception_still_completes_record(registry, spawned):
    fetcher = MagicMock()
    fetcher.fetch.side_effect = RuntimeError("bug")
    assert _task(registry, fetcher, spawned).run(0, SEED) == ErrorCode.NETWORK_ERROR
    assert registry.pending == 0


def test_already_registered_link_is_recorded_not_spawned(registry, spawned):
    registry.append("http://x.test/a/b")
    fetcher = MagicMock()
    fetcher.fetch.return_value = _page("HTTP://X.TEST/A/B", "http://x.test/a")
    _task(registry, fetcher, spawned).run(0, SEED)

    assert spawned == []
    assert registry.get(0).links == ["HTTP://X.TEST/A/B", "http://x.test/a"]
    assert len(registry) == 2


def test_stopped_task_leaves_record_incomplete(registry, spawned):
    stop = threading.Event()
    stop.set()
    fetcher = MagicMock()
    task = _task(registry, fetcher, spawned, stop_event=stop)

    assert task.run(0, SEED) is None
    assert not fetcher.fetch.called
    assert registry.pending == 1


def test_children_registered_before_parent_completes(registry):
    """The parent must not reach quiescence ahead of its children."""
    observed = []

    def spawn(index, url):
        observed.append(registry.pending)

    fetcher = MagicMock()
    fetcher.fetch.return_value = _page("http://x.test/a/b")
    task = FetchTask(
        registry=registry,
        fetcher=fetcher,
        link_extractor=LinkExtractor(),
        scope_policy=ScopePolicy(SEED),
        spawn=spawn,
    )
    task.run(0, SEED)

    # parent + child pending at spawn time, child still pending afterwards
    assert observed == [2]
    assert registry.pending == 1
