from __future__ import annotations

from typing import Protocol

from scopecrawl.domain.http_response import HttpResponse


class Fetcher(Protocol):
    """Fetch a URL and return a normalized HTTP-like response.

    Raises `HttpFetchError` on transport failure.
    """

    def fetch(self, url: str) -> HttpResponse: ...


class HttpServiceFetcher:
    def __init__(self, http_service):
        self._http_service = http_service

    def fetch(self, url: str) -> HttpResponse:
        return self._http_service.fetch(url)
