import requests
from typing import Callable

from scopecrawl.domain.http_response import HttpResponse
from scopecrawl.exceptions import HttpFetchError
from scopecrawl.services.link_extractor import is_html_content_type


class HttpService:
    """
    HTTP client wrapper for fetching web pages.

    Requires http_client callable for dependency injection.
    This enables easy testing without patching and allows swapping HTTP libraries.

    Responses are requested streamed so the body is only downloaded for a
    200 HTML page; anything else comes back with empty text.
    """

    def __init__(self, user_agent: str, http_client: Callable, timeout: int = 10):
        self.user_agent = user_agent
        self.timeout = timeout
        self.http_client = http_client

    def fetch(self, url: str) -> HttpResponse:
        """Fetch URL and return response with status code, body text, and Content-Type."""
        headers = {"User-Agent": self.user_agent}
        try:
            resp = self.http_client(url, headers=headers, timeout=self.timeout, stream=True)
        except requests.exceptions.RequestException as e:
            raise HttpFetchError(url, e) from e

        try:
            # Extract Content-Type if response has headers; let real exceptions bubble up.
            ct = None
            if hasattr(resp, 'headers'):
                ct = resp.headers.get('Content-Type')

            text = ""
            if resp.status_code == 200 and is_html_content_type(ct):
                try:
                    text = resp.text
                except requests.exceptions.RequestException as e:
                    # Body streaming can fail after headers arrived.
                    raise HttpFetchError(url, e) from e

            return HttpResponse(resp.status_code, text, ct)
        finally:
            close = getattr(resp, 'close', None)
            if callable(close):
                close()
