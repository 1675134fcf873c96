from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List


class ErrorCode(IntEnum):
    """Per-URL fetch outcome, stored as its integer value in checkpoint files."""

    NONE = 0
    NETWORK_ERROR = 1
    NON_HTTP_OK_STATUS = 2
    NON_HTML_CONTENT_TYPE = 3
    PARSE_ERROR = 4


@dataclass
class UrlRecord:
    """Crawl state for one discovered address.

    `links` holds every href seen on the page, including malformed and
    out-of-scope ones. It records discovery, not crawling.
    """

    url: str
    completed: bool = False
    error: ErrorCode = ErrorCode.NONE
    links: List[str] = field(default_factory=list)

    def copy(self) -> "UrlRecord":
        return UrlRecord(url=self.url, completed=self.completed, error=self.error, links=list(self.links))

    def __repr__(self):
        return f"<UrlRecord url={self.url} completed={self.completed} error={self.error.name}>"
