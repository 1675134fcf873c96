import logging
from typing import Callable, List, Optional

from bs4 import BeautifulSoup

from scopecrawl.exceptions import HtmlParseError

logger = logging.getLogger(__name__)


def is_html_content_type(content_type: Optional[str]) -> bool:
    """True when the Content-Type header names an HTML document."""
    if not content_type:
        return False
    return content_type.strip().lower().startswith("text/html")


class LinkExtractor:
    """Pull anchor href values out of an HTML body.

    Hrefs come back as written in the page (no joining against the page
    URL), empty ones dropped, duplicates within the page removed ignoring
    case with the first occurrence kept.
    """

    def __init__(
        self,
        soup_factory: Optional[Callable[[str], BeautifulSoup]] = None,
    ):
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))

    def extract_links(self, url: str, html: str) -> List[str]:
        try:
            soup = self._soup_factory(html)
        except Exception as e:
            raise HtmlParseError(url, e) from e

        links: List[str] = []
        seen = set()
        for a in soup.find_all("a", href=True):
            href = a.get("href")
            if not href:
                continue
            key = href.lower()
            if key in seen:
                logger.debug("Ignoring duplicate link %s on %s", href, url)
                continue
            seen.add(key)
            links.append(href)
        return links
