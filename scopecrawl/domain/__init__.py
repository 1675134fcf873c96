"""Domain objects for ScopeCrawl - explicit re-exports to satisfy linters."""
from .url_record import ErrorCode as ErrorCode
from .url_record import UrlRecord as UrlRecord
from .http_response import HttpResponse as HttpResponse
from .crawl_result import CrawlResult as CrawlResult

__all__ = ["ErrorCode", "UrlRecord", "HttpResponse", "CrawlResult"]
