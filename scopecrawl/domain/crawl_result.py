"""Crawl result data model."""
from typing import NamedTuple


class CrawlResult(NamedTuple):
    """Result of a crawl run.

    Lets the command shell pick an exit path and log a summary without
    reaching into the registry.
    """
    urls_total: int
    """Number of records in the registry when the run ended"""

    urls_completed: int
    """Number of records marked complete when the run ended"""

    stopped: bool
    """True if the run was interrupted and checkpointed, False if it reached quiescence"""

    saved: bool = True
    """False if the final output or checkpoint write failed"""
