"""Dependency injection container for the application."""
from dependency_injector import containers, providers
import requests

from scopecrawl import config as env
from scopecrawl.services.checkpoint_store import CheckpointStore
from scopecrawl.services.crawl_session_factory import CrawlSessionFactory
from scopecrawl.services.crawl_supervisor import CrawlSupervisor
from scopecrawl.services.fetcher import HttpServiceFetcher
from scopecrawl.services.http_service import HttpService
from scopecrawl.services.link_extractor import LinkExtractor


# Environment variables used by the container (read via `scopecrawl.config` helpers).
#
# USER_AGENT (str, default: "ScopeCrawl/0.1")
#   User-Agent header for outbound HTTP requests.
#
# HTTP_TIMEOUT (int seconds, default: 10)
#   Timeout for outbound HTTP requests.
#
# SCOPECRAWL_MAX_WORKERS (int, default: 4)
#   Size of the fetch thread pool, i.e. the cap on concurrent requests.
#   Overridden by the -workers flag.
#
# SCOPECRAWL_SCOPE_MODE (str, default: "prefix")
#   "prefix" for a plain case-insensitive prefix test against the seed,
#   "boundary" to also require '/' or '?' right after the seed.
#   Overridden by the -scope flag.
#
# SCOPECRAWL_POLL_INTERVAL (float seconds, default: 0.5)
#   How often the supervisor wakes from the quiescence wait to check for
#   an interrupt.
ENV = {
    "USER_AGENT": env.user_agent(),
    "HTTP_TIMEOUT": env.http_timeout_seconds(),
    "SCOPECRAWL_MAX_WORKERS": env.max_workers(),
    "SCOPECRAWL_SCOPE_MODE": env.scope_mode(),
    "SCOPECRAWL_POLL_INTERVAL": env.poll_interval_seconds(),
    "CHECKPOINT_FILE": env.CHECKPOINT_FILE,
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for ScopeCrawl."""

    # Configuration
    config = providers.Configuration(default=ENV)

    http_service = providers.Singleton(
        HttpService,
        user_agent=config.USER_AGENT.as_(str),
        http_client=providers.Object(requests.get),
        timeout=config.HTTP_TIMEOUT.as_(int),
    )

    page_fetcher = providers.Singleton(
        HttpServiceFetcher,
        http_service=http_service,
    )

    link_extractor = providers.Singleton(
        LinkExtractor
    )

    checkpoint_store = providers.Singleton(
        CheckpointStore
    )

    crawl_session_factory = providers.Factory(
        CrawlSessionFactory,
        checkpoint_store=checkpoint_store,
        checkpoint_path=config.CHECKPOINT_FILE.as_(str),
    )

    # `session` and `output_path` are supplied by the caller per run.
    crawl_supervisor = providers.Factory(
        CrawlSupervisor,
        fetcher=page_fetcher,
        link_extractor=link_extractor,
        checkpoint_store=checkpoint_store,
        checkpoint_path=config.CHECKPOINT_FILE.as_(str),
        max_workers=config.SCOPECRAWL_MAX_WORKERS.as_(int),
        scope_mode=config.SCOPECRAWL_SCOPE_MODE.as_(str),
        poll_interval=config.SCOPECRAWL_POLL_INTERVAL.as_(float),
    )
