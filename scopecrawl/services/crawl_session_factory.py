"""Factory for creating fresh or resumed CrawlSession instances."""
import logging
import os
from typing import Optional

from scopecrawl.domain.crawl_session import CrawlSession
from scopecrawl.exceptions import CheckpointError, StartupError
from scopecrawl.services.checkpoint_store import CheckpointStore
from scopecrawl.services.scope_policy import is_request_uri
from scopecrawl.services.url_registry import UrlRegistry

logger = logging.getLogger(__name__)


def _same_file_name(a: str, b: str) -> bool:
    return os.path.abspath(a).lower() == os.path.abspath(b).lower()


class CrawlSessionFactory:
    """Builds the registry for a run, either from a seed or from a checkpoint.

    Every refusal raises `StartupError` before any network request is made
    and without touching an existing checkpoint file.
    """

    def __init__(self, *, checkpoint_store: CheckpointStore, checkpoint_path: str):
        self.checkpoint_store = checkpoint_store
        self.checkpoint_path = checkpoint_path

    def create(self, seed_url: Optional[str], *, resume: bool, output_path: str) -> CrawlSession:
        """Return a session ready to crawl.

        Args:
            seed_url: Initial address; mandatory unless a checkpoint is resumed
            resume: Whether an existing checkpoint may be loaded
            output_path: Final output file; must differ from the checkpoint file

        Raises:
            StartupError: on any condition that forbids starting the crawl
        """
        if _same_file_name(output_path, self.checkpoint_path):
            raise StartupError(
                f"Please use another output filename, {os.path.basename(self.checkpoint_path)} is reserved"
            )
        if not seed_url and not resume:
            raise StartupError("No initial url provided, only allowed when resuming")

        if os.path.exists(self.checkpoint_path):
            if not resume:
                raise StartupError(
                    f"Checkpoint {self.checkpoint_path} found. Use -resume to continue the previous "
                    "crawl, or remove it and run again"
                )
            return self._resume(seed_url)

        if not seed_url:
            raise StartupError(f"Nothing to resume: {self.checkpoint_path} not found and no initial url provided")
        if not is_request_uri(seed_url) or seed_url.startswith("/"):
            raise StartupError(f"Initial url {seed_url!r} is not an absolute url")
        if resume:
            logger.info("No checkpoint at %s, starting a fresh crawl", self.checkpoint_path)

        registry = UrlRegistry()
        registry.append(seed_url)
        return CrawlSession(registry=registry, seed=seed_url, resumed=False)

    def _resume(self, seed_url: Optional[str]) -> CrawlSession:
        try:
            records = self.checkpoint_store.load(self.checkpoint_path)
        except CheckpointError as e:
            raise StartupError(f"Error parsing {self.checkpoint_path}: {e}") from e
        if not records:
            raise StartupError(f"Empty or malformed {self.checkpoint_path}, please check or delete it")

        registry = UrlRegistry(records)
        seed = records[0].url
        if seed_url and seed_url != seed:
            logger.info("Ignoring -url %s while resuming; seed is %s", seed_url, seed)
        logger.info(
            "Checkpoint loaded: %d urls, %d pending",
            len(registry),
            registry.pending,
        )
        return CrawlSession(registry=registry, seed=seed, resumed=True)
