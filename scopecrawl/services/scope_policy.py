import logging
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

PREFIX = "prefix"
BOUNDARY = "boundary"

# Characters allowed to follow the seed under the boundary policy.
_BOUNDARY_CHARS = ("/", "?")


def is_request_uri(candidate: str) -> bool:
    """Syntactic check for a request target.

    Accepts an absolute URI with scheme and authority, or an absolute path.
    Rejects empty strings, whitespace and control characters, and anything
    urlsplit refuses (e.g. a malformed IPv6 host).
    """
    if not candidate:
        return False
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in candidate):
        return False
    try:
        parts = urlsplit(candidate)
        # Accessing .port validates the authority.
        parts.port
    except ValueError:
        return False
    if parts.scheme:
        return bool(parts.netloc)
    return candidate.startswith("/") and not candidate.startswith("//")


class ScopePolicy:
    """Decides whether a discovered link is fetched recursively.

    Checks run in order and the first failure rejects: syntactic validity,
    containment under the seed, then absence from the registry. Containment
    is a case-insensitive string prefix test (`prefix` mode), so
    `http://example.com/foo10` is inside `http://example.com/foo`. The
    `boundary` mode additionally requires the character after the seed to
    be `/` or `?`.

    A rejected link is still recorded on its page; only crawling is denied.
    """

    def __init__(self, seed: str, mode: str = PREFIX):
        mode = (mode or PREFIX).strip().lower()
        if mode not in (PREFIX, BOUNDARY):
            raise ValueError(f"Unknown scope mode: {mode!r}")
        self.seed = seed
        self.mode = mode
        self._seed_key = seed.lower()

    def matches_scope(self, candidate: str, index: int = -1) -> bool:
        """Validity and containment checks; no registry access."""
        if not is_request_uri(candidate):
            logger.debug("[%d] url %s is not valid", index, candidate)
            return False
        key = candidate.lower()
        if not key.startswith(self._seed_key):
            logger.debug("[%d] url %s is not a child of the seed", index, candidate)
            return False
        if self.mode == BOUNDARY and len(key) > len(self._seed_key):
            if key[len(self._seed_key)] not in _BOUNDARY_CHARS:
                logger.debug("[%d] url %s does not continue the seed path", index, candidate)
                return False
        return True

    def is_in_scope(self, candidate: str, registry, index: int = -1) -> bool:
        """Full filter including the already-seen check against `registry`.

        Callers that go on to append must use `registry.append_if_absent`
        so the already-seen check and the append happen atomically.
        """
        if not self.matches_scope(candidate, index):
            return False
        if registry.contains(candidate):
            logger.debug("[%d] url %s already in registry", index, candidate)
            return False
        return True
