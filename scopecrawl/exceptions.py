"""Custom exceptions for ScopeCrawl services."""


class HttpFetchError(Exception):
    """Raised when an HTTP fetch fails due to network/transport errors."""

    def __init__(self, url: str, original: Exception):
        self.url = url
        self.original = original
        super().__init__(f"HTTP fetch failed for {url}: {original}")


class HtmlParseError(Exception):
    """Raised when a fetched body cannot be parsed as an HTML document."""

    def __init__(self, url: str, original: Exception):
        self.url = url
        self.original = original
        super().__init__(f"HTML parse failed for {url}: {original}")


class CheckpointError(Exception):
    """Raised when a checkpoint file cannot be read or decoded."""

    def __init__(self, path: str, reason: str = "could not be decoded"):
        self.path = path
        self.reason = reason
        super().__init__(f"Checkpoint '{path}' {reason}")


class StartupError(Exception):
    """Raised for fatal bootstrap conditions; no work is attempted after it."""
