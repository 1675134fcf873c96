"""JSON encode/decode of the registry for checkpoint and output files."""
import json
import logging
import os
import stat
import tempfile
from typing import List

from scopecrawl.domain.url_record import ErrorCode, UrlRecord
from scopecrawl.exceptions import CheckpointError

logger = logging.getLogger(__name__)


class CheckpointStore:
    """Reads and writes `{"urls": [...]}` documents.

    The checkpoint and the final output share this schema. Writes replace
    the target atomically so an interrupted write never truncates it.
    """

    def __init__(self, indent: int = 1):
        self.indent = indent

    def dumps(self, records: List[UrlRecord]) -> bytes:
        payload = {
            "urls": [
                {
                    "url": r.url,
                    "completed": bool(r.completed),
                    "error": int(r.error),
                    "links": list(r.links),
                }
                for r in records
            ]
        }
        return json.dumps(payload, indent=self.indent, ensure_ascii=False).encode("utf-8")

    def loads(self, data: bytes, path: str = "<memory>") -> List[UrlRecord]:
        try:
            doc = json.loads(data.decode("utf-8") if isinstance(data, bytes) else data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CheckpointError(path, f"is not valid JSON: {e}") from e

        if not isinstance(doc, dict) or not isinstance(doc.get("urls"), list):
            raise CheckpointError(path, "has no 'urls' array")

        records: List[UrlRecord] = []
        for pos, item in enumerate(doc["urls"]):
            records.append(self._record_from(item, pos, path))
        return records

    def _record_from(self, item, pos: int, path: str) -> UrlRecord:
        if not isinstance(item, dict) or not isinstance(item.get("url"), str):
            raise CheckpointError(path, f"entry {pos} has no 'url' string")
        links = item.get("links")
        # Older writers emit null for a page without links.
        if links is None:
            links = []
        if not isinstance(links, list) or not all(isinstance(x, str) for x in links):
            raise CheckpointError(path, f"entry {pos} has malformed 'links'")
        completed = item.get("completed", False)
        if not isinstance(completed, bool):
            raise CheckpointError(path, f"entry {pos} has non-boolean 'completed' {completed!r}")
        raw_error = item.get("error", 0)
        # bool is an int subclass; true/false is not an error code.
        if isinstance(raw_error, bool) or not isinstance(raw_error, int):
            raise CheckpointError(path, f"entry {pos} has non-integer 'error' {raw_error!r}")
        try:
            error = ErrorCode(raw_error)
        except ValueError as e:
            raise CheckpointError(path, f"entry {pos} has unknown error code {raw_error!r}") from e
        return UrlRecord(
            url=item["url"],
            completed=completed,
            error=error,
            links=list(links),
        )

    def load(self, path: str) -> List[UrlRecord]:
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise CheckpointError(path, f"could not be read: {e}") from e
        return self.loads(data, path)

    def save(self, path: str, records: List[UrlRecord]) -> None:
        """Write `records` to `path`. Raises OSError on failure."""
        data = self.dumps(records)
        directory = os.path.dirname(os.path.abspath(path))
        fd, tmp_path = tempfile.mkstemp(prefix=".scopecrawl-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp_path, _file_mode(path))
            os.replace(tmp_path, path)
        except OSError:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise
        logger.debug("Wrote %d urls to %s", len(records), path)


def _file_mode(path: str) -> int:
    """Permission bits for a rewrite of `path`.

    An existing file keeps its mode; a new one gets what `open()` would
    give it under the current umask. mkstemp always creates 0600.
    """
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        pass
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask
