import json
import os
import stat

import pytest

from scopecrawl.domain import ErrorCode, UrlRecord
from scopecrawl.exceptions import CheckpointError
from scopecrawl.services.checkpoint_store import CheckpointStore


def _records():
    return [
        UrlRecord(url="http://x.test/a", completed=True, links=["/a/b", "http://x.test/a/c"]),
        UrlRecord(url="http://x.test/a/c", completed=True, error=ErrorCode.NON_HTML_CONTENT_TYPE),
        UrlRecord(url="http://x.test/a/d"),
    ]


def test_dumps_uses_file_schema():
    doc = json.loads(CheckpointStore().dumps(_records()))
    assert list(doc) == ["urls"]
    assert doc["urls"][0] == {
        "url": "http://x.test/a",
        "completed": True,
        "error": 0,
        "links": ["/a/b", "http://x.test/a/c"],
    }
    assert doc["urls"][1]["error"] == 3
    assert list(doc["urls"][2]) == ["url", "completed", "error", "links"]


def test_persist_load_persist_is_byte_stable():
    store = CheckpointStore()
    first = store.dumps(_records())
    again = store.dumps(store.loads(first))
    assert again == first


def test_loads_accepts_null_links():
    data = b'{"urls": [{"url": "http://x.test/a", "completed": false, "error": 0, "links": null}]}'
    records = CheckpointStore().loads(data)
    assert records == [UrlRecord(url="http://x.test/a")]


@pytest.mark.parametrize("data", [
    b"",
    b"not json",
    b"[]",
    b'{"pages": []}',
    b'{"urls": [{"completed": true}]}',
    b'{"urls": [{"url": "http://x.test/a", "error": 9}]}',
    b'{"urls": [{"url": "http://x.test/a", "links": [1, 2]}]}',
    b'{"urls": [{"url": "http://x.test/a", "completed": "false"}]}',
    b'{"urls": [{"url": "http://x.test/a", "completed": 1}]}',
    b'{"urls": [{"url": "http://x.test/a", "error": 1.7}]}',
    b'{"urls": [{"url": "http://x.test/a", "error": "1"}]}',
    b'{"urls": [{"url": "http://x.test/a", "error": true}]}',
])
def test_loads_rejects_malformed_documents(data):
    with pytest.raises(CheckpointError):
        CheckpointStore().loads(data, "working.json")


def test_save_and_load_round_trip(tmp_path):
    store = CheckpointStore()
    path = str(tmp_path / "working.json")
    store.save(path, _records())
    assert store.load(path) == _records()
    # no temp files left behind
    assert os.listdir(tmp_path) == ["working.json"]


def test_save_replaces_existing_file(tmp_path):
    store = CheckpointStore()
    path = str(tmp_path / "output.json")
    store.save(path, _records())
    store.save(path, _records()[:1])
    assert len(store.load(path)) == 1


def test_save_into_missing_directory_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        CheckpointStore().save(str(tmp_path / "nope" / "out.json"), _records())


def test_load_missing_file_raises_checkpoint_error(tmp_path):
    with pytest.raises(CheckpointError):
        CheckpointStore().load(str(tmp_path / "missing.json"))


def test_save_creates_file_with_umask_mode(tmp_path):
    path = str(tmp_path / "output.json")
    old = os.umask(0o022)
    try:
        CheckpointStore().save(path, _records())
    finally:
        os.umask(old)
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o644


def test_save_keeps_mode_of_existing_file(tmp_path):
    path = tmp_path / "output.json"
    path.write_bytes(b"{}")
    os.chmod(path, 0o640)
    CheckpointStore().save(str(path), _records())
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o640
