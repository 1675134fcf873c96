from __future__ import annotations

from typing import Dict, List, Optional

from scopecrawl.domain.url_record import ErrorCode, UrlRecord


class UrlRecordStore:
    """Ordered record list plus a lowercased address index.

    Not synchronized; `UrlRegistry` owns the lock.
    """

    def __init__(self):
        self._records: List[UrlRecord] = []
        self._index_by_key: Dict[str, int] = {}

    @staticmethod
    def _key(address: str) -> str:
        return address.lower()

    def __len__(self) -> int:
        return len(self._records)

    def find(self, address: str) -> Optional[int]:
        return self._index_by_key.get(self._key(address))

    def add(self, record: UrlRecord) -> int:
        key = self._key(record.url)
        if key in self._index_by_key:
            raise ValueError(f"url already registered: {record.url}")
        self._records.append(record)
        index = len(self._records) - 1
        self._index_by_key[key] = index
        return index

    def get(self, index: int) -> UrlRecord:
        if index < 0 or index >= len(self._records):
            raise IndexError(f"no url record at index {index}")
        return self._records[index]

    def complete(self, index: int, error: ErrorCode) -> bool:
        rec = self.get(index)
        if rec.completed:
            return False
        rec.completed = True
        rec.error = ErrorCode(error)
        return True

    def append_link(self, index: int, link: str) -> None:
        self.get(index).links.append(link)

    def incomplete(self) -> List[int]:
        return [i for i, r in enumerate(self._records) if not r.completed]

    def all_complete(self) -> bool:
        return all(r.completed for r in self._records)

    def copy_all(self) -> List[UrlRecord]:
        return [r.copy() for r in self._records]
