from .registry import UrlRegistry
from .store import UrlRecordStore

__all__ = ["UrlRegistry", "UrlRecordStore"]
