"""Document store interface and the in-memory backend.

Every entity lives in its own table keyed by a single string attribute. The
interface mirrors the handful of DynamoDB operations the services rely on:
get, (conditional) put, scan with an optional filter, paged scan, field-level
update and delete.
"""
import copy
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


class StoreError(Exception):
    """Base class for document store failures."""


class ItemExists(StoreError):
    """Conditional put found an item under the same key."""


class VersionConflict(StoreError):
    """Stored item's version differs from the expected one."""


class ItemNotFound(StoreError):
    """Update targeted a key that is not in the table."""


@dataclass
class ScanFilter:
    """Backend-neutral scan predicate.

    ``equals`` requires each attribute to equal the given value. ``contains``
    is a case-sensitive term that must appear in at least one of
    ``contains_fields`` (substring for strings, membership for lists).
    """

    equals: Dict[str, Any] = field(default_factory=dict)
    contains: Optional[str] = None
    contains_fields: Tuple[str, ...] = ()

    def matches(self, item: dict) -> bool:
        for name, value in self.equals.items():
            if item.get(name) != value:
                return False
        if self.contains is not None:
            return any(_contains(item.get(name), self.contains) for name in self.contains_fields)
        return True


def _contains(value: Any, term: str) -> bool:
    if isinstance(value, str):
        return term in value
    if isinstance(value, (list, tuple, set)):
        return term in value
    return False


class DocumentTable:
    """Operations every table backend provides."""

    hash_key: str
    name: str

    def get(self, key: str) -> Optional[dict]:
        raise NotImplementedError

    def put(self, item: dict, *, if_absent: bool = False, expected_version: Optional[int] = None) -> None:
        raise NotImplementedError

    def scan_page(
        self,
        limit: Optional[int] = None,
        start_key: Optional[dict] = None,
        filter: Optional[ScanFilter] = None,
    ) -> Tuple[List[dict], Optional[dict]]:
        raise NotImplementedError

    def update(self, key: str, fields: dict) -> dict:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def scan(self, filter: Optional[ScanFilter] = None) -> List[dict]:
        """Scan the whole table, following continuation keys to the end."""
        items: List[dict] = []
        start_key = None
        while True:
            page, start_key = self.scan_page(start_key=start_key, filter=filter)
            items.extend(page)
            if not start_key:
                return items

    def exists_any(self) -> bool:
        items, _ = self.scan_page(limit=1)
        return bool(items)


class MemoryTable(DocumentTable):
    """Process-local table with the same semantics as the DynamoDB backend.

    Items are scanned in key order; a continuation key is the key of the last
    item returned and is only handed out when more items remain.
    """

    def __init__(self, name: str, hash_key: str):
        self.name = name
        self.hash_key = hash_key
        self._items: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._items)

    def get(self, key: str) -> Optional[dict]:
        with self._lock:
            item = self._items.get(key)
            return copy.deepcopy(item) if item is not None else None

    def put(self, item: dict, *, if_absent: bool = False, expected_version: Optional[int] = None) -> None:
        key = item[self.hash_key]
        with self._lock:
            existing = self._items.get(key)
            if if_absent and existing is not None:
                raise ItemExists(f"{self.name}: {key} already exists")
            if expected_version is not None:
                current = (existing or {}).get("version", 0)
                if current != expected_version:
                    raise VersionConflict(
                        f"{self.name}: {key} is at version {current}, expected {expected_version}"
                    )
            self._items[key] = copy.deepcopy(item)

    def scan_page(self, limit=None, start_key=None, filter=None):
        with self._lock:
            keys = sorted(self._items)
            if start_key:
                after = start_key[self.hash_key]
                keys = [k for k in keys if k > after]

            evaluated = keys if limit is None else keys[:limit]
            items = [copy.deepcopy(self._items[k]) for k in evaluated]
        if filter is not None:
            items = [item for item in items if filter.matches(item)]

        last_key = None
        if evaluated and len(evaluated) < len(keys):
            last_key = {self.hash_key: evaluated[-1]}
        return items, last_key

    def update(self, key: str, fields: dict) -> dict:
        with self._lock:
            existing = self._items.get(key)
            if existing is None:
                raise ItemNotFound(f"{self.name}: {key} not found")
            existing.update(copy.deepcopy(fields))
            return copy.deepcopy(existing)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._items.pop(key, None) is not None
