"""Bounded least-recently-used cache used by the engine."""

from __future__ import annotations

from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional

_MISSING = object()


class LRUCache:
    """Fixed-capacity mapping that evicts the least recently used entry.

    Reads and writes both refresh an entry's recency. A capacity of zero
    disables storage entirely.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("Cache capacity must be non-negative.")
        self.capacity = capacity
        self._data: "OrderedDict[Hashable, Any]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._data

    def get(self, key: Hashable, default: Optional[Any] = None) -> Any:
        value = self._data.get(key, _MISSING)
        if value is _MISSING:
            self.misses += 1
            return default
        self.hits += 1
        self._data.move_to_end(key)
        return value

    def put(self, key: Hashable, value: Any) -> None:
        if self.capacity == 0:
            return
        if key in self._data:
            self._data.move_to_end(key)
        self._data[key] = value
        while len(self._data) > self.capacity:
            self._data.popitem(last=False)

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the cached value for ``key``, computing and storing it on a miss."""
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = compute()
            self.put(key, value)
        return value

    def keys(self):
        return list(self._data.keys())

    def clear(self) -> None:
        self._data.clear()
        self.hits = 0
        self.misses = 0


__all__ = ["LRUCache"]
