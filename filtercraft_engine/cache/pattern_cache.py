import re
from typing import Hashable, Optional

from filtercraft_engine.cache.lru_cache import LRUCache


class PatternCache:
    """Compiled wildcard and regex matchers keyed by (kind, pattern, flags)."""

    def __init__(self, capacity: int = 1000):
        self._lru = LRUCache(capacity, 'pattern')

    def get(self, key: Hashable) -> Optional[re.Pattern]:
        return self._lru.get(key)

    def put(self, key: Hashable, compiled: re.Pattern) -> None:
        self._lru.put(key, compiled)

    def clear(self) -> None:
        self._lru.clear()

    def __len__(self) -> int:
        return len(self._lru)
