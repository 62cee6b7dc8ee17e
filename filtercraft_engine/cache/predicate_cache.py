from typing import Any, Callable, Optional

from filtercraft_engine.cache.lru_cache import LRUCache

Predicate = Callable[[Any], bool]


class PredicateCache:
    """
    Compiled predicates keyed by the structural key of expression + config.

    Each entry pins the expression and config it was built from: the key embeds
    ``id()`` of callables, and a pinned object cannot be collected and have its
    id reused while the entry is alive.
    """

    def __init__(self, capacity: int = 500):
        self._lru = LRUCache(capacity, 'predicate')

    def get(self, key: str) -> Optional[Predicate]:
        entry = self._lru.get(key)
        return entry[0] if entry is not None else None

    def put(self, key: str, predicate: Predicate, expression: Any, config: Any) -> None:
        self._lru.put(key, (predicate, expression, config))

    def clear(self) -> None:
        self._lru.clear()

    def __len__(self) -> int:
        return len(self._lru)
