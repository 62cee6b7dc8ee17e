"""
Filter results keyed by (collection identity, expression key).

    collection supports weakref ──► weak entry, purged by a finalizer when
                                    the collection is collected
    plain list / tuple          ──► pinned entry in an LRU of collections,
                                    bounded by ``max_collections``

Lookups compare the stored collection by identity, so an id reused by a new
object never returns a stale result. A collection mutated in place keeps its
identity; ``clear()`` is the way to force recomputation for it.

Each result also pins the expression and config its key was built from. The
key embeds ``id()`` of callables, so a callable must stay alive as long as a
result keyed by its id.
"""
import logging
import weakref
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

from filtercraft_engine.monitoring.metrics import record_lookup

Entry = Tuple[List[Any], Tuple[Any, ...]]


class ResultCache:

    def __init__(self, max_collections: int = 64, logger: Optional[logging.Logger] = None):
        if max_collections <= 0:
            raise ValueError(f"max_collections must be positive, got {max_collections}")
        self._max_collections = max_collections
        self._logger = logger or logging.getLogger(__name__)
        self._weak: Dict[int, Tuple[weakref.ref, Dict[str, Entry]]] = {}
        self._pinned: "OrderedDict[int, Tuple[Any, Dict[str, Entry]]]" = OrderedDict()
        self._warned_pinning = False

    def get(self, collection, key: str) -> Optional[List[Any]]:
        """Return a copy of the cached result, or None."""
        results = self._results_for(collection)
        entry = results.get(key) if results is not None else None
        record_lookup('result', entry is not None)
        return list(entry[0]) if entry is not None else None

    def put(self, collection, key: str, items: List[Any], expression: Any = None, config: Any = None) -> None:
        results = self._results_for(collection)
        if results is None:
            results = self._track(collection)
        results[key] = (list(items), (expression, config))

    def clear(self) -> None:
        self._weak.clear()
        self._pinned.clear()

    def size(self) -> int:
        return (sum(len(results) for _, results in self._weak.values())
                + sum(len(results) for _, results in self._pinned.values()))

    def _results_for(self, collection) -> Optional[Dict[str, Entry]]:
        cid = id(collection)
        weak_entry = self._weak.get(cid)
        if weak_entry is not None:
            ref, results = weak_entry
            return results if ref() is collection else None
        pinned_entry = self._pinned.get(cid)
        if pinned_entry is not None:
            pinned, results = pinned_entry
            if pinned is collection:
                self._pinned.move_to_end(cid)
                return results
        return None

    def _track(self, collection) -> Dict[str, Entry]:
        cid = id(collection)
        results: Dict[str, Entry] = {}
        try:
            ref = weakref.ref(collection, lambda _ref, cid=cid: self._weak.pop(cid, None))
        except TypeError:
            # list and tuple instances cannot be weakly referenced
            self._pin(cid, collection, results)
            return results
        self._weak[cid] = (ref, results)
        return results

    def _pin(self, cid: int, collection, results: Dict[str, Entry]) -> None:
        if not self._warned_pinning:
            self._logger.warning(
                f"{type(collection).__name__} collections cannot be weakly referenced; "
                f"caching results for up to {self._max_collections} pinned collections")
            self._warned_pinning = True
        self._pinned[cid] = (collection, results)
        self._pinned.move_to_end(cid)
        while len(self._pinned) > self._max_collections:
            evicted, _ = self._pinned.popitem(last=False)
            self._logger.debug(f"Evicted cached results for collection {evicted}")
