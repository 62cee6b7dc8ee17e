import logging
from typing import Dict, Optional

from filtercraft_engine.cache.pattern_cache import PatternCache
from filtercraft_engine.cache.predicate_cache import PredicateCache
from filtercraft_engine.cache.result_cache import ResultCache
from filtercraft_engine.config import settings


class CacheService:
    """Owns the result, predicate and pattern caches.

    All three layers are only consulted when a call sets ``enable_cache``. An
    instance assumes cooperative, non-concurrent use.

    Attributes:
        results: Filter results per collection.
        predicates: Compiled predicates per expression key.
        patterns: Compiled wildcard and regex matchers.
    """

    def __init__(self,
                 predicate_capacity: Optional[int] = None,
                 result_collections: Optional[int] = None,
                 logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)
        self.results = ResultCache(result_collections or settings.result_cache_collections, self._logger)
        self.predicates = PredicateCache(predicate_capacity or settings.predicate_cache_size)
        self.patterns = PatternCache()

    def clear(self) -> None:
        """Purge every cache layer."""
        self.results.clear()
        self.predicates.clear()
        self.patterns.clear()
        self._logger.debug("Cleared result, predicate and pattern caches")

    def stats(self) -> Dict[str, int]:
        return {
            'predicate_cache_size': len(self.predicates),
            'regex_cache_size': len(self.patterns),
            'result_cache_size': self.results.size(),
        }
