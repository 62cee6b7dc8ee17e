"""
FilterService Workflow
======================

    filter(collection, expression, options)
           │
           ▼
    ┌─────────────────────────────────────┐
    │  collection is a list or tuple?     │────► TypeMismatchError
    └─────────────────────────────────────┘
           │
           ▼
    ┌─────────────────────────────────────┐
    │  merge_config(options)              │────► ConfigurationError
    │  validate_expression(expression)    │────► InvalidExpressionError / ValidationError /
    └─────────────────────────────────────┘      OperatorError / GeospatialError / TypeMismatchError
           │
           ├── debug ──────► DebugFilter.run (no cache) ──► print tree ──┐
           │                                                             │
           ▼                                                             │
    ┌─────────────────────────────────────┐                              │
    │  enable_cache?                      │                              │
    │  ├─ result cache hit ──► copy       │                              │
    │  └─ miss: compile (predicate cache) │                              │
    │          evaluate, store raw result │                              │
    └─────────────────────────────────────┘                              │
           │                                                             │
           ▼                                                             │
    ┌─────────────────────────────────────┐                              │
    │  order_by / limit                   │ ◄────────────────────────────┘
    └─────────────────────────────────────┘

The lazy operations share validation and compilation with the eager path but
never touch the result cache.
"""
import logging
import time
from collections.abc import AsyncIterable, Iterable
from typing import Any, AsyncIterator, Callable, Dict, Iterator, List, Optional, Tuple

from filtercraft_data_model.checksum_util import expression_key
from filtercraft_data_model.filter_config import FilterConfig, merge_config
from filtercraft_engine.cache.cache_service import CacheService
from filtercraft_engine.config import settings
from filtercraft_engine.debug.debug_filter import DebugFilter, DebugResult
from filtercraft_engine.engine.lazy_iterators import async_filter, chunk, require_positive, take
from filtercraft_engine.engine.sort_manager import apply_limit, sort_by_fields
from filtercraft_engine.matching.pattern_compiler import PatternCompiler
from filtercraft_engine.monitoring.metrics import filter_latency
from filtercraft_engine.monitoring.performance_monitor import PerformanceMonitor
from filtercraft_engine.predicate.predicate_compiler import PredicateCompiler
from filtercraft_engine.validation.expression_validator import validate_expression
from filtercraft_exception_model.exception import TypeMismatchError

Predicate = Callable[[Any], bool]


def _noop() -> None:
    return None


class FilterService:
    """Entry point for eager, lazy and debug filtering.

    Attributes:
        _cache: Cache layers consulted when a call enables caching.
        _monitor: Per-phase timings, recorded when a call enables monitoring.
        _defaults: Config that per-call options are merged over.
        _logger: Logger instance for recording diagnostic information.
    """

    def __init__(self,
                 cache_service: Optional[CacheService] = None,
                 logger: Optional[logging.Logger] = None,
                 monitor: Optional[PerformanceMonitor] = None,
                 defaults: Optional[FilterConfig] = None):
        """
        Initialize the FilterService.

        Args:
            cache_service: Cache layers to use; a private instance by default.
            logger: Logger instance
            monitor: Performance monitor; a private instance by default.
            defaults: Base configuration; derived from engine settings by default.
        """
        self._logger = logger or logging.getLogger(__name__)
        self._cache = cache_service or CacheService(logger=self._logger)
        self._monitor = monitor or PerformanceMonitor()
        self._defaults = defaults or settings.default_filter_config()
        self._debug_filter = DebugFilter(self._logger)

    @property
    def cache(self) -> CacheService:
        return self._cache

    # ---- eager ----

    def filter(self, collection, expression, options=None) -> List[Any]:
        """Filter a list or tuple of records.

        Args:
            collection: Records to filter.
            expression: Raw expression (string, number, mapping or function).
            options: Raw options mapping, a FilterConfig, or None.

        Returns:
            List of matching records, sorted and limited if requested.

        Raises:
            TypeMismatchError: If ``collection`` is not a list or tuple.
            FilterError: Any validation failure of the expression or options.
        """
        self._require_collection(collection)
        typed, config = self._prepare(expression, options)

        if config.debug:
            result = self._debug_filter.run(collection, typed, config)
            result.print()
            return self._post_process(result.items, config)

        started = time.perf_counter()
        stop = self._start('filter', config)
        try:
            items = self._evaluate_eager(collection, typed, config)
        finally:
            stop()
            filter_latency.labels(mode='eager').observe(time.perf_counter() - started)
        self._logger.debug(f"Filter matched {len(items)}/{len(collection)} records")
        return self._post_process(items, config)

    def filter_debug(self, collection, expression, options=None) -> DebugResult:
        """Filter through a debug tree and return items, tree and statistics."""
        self._require_collection(collection)
        typed, config = self._prepare(expression, options)
        started = time.perf_counter()
        try:
            result = self._debug_filter.run(collection, typed, config)
        finally:
            filter_latency.labels(mode='debug').observe(time.perf_counter() - started)
        return result

    def _evaluate_eager(self, collection, typed, config: FilterConfig) -> List[Any]:
        if not config.enable_cache:
            predicate = self._compile(typed, config)
            return self._run(collection, predicate, config)

        key = expression_key(typed, config)
        cached = self._cache.results.get(collection, key)
        if cached is not None:
            self._logger.debug(f"Result cache hit for {key[:12]}")
            return cached

        predicate = self._compile(typed, config)
        items = self._run(collection, predicate, config)
        self._cache.results.put(collection, key, items, typed, config)
        return items

    def _run(self, collection, predicate: Predicate, config: FilterConfig) -> List[Any]:
        stop = self._start('evaluate', config)
        try:
            items = [record for record in collection if predicate(record)]
        finally:
            stop()
        return items

    def _post_process(self, items: List[Any], config: FilterConfig) -> List[Any]:
        if config.order_by:
            items = sort_by_fields(items, config.order_by, config.case_sensitive)
        return apply_limit(items, config.limit)

    # ---- lazy ----

    def filter_lazy(self, iterable, expression, options=None) -> Iterator[Any]:
        """
        Lazily yield matching records.

        The expression is validated and compiled immediately; records are only
        pulled from ``iterable`` as the caller consumes the generator.
        """
        if not isinstance(iterable, Iterable):
            raise TypeMismatchError("iterable", type(iterable).__name__)
        predicate = self._lazy_predicate(expression, options)
        return self._lazy(iterable, predicate)

    @staticmethod
    def _lazy(iterable, predicate: Predicate) -> Iterator[Any]:
        for record in iterable:
            if predicate(record):
                yield record

    def filter_lazy_async(self, iterable, expression, options=None) -> AsyncIterator[Any]:
        """Async counterpart of ``filter_lazy`` over an async iterable."""
        if not isinstance(iterable, AsyncIterable):
            raise TypeMismatchError("async iterable", type(iterable).__name__)
        predicate = self._lazy_predicate(expression, options)
        return async_filter(iterable, predicate)

    def filter_first(self, iterable, expression, count: int = 1, options=None) -> List[Any]:
        require_positive(count, 'count')
        return list(take(self.filter_lazy(iterable, expression, options), count))

    def filter_exists(self, iterable, expression, options=None) -> bool:
        for _ in self.filter_lazy(iterable, expression, options):
            return True
        return False

    def filter_count(self, iterable, expression, options=None) -> int:
        return sum(1 for _ in self.filter_lazy(iterable, expression, options))

    def filter_lazy_chunked(self, iterable, expression, chunk_size: int = 1000, options=None) -> Iterator[List[Any]]:
        require_positive(chunk_size, 'chunk_size')
        return chunk(self.filter_lazy(iterable, expression, options), chunk_size)

    def filter_chunked(self, collection, expression, chunk_size: int = 1000, options=None) -> List[List[Any]]:
        self._require_collection(collection)
        return list(self.filter_lazy_chunked(collection, expression, chunk_size, options))

    def _lazy_predicate(self, expression, options) -> Predicate:
        typed, config = self._prepare(expression, options)
        return self._compile(typed, config)

    # ---- cache and metrics ----

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> Dict[str, int]:
        return self._cache.stats()

    def performance_metrics(self, operation: Optional[str] = None):
        if operation is not None:
            return self._monitor.get_metrics(operation)
        return self._monitor.get_all_metrics()

    # ---- shared ----

    @staticmethod
    def _require_collection(collection) -> None:
        if not isinstance(collection, (list, tuple)):
            raise TypeMismatchError("list or tuple", type(collection).__name__)

    def _prepare(self, expression, options) -> Tuple[Any, FilterConfig]:
        config = merge_config(options, self._defaults)
        stop = self._start('validate', config)
        typed = validate_expression(expression)
        stop()
        return typed, config

    def _compile(self, typed, config: FilterConfig) -> Predicate:
        stop = self._start('compile', config)
        if config.enable_cache:
            compiler = PredicateCompiler(PatternCompiler(self._cache.patterns), self._cache.predicates, self._logger)
        else:
            compiler = PredicateCompiler(PatternCompiler(), None, self._logger)
        predicate = compiler.compile(typed, config)
        stop()
        return predicate

    def _start(self, operation: str, config: FilterConfig):
        if not config.enable_performance_monitoring:
            return _noop
        return self._monitor.start(operation)
