"""Module-level entry points bound to a default FilterService."""
from typing import Any, AsyncIterator, Dict, Iterator, List, Optional

from filtercraft_engine.debug.debug_filter import DebugResult
from filtercraft_engine.engine.filter_service import FilterService

default_service = FilterService()


def filter(collection, expression, options=None) -> List[Any]:  # noqa: A001
    return default_service.filter(collection, expression, options)


def filter_debug(collection, expression, options=None) -> DebugResult:
    return default_service.filter_debug(collection, expression, options)


def filter_lazy(iterable, expression, options=None) -> Iterator[Any]:
    return default_service.filter_lazy(iterable, expression, options)


def filter_lazy_async(iterable, expression, options=None) -> AsyncIterator[Any]:
    return default_service.filter_lazy_async(iterable, expression, options)


def filter_first(iterable, expression, count: int = 1, options=None) -> List[Any]:
    return default_service.filter_first(iterable, expression, count, options)


def filter_exists(iterable, expression, options=None) -> bool:
    return default_service.filter_exists(iterable, expression, options)


def filter_count(iterable, expression, options=None) -> int:
    return default_service.filter_count(iterable, expression, options)


def filter_lazy_chunked(iterable, expression, chunk_size: int = 1000, options=None) -> Iterator[List[Any]]:
    return default_service.filter_lazy_chunked(iterable, expression, chunk_size, options)


def filter_chunked(collection, expression, chunk_size: int = 1000, options=None) -> List[List[Any]]:
    return default_service.filter_chunked(collection, expression, chunk_size, options)


def clear_cache() -> None:
    default_service.clear_cache()


def cache_stats() -> Dict[str, int]:
    return default_service.cache_stats()


def performance_metrics(operation: Optional[str] = None):
    return default_service.performance_metrics(operation)
