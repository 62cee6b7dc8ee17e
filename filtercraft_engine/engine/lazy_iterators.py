"""
Pull-based combinators over plain iterators.

Nothing here touches the eager or cache paths; every combinator consumes only
as much of its source as its caller asks for.
"""
from typing import (
    Any, AsyncIterable, AsyncIterator, Callable, Iterable, Iterator, List, Optional, TypeVar,
)

from filtercraft_exception_model.exception import ConfigurationError

T = TypeVar('T')
U = TypeVar('U')


def require_positive(value: int, name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, received {value!r}", name)


def take(iterable: Iterable[T], count: int) -> Iterator[T]:
    if count <= 0:
        return
    taken = 0
    for item in iterable:
        yield item
        taken += 1
        if taken >= count:
            return


def skip(iterable: Iterable[T], count: int) -> Iterator[T]:
    skipped = 0
    for item in iterable:
        if skipped < count:
            skipped += 1
            continue
        yield item


def map_items(iterable: Iterable[T], fn: Callable[[T, int], U]) -> Iterator[U]:
    """Map with the element index, like ``Array.prototype.map``."""
    for index, item in enumerate(iterable):
        yield fn(item, index)


def reduce_items(iterable: Iterable[T], fn: Callable[[U, T, int], U], initial: U) -> U:
    accumulator = initial
    for index, item in enumerate(iterable):
        accumulator = fn(accumulator, item, index)
    return accumulator


def to_list(iterable: Iterable[T]) -> List[T]:
    return list(iterable)


def for_each(iterable: Iterable[T], fn: Callable[[T, int], Any]) -> None:
    for index, item in enumerate(iterable):
        fn(item, index)


def every(iterable: Iterable[T], predicate: Callable[[T, int], bool]) -> bool:
    for index, item in enumerate(iterable):
        if not predicate(item, index):
            return False
    return True


def some(iterable: Iterable[T], predicate: Callable[[T, int], bool]) -> bool:
    for index, item in enumerate(iterable):
        if predicate(item, index):
            return True
    return False


def find(iterable: Iterable[T], predicate: Callable[[T, int], bool]) -> Optional[T]:
    for index, item in enumerate(iterable):
        if predicate(item, index):
            return item
    return None


def chunk(iterable: Iterable[T], size: int) -> Iterator[List[T]]:
    require_positive(size, 'chunk_size')
    batch: List[T] = []
    for item in iterable:
        batch.append(item)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


def flatten(iterable: Iterable[Any]) -> Iterator[Any]:
    """Flatten one level; strings and mappings are kept whole."""
    for item in iterable:
        if isinstance(item, (str, bytes, dict)) or not isinstance(item, Iterable):
            yield item
        else:
            yield from item


async def async_map(iterable: AsyncIterable[T], fn: Callable[[T, int], U]) -> AsyncIterator[U]:
    index = 0
    async for item in iterable:
        yield fn(item, index)
        index += 1


async def async_filter(iterable: AsyncIterable[T], predicate: Callable[[T], bool]) -> AsyncIterator[T]:
    async for item in iterable:
        if predicate(item):
            yield item
