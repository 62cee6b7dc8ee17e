"""orderBy / limit post-processing for the eager and debug paths."""
import functools
from typing import Any, List, Optional, Sequence

from filtercraft_data_model.filter_config import SORT_ASC, OrderByField
from filtercraft_engine.matching.values import is_absent, is_date, is_number, resolve_path, stringify


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_values(a: Any, b: Any, direction: str = SORT_ASC, case_sensitive: bool = False) -> int:
    """Three-way comparison; absent values sort last in either direction."""
    if is_absent(a) and is_absent(b):
        return 0
    if is_absent(a):
        return 1
    if is_absent(b):
        return -1

    if is_number(a) and is_number(b):
        result = _cmp(a, b)
    elif isinstance(a, bool) and isinstance(b, bool):
        result = _cmp(a, b)
    elif is_date(a) and is_date(b):
        try:
            result = _cmp(a, b)
        except TypeError:
            result = _cmp(stringify(a), stringify(b))
    elif isinstance(a, str) and isinstance(b, str):
        result = _cmp(a, b) if case_sensitive else _cmp(a.lower(), b.lower())
    else:
        result = _cmp(stringify(a), stringify(b))
    return result if direction == SORT_ASC else -result


def sort_by_fields(items: Sequence[Any], order_by: Sequence[OrderByField], case_sensitive: bool = False) -> List[Any]:
    """Stable multi-key sort; returns a new list."""
    if not items or not order_by:
        return list(items)

    def compare(left, right) -> int:
        for entry in order_by:
            result = compare_values(resolve_path(left, entry.field), resolve_path(right, entry.field),
                                    entry.direction, case_sensitive)
            if result:
                return result
        return 0

    return sorted(items, key=functools.cmp_to_key(compare))


def apply_limit(items: List[Any], limit: Optional[int]) -> List[Any]:
    if limit is not None and limit > 0:
        return items[:limit]
    return items
