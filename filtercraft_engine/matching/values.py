"""Value helpers shared by the comparator, the operators and the predicates."""
import numbers
from datetime import date, datetime
from typing import Any, Mapping

import numpy as np

from filtercraft_data_model.expression import MISSING


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, np.ndarray))


def is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_))


def is_date(value: Any) -> bool:
    return isinstance(value, (datetime, date))


def is_absent(value: Any) -> bool:
    return value is MISSING or value is None


def strict_equals(a: Any, b: Any) -> bool:
    """
    Type-aware equality.

    Booleans only equal booleans, numbers compare numerically regardless of
    int/float, a string never equals a number, numpy arrays compare elementwise.
    """
    if a is b:
        return True
    if a is MISSING or b is MISSING:
        return False
    if isinstance(a, (bool, np.bool_)) or isinstance(b, (bool, np.bool_)):
        return isinstance(a, (bool, np.bool_)) and isinstance(b, (bool, np.bool_)) and bool(a) == bool(b)
    if is_number(a) or is_number(b):
        return is_number(a) and is_number(b) and a == b
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return isinstance(a, np.ndarray) and isinstance(b, np.ndarray) and np.array_equal(a, b)
    if isinstance(a, str) != isinstance(b, str):
        return False
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        # ambiguous truth values (e.g. containers of arrays) are not equal
        return False


def stringify(value: Any) -> str:
    """String form used by substring and string-operator matching."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if is_date(value):
        return value.isoformat()
    return str(value)


def has_custom_str(value: Any) -> bool:
    return type(value).__str__ is not object.__str__


def top_level_values(item: Any):
    """Values a primitive expression is matched against: properties or elements."""
    if isinstance(item, Mapping):
        return list(item.values())
    if is_sequence(item):
        return list(item)
    if hasattr(item, '__dict__') and not isinstance(item, type):
        return list(vars(item).values())
    return []


def resolve_path(record: Any, path: str) -> Any:
    """
    Resolve ``path`` against ``record``.

    A mapping key equal to the full path wins; otherwise the path is split on
    dots and walked through mapping keys, sequence indices and attributes.
    Absent values resolve to ``MISSING``.
    """
    if isinstance(record, Mapping) and path in record:
        return record[path]

    current = record
    for part in path.split('.'):
        if current is MISSING or current is None:
            return MISSING
        if isinstance(current, Mapping):
            current = current.get(part, MISSING)
        elif is_sequence(current):
            if not part.isdigit():
                return MISSING
            index = int(part)
            current = current[index] if index < len(current) else MISSING
        elif isinstance(current, (str, bytes, numbers.Number)):
            return MISSING
        else:
            current = getattr(current, part, MISSING)
    return current
