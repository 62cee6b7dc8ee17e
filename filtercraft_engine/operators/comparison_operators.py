"""$eq, $ne, $gt, $gte, $lt, $lte"""
import operator
from datetime import date, datetime, time
from typing import Any, Callable, Dict

from filtercraft_engine.matching.values import is_date, is_number, strict_equals


def _promote(value):
    # a plain date orders as midnight of that day
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value


def _ordered(compare: Callable[[Any, Any], bool]):
    def handler(value, operand, ctx) -> bool:
        if is_number(value) and is_number(operand):
            return compare(value, operand)
        if is_date(value) and is_date(operand):
            try:
                return compare(_promote(value), _promote(operand))
            except TypeError:
                # naive vs aware datetimes have no ordering
                return False
        return False
    return handler


COMPARISON_OPERATORS: Dict[str, Callable[[Any, Any, Any], bool]] = {
    "$eq": lambda value, operand, ctx: strict_equals(value, operand),
    "$ne": lambda value, operand, ctx: not strict_equals(value, operand),
    "$gt": _ordered(operator.gt),
    "$gte": _ordered(operator.ge),
    "$lt": _ordered(operator.lt),
    "$lte": _ordered(operator.le),
}
