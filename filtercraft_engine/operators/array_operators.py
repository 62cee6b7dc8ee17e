"""$in, $nin, $size and the sequence form of $contains"""
from typing import Any, Callable, Dict

from filtercraft_engine.matching.values import is_sequence, strict_equals


def is_member(value, candidates) -> bool:
    return any(strict_equals(value, candidate) for candidate in candidates)


def sequence_contains(value, operand, ctx) -> bool:
    if not is_sequence(value):
        return False
    return any(strict_equals(item, operand) for item in value)


def _size(value, operand, ctx) -> bool:
    return is_sequence(value) and len(value) == operand


ARRAY_OPERATORS: Dict[str, Callable[[Any, Any, Any], bool]] = {
    "$in": lambda value, operand, ctx: is_member(value, operand),
    "$nin": lambda value, operand, ctx: not is_member(value, operand),
    "$size": _size,
}
