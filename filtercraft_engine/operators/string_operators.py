"""$startsWith, $endsWith, $regex, $match and the string form of $contains.

Values are matched through their string form; absent values never match.
"""
from typing import Any, Callable, Dict, Optional

from filtercraft_engine.matching.values import is_absent, stringify


def _text(value) -> Optional[str]:
    if is_absent(value):
        return None
    return stringify(value)


def _fold(text: str, ctx) -> str:
    return text if ctx.config.case_sensitive else text.lower()


def _starts_with(value, operand, ctx) -> bool:
    text = _text(value)
    return text is not None and _fold(text, ctx).startswith(_fold(operand, ctx))


def _ends_with(value, operand, ctx) -> bool:
    text = _text(value)
    return text is not None and _fold(text, ctx).endswith(_fold(operand, ctx))


def string_contains(value, operand, ctx) -> bool:
    if not isinstance(value, str):
        return False
    return _fold(stringify(operand), ctx) in _fold(value, ctx)


def _search(value, pattern, ctx) -> bool:
    text = _text(value)
    return text is not None and pattern.search(text) is not None


def prepare_regex(operator: str, operand, ctx):
    """Compile a regex operand once, when the predicate is built."""
    return ctx.patterns.compile_regex(operand, ctx.config.case_sensitive, operator, ctx.field)


STRING_OPERATORS: Dict[str, Callable[[Any, Any, Any], bool]] = {
    "$startsWith": _starts_with,
    "$endsWith": _ends_with,
    "$regex": _search,
    "$match": _search,
}
