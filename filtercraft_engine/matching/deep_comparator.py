"""
Recursive comparison of record values against expected values.

Dispatch order for ``deep_compare(actual, expected, ...)``:

    depth > max_depth                 -> False
    expected "!x"                     -> not deep_compare(actual, "x")
    actual is a sequence              -> any element matches
    actual is a mapping
        any-property mode             -> any non-"$" value matches, else the
                                         whole mapping unless told not to
        expected is a mapping         -> every expected key matches ("$" key
                                         matches the whole mapping)
        otherwise                     -> leaf comparator
    actual is callable                -> False
    otherwise                         -> leaf comparator
"""
from functools import partial
from typing import Any, Callable, Mapping, Optional

from filtercraft_data_model.expression import MISSING
from filtercraft_data_model.filter_config import FilterConfig
from filtercraft_data_model.operator_symbols import ANY_PROPERTY_KEY, NEGATION_PREFIX
from filtercraft_engine.matching.values import has_custom_str, is_sequence, strict_equals, stringify


def default_compare(actual: Any, expected: Any, case_sensitive: bool = False) -> bool:
    """Leaf comparison: exact equality first, then substring containment."""
    if actual is MISSING or expected is MISSING:
        return False
    if actual is None or expected is None:
        return actual is None and expected is None
    if strict_equals(actual, expected):
        return True
    if isinstance(expected, Mapping):
        return False
    if isinstance(actual, Mapping) and not has_custom_str(actual):
        return False

    actual_str = stringify(actual)
    expected_str = stringify(expected)
    if not case_sensitive:
        actual_str = actual_str.lower()
        expected_str = expected_str.lower()
    return expected_str in actual_str


def resolve_comparator(config: FilterConfig, comparator: Optional[Callable[[Any, Any], bool]] = None):
    if comparator is not None:
        return comparator
    if config.custom_comparator is not None:
        return config.custom_comparator
    return partial(default_compare, case_sensitive=config.case_sensitive)


def deep_compare(actual: Any,
                 expected: Any,
                 comparator: Optional[Callable[[Any, Any], bool]],
                 config: FilterConfig,
                 match_any_property: bool = False,
                 dont_match_whole_object: bool = False,
                 depth: int = 0) -> bool:
    """
    Compare ``actual`` against ``expected``, recursing into sequences and
    mappings up to ``config.max_depth`` levels.

    Args:
        actual: Value taken from the record.
        expected: Value taken from the expression.
        comparator: Leaf comparator; ``None`` uses the configured or default one.
        config: Filter configuration (case sensitivity, max depth).
        match_any_property: Match if any property of a mapping matches.
        dont_match_whole_object: In any-property mode, do not fall back to
            comparing the whole mapping.
        depth: Current recursion depth.

    Returns:
        bool: Whether the values match.
    """
    if depth > config.max_depth:
        return False

    compare = resolve_comparator(config, comparator)

    if isinstance(expected, str) and expected.startswith(NEGATION_PREFIX):
        return not deep_compare(actual, expected[len(NEGATION_PREFIX):], compare, config,
                                match_any_property, dont_match_whole_object, depth + 1)

    if is_sequence(actual):
        return any(
            deep_compare(item, expected, compare, config, match_any_property, dont_match_whole_object, depth + 1)
            for item in actual
        )

    if isinstance(actual, Mapping):
        if match_any_property:
            return _compare_any_property(actual, expected, compare, config, dont_match_whole_object, depth)
        if isinstance(expected, Mapping):
            return _compare_all_properties(actual, expected, compare, config, depth)
        return compare(actual, expected)

    if callable(actual):
        return False

    return compare(actual, expected)


def _compare_any_property(actual: Mapping, expected, compare, config, dont_match_whole_object, depth) -> bool:
    for key, value in actual.items():
        if isinstance(key, str) and key.startswith(ANY_PROPERTY_KEY):
            continue
        if deep_compare(value, expected, compare, config, True, False, depth + 1):
            return True
    if dont_match_whole_object:
        return False
    # legacy fallback: the whole mapping is compared as a leaf
    return deep_compare(actual, expected, compare, config, False, False, depth + 1)


def _compare_all_properties(actual: Mapping, expected: Mapping, compare, config, depth) -> bool:
    for key, expected_value in expected.items():
        if callable(expected_value) or expected_value is MISSING:
            continue
        any_property = key == ANY_PROPERTY_KEY
        actual_value = actual if any_property else actual.get(key, MISSING)
        if not deep_compare(actual_value, expected_value, compare, config, any_property, any_property, depth + 1):
            return False
    return True
