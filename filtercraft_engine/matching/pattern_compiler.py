"""
Wildcard and regex compilation.

Wildcard syntax:

    %   any run of characters (including none)
    _   exactly one character
    !   leading negation, peeled before compilation ("!!x" is "x")

Every other character is literal. Wildcard matchers anchor the whole value,
explicit regexes (``$regex``/``$match``) use search semantics.
"""
import logging
import re
from typing import Optional, Tuple, Union

from filtercraft_data_model.operator_symbols import NEGATION_PREFIX, WILDCARD_ANY, WILDCARD_ONE
from filtercraft_exception_model.exception import OperatorError

logger = logging.getLogger(__name__)


def has_wildcard(pattern: str) -> bool:
    return WILDCARD_ANY in pattern or WILDCARD_ONE in pattern


def peel_negation(pattern: str) -> Tuple[bool, str]:
    """Strip leading '!' characters; returns (negated, remaining pattern)."""
    negated = False
    while pattern.startswith(NEGATION_PREFIX):
        negated = not negated
        pattern = pattern[len(NEGATION_PREFIX):]
    return negated, pattern


def wildcard_to_regex(pattern: str) -> str:
    parts = []
    for ch in pattern:
        if ch == WILDCARD_ANY:
            parts.append('.*')
        elif ch == WILDCARD_ONE:
            parts.append('.')
        else:
            parts.append(re.escape(ch))
    return ''.join(parts)


def _flags(case_sensitive: bool) -> int:
    # DOTALL so '%' and '_' also cover line breaks inside values
    return re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE


class PatternCompiler:
    """
    Compiles wildcard and regex patterns, memoizing them in an optional
    pattern cache keyed by (kind, pattern, flags).
    """

    def __init__(self, cache=None):
        self._cache = cache

    def compile_wildcard(self, pattern: str, case_sensitive: bool) -> re.Pattern:
        key = ('wildcard', pattern, case_sensitive)
        compiled = self._lookup(key)
        if compiled is None:
            compiled = re.compile(wildcard_to_regex(pattern), _flags(case_sensitive))
            self._store(key, compiled)
        return compiled

    def wildcard_matches(self, pattern: str, value, case_sensitive: bool) -> bool:
        """True if ``value`` is a string fully matched by the wildcard ``pattern``."""
        if not isinstance(value, str):
            return False
        return self.compile_wildcard(pattern, case_sensitive).fullmatch(value) is not None

    def compile_regex(self, pattern: Union[str, re.Pattern], case_sensitive: bool,
                      operator: str = '$regex', field: Optional[str] = None) -> re.Pattern:
        """
        Compile an explicit regex operand.

        A precompiled ``re.Pattern`` keeps its own flags. String patterns are
        case-insensitive unless ``case_sensitive`` is set.

        Raises:
            OperatorError: if the pattern does not compile.
        """
        if isinstance(pattern, re.Pattern):
            return pattern
        flags = 0 if case_sensitive else re.IGNORECASE
        key = ('regex', pattern, flags)
        compiled = self._lookup(key)
        if compiled is None:
            try:
                compiled = re.compile(pattern, flags)
            except re.error as e:
                raise OperatorError(operator, pattern, f"invalid regular expression: {e}", field) from e
            self._store(key, compiled)
        return compiled

    def _lookup(self, key):
        if self._cache is None:
            return None
        return self._cache.get(key)

    def _store(self, key, compiled):
        if self._cache is not None:
            self._cache.put(key, compiled)
            logger.debug(f"Cached compiled pattern {key[1]!r} ({key[0]})")
