"""
Compiles a typed expression into a record predicate.

    PredicateExpression       -> the caller's function, verbatim
    PrimitiveExpression (str) -> string predicate
                                 "!x"   complement of "x"
                                 "A%"   wildcard against the item or any top-level value
                                 "x"    case-aware equality against the same
    PrimitiveExpression       -> any-property deep comparison
    ObjectExpression          -> one closure per clause, built once, ANDed per record
        LogicalExpression     -> sub-expressions compiled recursively
        AnyPropertyClause     -> deep comparison against the whole record
        FieldClause           -> path resolved per record, then
            LiteralCondition      strict equality, "!" negation, wildcard strings,
                                  any element of a sequence value, or the custom comparator
            ArrayOrCondition      membership (wildcard strings allowed), [] matches nothing
            OperatorCondition     operator dispatch
            NestedCondition       object predicate one level down, bounded by max_depth
"""
import logging
import numbers
from typing import Any, Callable, Optional

from filtercraft_data_model.checksum_util import expression_key
from filtercraft_data_model.expression import (
    AnyPropertyClause, ArrayOrCondition, FieldClause, LiteralCondition, LogicalExpression, NestedCondition,
    ObjectExpression, OperatorCondition, PredicateExpression, PrimitiveExpression,
)
from filtercraft_data_model.filter_config import FilterConfig
from filtercraft_data_model.operator_symbols import AND, NOT, OR
from filtercraft_engine.matching.deep_comparator import deep_compare
from filtercraft_engine.matching.pattern_compiler import PatternCompiler, has_wildcard, peel_negation
from filtercraft_engine.matching.values import is_absent, is_sequence, resolve_path, strict_equals, top_level_values
from filtercraft_engine.operators.operator_dispatcher import OperatorContext, compile_operator_condition
from filtercraft_exception_model.exception import InvalidExpressionError

Predicate = Callable[[Any], bool]
ValuePredicate = Callable[[Any], bool]


def _never(_value) -> bool:
    return False


def _is_nested_target(value) -> bool:
    return not (is_absent(value) or isinstance(value, (str, bytes, numbers.Number)))


class PredicateCompiler:
    """Builds predicates, consulting the predicate cache when caching is enabled.

    Attributes:
        _patterns: Wildcard/regex compiler (backed by the pattern cache or not).
        _predicate_cache: Optional cache of compiled top-level predicates.
        _logger: Logger instance for recording diagnostic information.
    """

    def __init__(self,
                 patterns: Optional[PatternCompiler] = None,
                 predicate_cache=None,
                 logger: Optional[logging.Logger] = None):
        self._patterns = patterns or PatternCompiler()
        self._predicate_cache = predicate_cache
        self._logger = logger or logging.getLogger(__name__)

    @property
    def patterns(self) -> PatternCompiler:
        return self._patterns

    def compile(self, expression, config: FilterConfig) -> Predicate:
        """
        Compile a validated expression.

        Args:
            expression: Typed expression produced by the expression validator.
            config: Filter configuration of the current call.

        Returns:
            Predicate: Function returning True for matching records.
        """
        if not (config.enable_cache and self._predicate_cache is not None):
            return self.build(expression, config)

        key = expression_key(expression, config)
        predicate = self._predicate_cache.get(key)
        if predicate is not None:
            self._logger.debug(f"Predicate cache hit for {key[:12]}")
            return predicate

        predicate = self.build(expression, config)
        self._predicate_cache.put(key, predicate, expression, config)
        self._logger.debug(f"Compiled and cached predicate {key[:12]}")
        return predicate

    def build(self, expression, config: FilterConfig, depth: int = 0) -> Predicate:
        if isinstance(expression, PredicateExpression):
            return expression.fn
        if isinstance(expression, PrimitiveExpression):
            if isinstance(expression.value, str):
                return self._string_predicate(expression.value, config)
            return self._any_property_predicate(expression.value, config, dont_match_whole_object=False)
        if isinstance(expression, ObjectExpression):
            return self._object_predicate(expression, config, depth)
        if isinstance(expression, LogicalExpression):
            return self._logical_predicate(expression, config)
        raise InvalidExpressionError(expression, f"cannot compile {type(expression).__name__}")

    def _string_predicate(self, text: str, config: FilterConfig) -> Predicate:
        negated, core = peel_negation(text)
        if negated:
            positive = self._string_predicate(core, config)
            return lambda item: not positive(item)

        if has_wildcard(core):
            regex = self._patterns.compile_wildcard(core, config.case_sensitive)

            def test(value) -> bool:
                return isinstance(value, str) and regex.fullmatch(value) is not None
        else:
            folded = core if config.case_sensitive else core.lower()

            def test(value) -> bool:
                if isinstance(value, str):
                    return (value if config.case_sensitive else value.lower()) == folded
                return strict_equals(value, core)

        def predicate(item) -> bool:
            if is_absent(item):
                return False
            if isinstance(item, str):
                return test(item)
            return any(test(value) for value in top_level_values(item))
        return predicate

    def _any_property_predicate(self, expected, config: FilterConfig, dont_match_whole_object: bool) -> Predicate:
        def predicate(item) -> bool:
            return deep_compare(item, expected, None, config, True, dont_match_whole_object)
        return predicate

    def _logical_predicate(self, expression: LogicalExpression, config: FilterConfig) -> Predicate:
        operands = [self.build(operand, config) for operand in expression.operands]
        if expression.operator == AND:
            return lambda item: all(p(item) for p in operands)
        if expression.operator == OR:
            return lambda item: any(p(item) for p in operands)
        if expression.operator == NOT:
            operand = operands[0]
            return lambda item: not operand(item)
        raise InvalidExpressionError(expression.operator, f"unknown logical operator '{expression.operator}'")

    def _object_predicate(self, expression: ObjectExpression, config: FilterConfig, depth: int) -> Predicate:
        checks = [self.compile_clause(clause, config, depth) for clause in expression.clauses]

        def predicate(item) -> bool:
            for check in checks:
                if not check(item):
                    return False
            return True
        return predicate

    def compile_clause(self, clause, config: FilterConfig, depth: int = 0) -> Predicate:
        """Compile one clause of an object expression into a record predicate."""
        if isinstance(clause, LogicalExpression):
            return self._logical_predicate(clause, config)
        if isinstance(clause, AnyPropertyClause):
            return self._any_property_predicate(clause.value, config, dont_match_whole_object=True)
        if isinstance(clause, FieldClause):
            path = clause.path
            value_check = self.compile_condition(path, clause.condition, config, depth)
            return lambda item: value_check(resolve_path(item, path))
        raise InvalidExpressionError(clause, f"unknown clause {type(clause).__name__}")

    def compile_condition(self, path: str, condition, config: FilterConfig, depth: int = 0) -> ValuePredicate:
        """Compile a field condition into a predicate over the resolved field value."""
        if isinstance(condition, LiteralCondition):
            return self.literal_matcher(condition.value, config)
        if isinstance(condition, ArrayOrCondition):
            return self.one_of_matcher(condition.values, config)
        if isinstance(condition, OperatorCondition):
            return compile_operator_condition(condition, OperatorContext(config, self._patterns, path))
        if isinstance(condition, NestedCondition):
            return self._nested_matcher(condition, config, depth)
        raise InvalidExpressionError(condition, f"unknown condition {type(condition).__name__}")

    def scalar_matcher(self, expected, config: FilterConfig) -> ValuePredicate:
        if isinstance(expected, str) and has_wildcard(expected):
            regex = self._patterns.compile_wildcard(expected, config.case_sensitive)
            return lambda value: isinstance(value, str) and regex.fullmatch(value) is not None
        return lambda value: strict_equals(value, expected)

    def literal_matcher(self, expected, config: FilterConfig) -> ValuePredicate:
        comparator = config.custom_comparator
        if comparator is not None:
            return lambda value: bool(comparator(value, expected))

        negated = False
        if isinstance(expected, str):
            negated, expected = peel_negation(expected)
        match = self.scalar_matcher(expected, config)
        expected_is_sequence = is_sequence(expected)

        def matcher(value) -> bool:
            if is_sequence(value) and not expected_is_sequence:
                result = any(match(element) for element in value)
            else:
                result = match(value)
            return result != negated
        return matcher

    def one_of_matcher(self, values, config: FilterConfig) -> ValuePredicate:
        matchers = [self.scalar_matcher(v, config) for v in values]
        return lambda value: any(m(value) for m in matchers)

    def nested_gate(self, config: FilterConfig, depth: int) -> ValuePredicate:
        """Predicate a field value must pass before a nested condition at ``depth + 1`` is tried."""
        if depth + 1 > config.max_depth:
            self._logger.debug(f"Nested condition at depth {depth + 1} exceeds max_depth={config.max_depth}")
            return _never
        return _is_nested_target

    def _nested_matcher(self, condition: NestedCondition, config: FilterConfig, depth: int) -> ValuePredicate:
        gate = self.nested_gate(config, depth)
        if gate is _never:
            return _never
        nested = self._object_predicate(condition.expression, config, depth + 1)

        def matcher(value) -> bool:
            return gate(value) and nested(value)
        return matcher
