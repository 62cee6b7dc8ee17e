"""
Operator dispatch.

    OperatorCondition {"$gte": 100, "$lte": 200, "$ne": 150}
           │
           ▼
    ┌────────────────────────────────────┐
    │  bind each OperatorClause once     │ ◄─── handler looked up by operator,
    │  (regex operands compiled here)    │      operand prepared if needed
    └────────────────────────────────────┘
           │
           ▼
    ┌────────────────────────────────────┐
    │  per value: evaluate in            │ ◄─── first False short-circuits
    │  declaration order                 │
    └────────────────────────────────────┘

``$contains`` is resolved by the value's type at evaluation time: sequences
test membership, strings test substring containment, anything else is False.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from filtercraft_data_model.expression import OperatorClause, OperatorCondition
from filtercraft_data_model.filter_config import FilterConfig
from filtercraft_engine.matching.pattern_compiler import PatternCompiler
from filtercraft_engine.matching.values import is_sequence
from filtercraft_engine.operators.array_operators import ARRAY_OPERATORS, sequence_contains
from filtercraft_engine.operators.comparison_operators import COMPARISON_OPERATORS
from filtercraft_engine.operators.datetime_operators import DATETIME_OPERATORS
from filtercraft_engine.operators.geospatial_operators import GEOSPATIAL_OPERATORS
from filtercraft_engine.operators.string_operators import STRING_OPERATORS, prepare_regex, string_contains
from filtercraft_exception_model.exception import InvalidExpressionError

ValuePredicate = Callable[[Any], bool]


@dataclass(frozen=True)
class OperatorContext:
    config: FilterConfig
    patterns: PatternCompiler
    field: Optional[str] = None


def _contains(value, operand, ctx) -> bool:
    if is_sequence(value):
        return sequence_contains(value, operand, ctx)
    if isinstance(value, str):
        return string_contains(value, operand, ctx)
    return False


HANDLERS: Dict[str, Callable[[Any, Any, OperatorContext], bool]] = {
    **COMPARISON_OPERATORS,
    **ARRAY_OPERATORS,
    **STRING_OPERATORS,
    **GEOSPATIAL_OPERATORS,
    **DATETIME_OPERATORS,
    "$contains": _contains,
}

PREPARERS = {
    "$regex": prepare_regex,
    "$match": prepare_regex,
}


def bind_operator(clause: OperatorClause, ctx: OperatorContext) -> ValuePredicate:
    """Build a predicate over a field value for a single operator clause."""
    handler = HANDLERS.get(clause.operator)
    if handler is None:
        raise InvalidExpressionError({clause.operator: clause.operand}, f"unknown operator '{clause.operator}'")

    operand = clause.operand
    prepare = PREPARERS.get(clause.operator)
    if prepare is not None:
        operand = prepare(clause.operator, operand, ctx)

    def evaluate(value) -> bool:
        return handler(value, operand, ctx)
    return evaluate


def compile_operator_condition(condition: OperatorCondition, ctx: OperatorContext) -> ValuePredicate:
    """Build a predicate that ANDs every operator of ``condition`` in declaration order."""
    bound = [bind_operator(clause, ctx) for clause in condition.operators]

    def evaluate(value) -> bool:
        for predicate in bound:
            if not predicate(value):
                return False
        return True
    return evaluate
