"""Typed expression model consumed by the predicate compiler.

Raw caller input (strings, numbers, dicts, callables) is turned into these
frozen dataclasses by the expression validator. Nothing else constructs them
from untrusted input.

    Expression
    ├── PrimitiveExpression      "Berlin", 42, True, None
    ├── PredicateExpression      lambda record: ...
    └── ObjectExpression         {"city": "Berlin", "$or": [...], "$": 5}
        ├── FieldClause          path + condition
        │   ├── LiteralCondition     {"city": "Berlin"}
        │   ├── ArrayOrCondition     {"city": ["Berlin", "Paris"]}
        │   ├── OperatorCondition    {"price": {"$gte": 10, "$lt": 20}}
        │   └── NestedCondition      {"address": {"city": "Berlin"}}
        ├── LogicalExpression    $and / $or / $not
        └── AnyPropertyClause    {"$": value}
"""
from dataclasses import dataclass
from typing import Any, Callable, Tuple, Union

from filtercraft_data_model.operator_symbols import NOT, OperatorFamily


class _Missing:
    """Marker for a field that is absent from a record."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False


MISSING = _Missing()


@dataclass(frozen=True)
class PrimitiveExpression:
    value: Union[str, int, float, bool, None]


@dataclass(frozen=True)
class PredicateExpression:
    fn: Callable[[Any], bool]


@dataclass(frozen=True)
class OperatorClause:
    operator: str
    family: OperatorFamily
    operand: Any


@dataclass(frozen=True)
class LiteralCondition:
    value: Any


@dataclass(frozen=True)
class ArrayOrCondition:
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class OperatorCondition:
    operators: Tuple[OperatorClause, ...]


@dataclass(frozen=True)
class NestedCondition:
    expression: "ObjectExpression"


Condition = Union[LiteralCondition, ArrayOrCondition, OperatorCondition, NestedCondition]


@dataclass(frozen=True)
class FieldClause:
    path: str
    condition: Condition


@dataclass(frozen=True)
class LogicalExpression:
    """``$and``/``$or`` hold several operands, ``$not`` exactly one."""

    operator: str
    operands: Tuple["Expression", ...]

    @property
    def operand(self) -> "Expression":
        if self.operator != NOT:
            raise AttributeError(f"{self.operator} has no single operand")
        return self.operands[0]


@dataclass(frozen=True)
class AnyPropertyClause:
    value: Any


Clause = Union[FieldClause, LogicalExpression, AnyPropertyClause]


@dataclass(frozen=True)
class ObjectExpression:
    """Clauses in declaration order; all of them must hold."""

    clauses: Tuple[Clause, ...]


Expression = Union[PrimitiveExpression, PredicateExpression, ObjectExpression, LogicalExpression]
