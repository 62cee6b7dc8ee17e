"""Structural keys for typed expressions.

Two expressions with the same structure (and the same config options that
affect matching) produce the same key, so compiled predicates and filter
results can be shared between calls. Callables only contribute their identity,
so cache entries built from these keys must keep the callables alive.
"""
import hashlib
import json
import re
from datetime import date, datetime
from typing import Any

import numpy as np
from pydantic import BaseModel

from filtercraft_data_model.expression import (
    AnyPropertyClause, ArrayOrCondition, FieldClause, LiteralCondition, LogicalExpression, NestedCondition,
    ObjectExpression, OperatorCondition, PredicateExpression, PrimitiveExpression,
)
from filtercraft_data_model.filter_config import FilterConfig


def _canonical_value(value: Any) -> Any:
    """Turn an operand or literal into a JSON-encodable, type-tagged form."""
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, (int, float, np.number)):
        return ['num', float(value)] if isinstance(value, (float, np.floating)) else ['int', int(value)]
    if isinstance(value, datetime):
        return ['datetime', value.isoformat()]
    if isinstance(value, date):
        return ['date', value.isoformat()]
    if isinstance(value, re.Pattern):
        return ['regex', value.pattern, int(value.flags)]
    if isinstance(value, BaseModel):
        return ['model', type(value).__name__, _canonical_value(value.model_dump())]
    if isinstance(value, dict):
        return {str(k): _canonical_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_canonical_value(v) for v in value]
    if isinstance(value, np.ndarray):
        return ['ndarray', _canonical_value(value.tolist())]
    if callable(value):
        return ['fn', id(value)]
    return ['repr', type(value).__name__, repr(value)]


def canonicalize(expression: Any) -> Any:
    """Canonical form of a typed expression tree."""
    if isinstance(expression, PrimitiveExpression):
        return ['primitive', _canonical_value(expression.value)]
    if isinstance(expression, PredicateExpression):
        return ['predicate', id(expression.fn)]
    if isinstance(expression, LogicalExpression):
        return ['logical', expression.operator, [canonicalize(e) for e in expression.operands]]
    if isinstance(expression, AnyPropertyClause):
        return ['any', _canonical_value(expression.value)]
    if isinstance(expression, FieldClause):
        return ['field', expression.path, canonicalize(expression.condition)]
    if isinstance(expression, LiteralCondition):
        return ['literal', _canonical_value(expression.value)]
    if isinstance(expression, ArrayOrCondition):
        return ['one_of', [_canonical_value(v) for v in expression.values]]
    if isinstance(expression, OperatorCondition):
        return ['operators', [[c.operator, _canonical_value(c.operand)] for c in expression.operators]]
    if isinstance(expression, NestedCondition):
        return ['nested', canonicalize(expression.expression)]
    if isinstance(expression, ObjectExpression):
        return ['object', [canonicalize(c) for c in expression.clauses]]
    raise TypeError(f"Cannot canonicalize {type(expression).__name__}")


def _canonical_bytes(value: Any) -> bytes:
    return json.dumps(value, sort_keys=True, separators=(',', ':')).encode('utf-8')


def expression_key(expression: Any, config: FilterConfig) -> str:
    """
    SHA-256 of an expression together with the config options that change matching.

    Sorting and limits are applied after filtering and are not part of the key.
    """
    comparator = config.custom_comparator
    payload = [
        canonicalize(expression),
        {
            'case_sensitive': config.case_sensitive,
            'max_depth': config.max_depth,
            'comparator': id(comparator) if comparator is not None else None,
        },
    ]
    return hashlib.sha256(_canonical_bytes(payload)).hexdigest()
