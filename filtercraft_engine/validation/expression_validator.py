"""
Turns raw caller input into the typed expression model.

    raw input
      │
      ├── callable                     -> PredicateExpression
      ├── str / int / float / bool / None
      │                                -> PrimitiveExpression
      └── mapping                      -> ObjectExpression, keys in declaration order
            ├── "$and" / "$or"  list   -> LogicalExpression
            ├── "$not"  single value   -> LogicalExpression
            ├── "$"                    -> AnyPropertyClause
            ├── other "$..."           -> InvalidExpressionError
            └── field                  -> FieldClause
                  ├── list / tuple     -> ArrayOrCondition
                  ├── {"$op": ...}     -> OperatorCondition (operands checked here)
                  ├── {field: ...}     -> NestedCondition
                  └── anything else    -> LiteralCondition

Validation runs once per call, before compilation or any cache lookup, so a
malformed expression never reaches the compiler.
"""
import logging
import re
from typing import Any, List, Mapping, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from filtercraft_data_model.expression import (
    AnyPropertyClause, ArrayOrCondition, FieldClause, LiteralCondition, LogicalExpression, NestedCondition,
    ObjectExpression, OperatorClause, OperatorCondition, PredicateExpression, PrimitiveExpression,
)
from filtercraft_data_model.operand_models import (
    AgeQuery, BoundingBox, GeoPoint, NearQuery, PolygonQuery, RelativeTimeQuery, TimeOfDayQuery,
)
from filtercraft_data_model.operator_symbols import (
    AND, ANY_PROPERTY_KEY, LOGICAL_OPERATORS, NOT, OPERATOR_FAMILIES, OR, ORDERING_OPERATORS,
)
from filtercraft_engine.matching.values import is_date, is_number
from filtercraft_exception_model.exception import (
    GeospatialError, InvalidExpressionError, OperatorError, TypeMismatchError, ValidationError,
)

logger = logging.getLogger(__name__)

_TYPED = (PrimitiveExpression, PredicateExpression, ObjectExpression, LogicalExpression)

_OPERAND_MODELS = {
    "$near": NearQuery,
    "$geoBox": BoundingBox,
    "$geoPolygon": PolygonQuery,
    "$recent": RelativeTimeQuery,
    "$upcoming": RelativeTimeQuery,
    "$timeOfDay": TimeOfDayQuery,
    "$age": AgeQuery,
}


def _is_primitive(value) -> bool:
    return value is None or isinstance(value, (str, bool)) or is_number(value)


def validate_expression(raw: Any):
    """
    Validate a raw expression and return its typed form.

    Raises:
        InvalidExpressionError: if the expression is malformed or names an unknown operator.
        TypeMismatchError: if an operand has the wrong type for its operator.
        ValidationError: if a structured operand fails its schema.
        OperatorError: if a regex operand does not compile.
        GeospatialError: if an operand point has out-of-range coordinates.
    """
    if isinstance(raw, _TYPED):
        return raw
    if _is_primitive(raw):
        return PrimitiveExpression(raw)
    if isinstance(raw, Mapping):
        return _validate_object(raw)
    if callable(raw):
        return PredicateExpression(raw)
    raise InvalidExpressionError(raw, f"unsupported expression type {type(raw).__name__}")


def _validate_object(raw: Mapping) -> ObjectExpression:
    clauses = []
    for key, value in raw.items():
        if not isinstance(key, str):
            raise InvalidExpressionError(raw, f"expression keys must be strings, got {key!r}")
        if key in (AND, OR):
            if not isinstance(value, (list, tuple)):
                raise InvalidExpressionError(raw, f"{key} requires a list of expressions")
            clauses.append(LogicalExpression(key, tuple(validate_expression(v) for v in value)))
        elif key == NOT:
            if isinstance(value, (list, tuple)):
                raise InvalidExpressionError(raw, f"{NOT} requires a single expression")
            clauses.append(LogicalExpression(NOT, (validate_expression(value),)))
        elif key == ANY_PROPERTY_KEY:
            clauses.append(AnyPropertyClause(value))
        elif key.startswith('$'):
            if key in OPERATOR_FAMILIES:
                raise InvalidExpressionError(raw, f"operator '{key}' must be applied to a field")
            raise InvalidExpressionError(raw, f"unknown operator '{key}'")
        else:
            clauses.append(FieldClause(key, _validate_condition(key, value)))
    return ObjectExpression(tuple(clauses))


def _is_operator_map(value: Mapping) -> bool:
    return any(isinstance(k, str) and k.startswith('$') and k != ANY_PROPERTY_KEY for k in value)


def _validate_condition(field: str, value: Any):
    if isinstance(value, (list, tuple)):
        return ArrayOrCondition(tuple(value))
    if isinstance(value, Mapping):
        if _is_operator_map(value):
            return _validate_operator_map(field, value)
        return NestedCondition(_validate_object(value))
    if callable(value) and not isinstance(value, re.Pattern):
        raise InvalidExpressionError({field: value}, f"field '{field}' cannot hold a predicate function")
    return LiteralCondition(value)


def _validate_operator_map(field: str, value: Mapping) -> OperatorCondition:
    clauses = []
    for operator, operand in value.items():
        if operator in LOGICAL_OPERATORS:
            raise InvalidExpressionError(
                {field: dict(value)}, f"logical operator '{operator}' cannot be used inside field '{field}'")
        family = OPERATOR_FAMILIES.get(operator)
        if family is None:
            if isinstance(operator, str) and operator.startswith('$'):
                raise InvalidExpressionError({field: dict(value)}, f"unknown operator '{operator}'")
            raise InvalidExpressionError(
                {field: dict(value)}, f"field '{field}' mixes operators with plain key '{operator}'")
        clauses.append(OperatorClause(operator, family, _validate_operand(field, operator, operand)))
    logger.debug(f"Validated {len(clauses)} operator(s) on field '{field}'")
    return OperatorCondition(tuple(clauses))


def _validate_operand(field: str, operator: str, operand: Any) -> Any:
    if operator in ORDERING_OPERATORS:
        if not (is_number(operand) or is_date(operand)):
            raise TypeMismatchError("number or date", type(operand).__name__, field)
        return operand

    if operator in ("$in", "$nin"):
        if not isinstance(operand, (list, tuple)):
            raise TypeMismatchError("list", type(operand).__name__, field)
        return tuple(operand)

    if operator == "$size":
        if not isinstance(operand, int) or isinstance(operand, bool):
            raise TypeMismatchError("int", type(operand).__name__, field)
        if operand < 0:
            raise ValidationError(f"{operator} must be non-negative, got {operand}", field)
        return operand

    if operator in ("$startsWith", "$endsWith"):
        if not isinstance(operand, str):
            raise TypeMismatchError("str", type(operand).__name__, field)
        return operand

    if operator in ("$regex", "$match"):
        return _validate_regex(field, operator, operand)

    if operator == "$dayOfWeek":
        if (not isinstance(operand, (list, tuple)) or not operand
                or any(not isinstance(d, int) or isinstance(d, bool) or not 0 <= d <= 6 for d in operand)):
            raise ValidationError(f"{operator} requires a non-empty list of integers 0..6", field)
        return tuple(operand)

    if operator in ("$isWeekday", "$isWeekend"):
        if not isinstance(operand, bool):
            raise TypeMismatchError("bool", type(operand).__name__, field)
        return operand

    if operator in ("$isBefore", "$isAfter"):
        if not is_date(operand):
            raise TypeMismatchError("datetime", type(operand).__name__, field)
        return operand

    model = _OPERAND_MODELS.get(operator)
    if model is not None:
        parsed = _parse_model(model, field, operator, operand)
        _check_coordinates(parsed)
        return parsed

    # $eq, $ne and $contains accept any operand
    return operand


def _validate_regex(field: str, operator: str, operand: Any):
    if isinstance(operand, re.Pattern):
        return operand
    if not isinstance(operand, str):
        raise TypeMismatchError("str or compiled pattern", type(operand).__name__, field)
    try:
        re.compile(operand)
    except re.error as e:
        raise OperatorError(operator, operand, f"invalid regular expression: {e}", field) from e
    return operand


def _parse_model(model: Type[BaseModel], field: str, operator: str, operand: Any) -> BaseModel:
    if isinstance(operand, model):
        return operand
    try:
        return model.model_validate(operand)
    except PydanticValidationError as e:
        errors: List[str] = [f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                             for err in e.errors()]
        raise ValidationError(f"invalid operand for {operator}", field, errors) from e


def _points(parsed: BaseModel) -> List[GeoPoint]:
    if isinstance(parsed, NearQuery):
        return [parsed.center]
    if isinstance(parsed, BoundingBox):
        return [parsed.southwest, parsed.northeast]
    if isinstance(parsed, PolygonQuery):
        return list(parsed.points)
    return []


def _check_coordinates(parsed: BaseModel) -> None:
    for point in _points(parsed):
        if not point.is_valid():
            raise GeospatialError(f"point ({point.lat}, {point.lng}) is out of range",
                                  {'lat': point.lat, 'lng': point.lng})
