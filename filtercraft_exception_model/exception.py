"""Error taxonomy raised by the filter engine.

Every error carries a stable ``code`` and a ``context`` dictionary so that
callers can log or surface failures without inspecting stack traces.
"""
import json
from typing import Any, Dict, List, Optional


def _json_safe(value: Any) -> Any:
    """Return ``value`` unchanged when JSON can encode it, else its repr."""
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        if isinstance(value, dict):
            return {str(k): _json_safe(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [_json_safe(v) for v in value]
        return repr(value)


class FilterError(Exception):
    """
    Base class for all filter-related errors.

    Attributes:
        message -- explanation of the error
        code -- machine readable error code
        context -- extra details describing the failure
    """

    def __init__(self, message, code="FILTER_ERROR", context=None):
        self.message = message
        self.code = code
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error into a JSON friendly dictionary."""
        return {
            'name': type(self).__name__,
            'message': self.message,
            'code': self.code,
            'context': _json_safe(self.context),
        }

    def __str__(self):
        return f"{type(self).__name__} [{self.code}]: {self.message}"


class InvalidExpressionError(FilterError):
    """
    Raised when a filter expression is structurally malformed or uses an
    unknown operator.

    Attributes:
        expression -- the offending (sub-)expression
        details -- explanation of what is wrong
        validation_errors -- optional list of individual problems
    """

    def __init__(self, expression, details, validation_errors: Optional[List[str]] = None):
        self.expression = expression
        self.details = details
        self.validation_errors = validation_errors
        message = f"Invalid filter expression: {details} (received={expression!r})"
        super().__init__(message, "INVALID_EXPRESSION", {
            'expression': expression,
            'details': details,
            'validation_errors': validation_errors,
        })


class ValidationError(FilterError):
    """
    Raised when an operand or option fails schema validation.
    """

    def __init__(self, details, field=None, errors: Optional[List[str]] = None):
        self.details = details
        self.field = field
        self.errors = errors
        field_str = f" for field '{field}'" if field else ""
        super().__init__(f"Validation failed{field_str}: {details}", "VALIDATION_ERROR", {
            'field': field,
            'details': details,
            'errors': errors,
        })


class OperatorError(FilterError):
    """
    Raised when an operator is misused, e.g. a regex that does not compile.
    """

    def __init__(self, operator, value, details, field=None):
        self.operator = operator
        self.value = value
        self.details = details
        self.field = field
        field_str = f" on field '{field}'" if field else ""
        super().__init__(f"Operator '{operator}' error{field_str}: {details} (value={value!r})", "OPERATOR_ERROR", {
            'operator': operator,
            'value': value,
            'details': details,
            'field': field,
        })


class TypeMismatchError(FilterError):
    """
    Raised when a value has the wrong shape, e.g. a non-collection input or an
    ordering operand that is neither a number nor a date.
    """

    def __init__(self, expected, received, field=None):
        self.expected = expected
        self.received = received
        self.field = field
        field_str = f" for field '{field}'" if field else ""
        super().__init__(f"Type mismatch{field_str}: expected {expected}, received {received}", "TYPE_MISMATCH", {
            'expected': expected,
            'received': received,
            'field': field,
        })


class GeospatialError(FilterError):
    """
    Raised when coordinates are outside lat [-90, 90] / lng [-180, 180].
    """

    def __init__(self, details, coordinates=None):
        self.details = details
        self.coordinates = coordinates
        super().__init__(f"Geospatial error: {details}", "GEOSPATIAL_ERROR", {
            'details': details,
            'coordinates': coordinates,
        })


class ConfigurationError(FilterError):
    """
    Raised when a filter option has an invalid value.
    """

    def __init__(self, details, option=None):
        self.details = details
        self.option = option
        option_str = f" for option '{option}'" if option else ""
        super().__init__(f"Configuration error{option_str}: {details}", "CONFIGURATION_ERROR", {
            'option': option,
            'details': details,
        })


class PerformanceLimitError(FilterError):
    """
    Raised when a performance budget is invalid or exceeded.
    """

    def __init__(self, details, limit=None, actual=None):
        self.details = details
        self.limit = limit
        self.actual = actual
        super().__init__(f"Performance limit exceeded: {details}", "PERFORMANCE_LIMIT", {
            'details': details,
            'limit': limit,
            'actual': actual,
        })
