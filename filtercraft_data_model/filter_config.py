"""Per-call filter configuration.

Raw options (a dict using camelCase or snake_case keys, an existing
``FilterConfig``, or ``None``) are validated by ``FilterOptions`` and frozen
into a ``FilterConfig`` that stays immutable for the whole filter call.
"""
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt
from pydantic import ValidationError as PydanticValidationError

from filtercraft_exception_model.exception import ConfigurationError

Comparator = Callable[[Any, Any], bool]

SORT_ASC = 'asc'
SORT_DESC = 'desc'


@dataclass(frozen=True)
class OrderByField:
    field: str
    direction: str = SORT_ASC


@dataclass(frozen=True)
class FilterConfig:
    """Immutable options for one filter call.

    Attributes:
        case_sensitive: Compare strings case-sensitively.
        max_depth: Maximum nesting depth for deep comparison (1..10).
        enable_cache: Use the result, predicate and pattern caches.
        debug: Build and print a debug tree instead of a plain pass.
        verbose: Include node values in the rendered debug tree.
        show_timings: Include per-node timings in the rendered debug tree.
        colorize: Use ANSI colors in the rendered debug tree.
        custom_comparator: Leaf comparator used by deep comparison.
        order_by: Sort specification applied to the result.
        limit: Maximum number of results to return.
        enable_performance_monitoring: Record per-phase timings.
    """
    case_sensitive: bool = False
    max_depth: int = 3
    enable_cache: bool = False
    debug: bool = False
    verbose: bool = False
    show_timings: bool = False
    colorize: bool = False
    custom_comparator: Optional[Comparator] = field(default=None, compare=False)
    order_by: Tuple[OrderByField, ...] = ()
    limit: Optional[int] = None
    enable_performance_monitoring: bool = False


DEFAULT_CONFIG = FilterConfig()


class FilterOptions(BaseModel):
    """Schema for raw filter options"""
    model_config = ConfigDict(populate_by_name=True, extra='forbid', arbitrary_types_allowed=True)

    case_sensitive: Optional[StrictBool] = Field(None, alias="caseSensitive")
    max_depth: Optional[StrictInt] = Field(None, alias="maxDepth", ge=1, le=10)
    enable_cache: Optional[StrictBool] = Field(None, alias="enableCache")
    debug: Optional[StrictBool] = None
    verbose: Optional[StrictBool] = None
    show_timings: Optional[StrictBool] = Field(None, alias="showTimings")
    colorize: Optional[StrictBool] = None
    custom_comparator: Optional[Callable[[Any, Any], bool]] = Field(None, alias="customComparator")
    order_by: Optional[Any] = Field(None, alias="orderBy")
    limit: Optional[StrictInt] = Field(None, ge=0)
    enable_performance_monitoring: Optional[StrictBool] = Field(None, alias="enablePerformanceMonitoring")


def normalize_order_by(order_by: Any) -> Tuple[OrderByField, ...]:
    """Accept "field", {"field": .., "direction": ..}, or a list of those."""
    if order_by is None:
        return ()
    if isinstance(order_by, OrderByField):
        return (order_by,)
    if isinstance(order_by, str):
        return (OrderByField(order_by),)
    if isinstance(order_by, Mapping):
        name = order_by.get('field')
        direction = str(order_by.get('direction', SORT_ASC)).lower()
        if not isinstance(name, str) or not name:
            raise ConfigurationError("orderBy entries need a non-empty 'field'", "orderBy")
        if direction not in (SORT_ASC, SORT_DESC):
            raise ConfigurationError(f"unknown sort direction '{direction}'", "orderBy")
        return (OrderByField(name, direction),)
    if isinstance(order_by, (list, tuple)):
        result: List[OrderByField] = []
        for item in order_by:
            result.extend(normalize_order_by(item))
        return tuple(result)
    raise ConfigurationError(f"unsupported orderBy value {order_by!r}", "orderBy")


def merge_config(options: Union[None, FilterConfig, Mapping[str, Any]] = None,
                 defaults: FilterConfig = DEFAULT_CONFIG) -> FilterConfig:
    """
    Validate raw options and merge them over ``defaults``.

    Raises:
        ConfigurationError: if an option is unknown or has an invalid value.
    """
    if options is None:
        return defaults
    if isinstance(options, FilterConfig):
        if not 1 <= options.max_depth <= 10:
            raise ConfigurationError(f"maxDepth must be between 1 and 10, got {options.max_depth}", "maxDepth")
        return options
    if not isinstance(options, Mapping):
        raise ConfigurationError(f"options must be a mapping, got {type(options).__name__}")

    try:
        parsed = FilterOptions.model_validate(dict(options))
    except PydanticValidationError as e:
        first = e.errors()[0]
        option = str(first['loc'][0]) if first.get('loc') else None
        raise ConfigurationError(first['msg'], option) from e

    overrides: Dict[str, Any] = {}
    for f in fields(FilterConfig):
        value = getattr(parsed, f.name)
        if value is None:
            continue
        if f.name == 'order_by':
            value = normalize_order_by(value)
        overrides[f.name] = value
    return replace(defaults, **overrides)
