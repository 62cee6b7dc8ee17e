"""Operator symbols understood by the filter engine, grouped by family."""
from enum import Enum
from typing import Dict, FrozenSet


class OperatorFamily(str, Enum):
    COMPARISON = "comparison"
    ARRAY = "array"
    STRING = "string"
    GEOSPATIAL = "geospatial"
    TEMPORAL = "temporal"
    # $contains is shared by the array and string families
    CONTAINMENT = "containment"


AND = "$and"
OR = "$or"
NOT = "$not"
LOGICAL_OPERATORS: FrozenSet[str] = frozenset({AND, OR, NOT})

ANY_PROPERTY_KEY = "$"
NEGATION_PREFIX = "!"
WILDCARD_ANY = "%"
WILDCARD_ONE = "_"

OPERATOR_FAMILIES: Dict[str, OperatorFamily] = {
    "$eq": OperatorFamily.COMPARISON,
    "$ne": OperatorFamily.COMPARISON,
    "$gt": OperatorFamily.COMPARISON,
    "$gte": OperatorFamily.COMPARISON,
    "$lt": OperatorFamily.COMPARISON,
    "$lte": OperatorFamily.COMPARISON,
    "$in": OperatorFamily.ARRAY,
    "$nin": OperatorFamily.ARRAY,
    "$size": OperatorFamily.ARRAY,
    "$contains": OperatorFamily.CONTAINMENT,
    "$startsWith": OperatorFamily.STRING,
    "$endsWith": OperatorFamily.STRING,
    "$regex": OperatorFamily.STRING,
    "$match": OperatorFamily.STRING,
    "$near": OperatorFamily.GEOSPATIAL,
    "$geoBox": OperatorFamily.GEOSPATIAL,
    "$geoPolygon": OperatorFamily.GEOSPATIAL,
    "$recent": OperatorFamily.TEMPORAL,
    "$upcoming": OperatorFamily.TEMPORAL,
    "$dayOfWeek": OperatorFamily.TEMPORAL,
    "$timeOfDay": OperatorFamily.TEMPORAL,
    "$age": OperatorFamily.TEMPORAL,
    "$isWeekday": OperatorFamily.TEMPORAL,
    "$isWeekend": OperatorFamily.TEMPORAL,
    "$isBefore": OperatorFamily.TEMPORAL,
    "$isAfter": OperatorFamily.TEMPORAL,
}

ORDERING_OPERATORS: FrozenSet[str] = frozenset({"$gt", "$gte", "$lt", "$lte"})

# Labels used when rendering debug trees
OPERATOR_LABELS: Dict[str, str] = {
    "$gt": ">",
    "$gte": ">=",
    "$lt": "<",
    "$lte": "<=",
    "$eq": "=",
    "$ne": "!=",
    "$in": "IN",
    "$nin": "NOT IN",
    "$contains": "CONTAINS",
    "$size": "SIZE",
    "$startsWith": "STARTS WITH",
    "$endsWith": "ENDS WITH",
    "$regex": "REGEX",
    "$match": "MATCH",
    "$near": "NEAR",
    "$geoBox": "IN BOX",
    "$geoPolygon": "IN POLYGON",
    "$recent": "RECENT",
    "$upcoming": "UPCOMING",
    "$dayOfWeek": "DAY OF WEEK",
    "$timeOfDay": "TIME OF DAY",
    "$age": "AGE",
    "$isWeekday": "IS WEEKDAY",
    "$isWeekend": "IS WEEKEND",
    "$isBefore": "BEFORE",
    "$isAfter": "AFTER",
    AND: "AND",
    OR: "OR",
    NOT: "NOT",
}
