"""Pydantic models for structured geospatial and temporal operator operands."""
from typing import Annotated, List, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictFloat, StrictInt, model_validator

Number = Union[StrictInt, StrictFloat]


def _non_negative(value):
    if value is not None and value < 0:
        raise ValueError("must be non-negative")
    return value


NonNegative = Annotated[Number, AfterValidator(_non_negative)]


class OperandModel(BaseModel):
    """Frozen operand model accepting camelCase or snake_case keys."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='forbid')


class GeoPoint(OperandModel):
    """Latitude/longitude pair in degrees"""
    lat: Number = Field(..., description="Latitude in degrees")
    lng: Number = Field(..., description="Longitude in degrees")

    def is_valid(self) -> bool:
        return -90 <= self.lat <= 90 and -180 <= self.lng <= 180


class NearQuery(OperandModel):
    """Operand of $near"""
    center: GeoPoint
    max_distance_meters: NonNegative = Field(..., alias="maxDistanceMeters")
    min_distance_meters: Optional[NonNegative] = Field(None, alias="minDistanceMeters")


class BoundingBox(OperandModel):
    """Operand of $geoBox; a box crossing the date line has southwest.lng > northeast.lng"""
    southwest: GeoPoint
    northeast: GeoPoint


class PolygonQuery(OperandModel):
    """Operand of $geoPolygon; the polygon is implicitly closed"""
    points: List[GeoPoint] = Field(..., min_length=3)


class RelativeTimeQuery(OperandModel):
    """Operand of $recent and $upcoming; present units are added together"""
    days: Optional[NonNegative] = None
    hours: Optional[NonNegative] = None
    minutes: Optional[NonNegative] = None

    @model_validator(mode='after')
    def require_positive_unit(self) -> 'RelativeTimeQuery':
        if not any(v for v in (self.days, self.hours, self.minutes)):
            raise ValueError("at least one of days, hours or minutes must be positive")
        return self

    def total_seconds(self) -> float:
        return (self.days or 0) * 86400 + (self.hours or 0) * 3600 + (self.minutes or 0) * 60


class TimeOfDayQuery(OperandModel):
    """Operand of $timeOfDay; inclusive hour range"""
    start: StrictInt = Field(..., ge=0, le=23)
    end: StrictInt = Field(..., ge=0, le=23)


class AgeQuery(OperandModel):
    """Operand of $age"""
    min: Optional[NonNegative] = None
    max: Optional[NonNegative] = None
    unit: Literal['years', 'months', 'days'] = 'years'

    @model_validator(mode='after')
    def require_bound(self) -> 'AgeQuery':
        if self.min is None and self.max is None:
            raise ValueError("at least one of min or max is required")
        return self
