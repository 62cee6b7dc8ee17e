"""
$near, $geoBox and $geoPolygon.

Field values are points given as a mapping or object with numeric ``lat`` and
``lng``. Values that are not points at all never match; points outside
lat [-90, 90] / lng [-180, 180] raise ``GeospatialError``.

    $near        great-circle distance (spherical law of cosines, R = 6371 km)
                 min_distance_meters <= d <= max_distance_meters
    $geoBox      inclusive box; southwest.lng > northeast.lng crosses the date line
    $geoPolygon  even-odd ray casting over an implicitly closed polygon
"""
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import numpy as np

from filtercraft_data_model.operand_models import BoundingBox, GeoPoint, NearQuery, PolygonQuery
from filtercraft_engine.matching.values import is_number
from filtercraft_exception_model.exception import GeospatialError

EARTH_RADIUS_METERS = 6371000.0


def is_valid_coordinate(lat, lng) -> bool:
    return -90 <= lat <= 90 and -180 <= lng <= 180


def to_point(value) -> Optional[Tuple[float, float]]:
    """
    Extract (lat, lng) from a field value.

    Returns:
        The coordinates, or None when the value is not shaped like a point.

    Raises:
        GeospatialError: if the value is a point with out-of-range coordinates.
    """
    if isinstance(value, GeoPoint):
        lat, lng = value.lat, value.lng
    elif isinstance(value, Mapping):
        lat, lng = value.get('lat'), value.get('lng')
    else:
        lat, lng = getattr(value, 'lat', None), getattr(value, 'lng', None)

    if not (is_number(lat) and is_number(lng)):
        return None
    if not is_valid_coordinate(lat, lng):
        raise GeospatialError(f"point ({lat}, {lng}) is out of range", {'lat': lat, 'lng': lng})
    return float(lat), float(lng)


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters."""
    if lat1 == lat2 and lng1 == lng2:
        return 0.0
    phi1, phi2, delta = np.radians([lat1, lat2, lng2 - lng1])
    cos_angle = np.sin(phi1) * np.sin(phi2) + np.cos(phi1) * np.cos(phi2) * np.cos(delta)
    return float(EARTH_RADIUS_METERS * np.arccos(np.clip(cos_angle, -1.0, 1.0)))


def _near(value, query: NearQuery, ctx) -> bool:
    point = to_point(value)
    if point is None:
        return False
    distance = calculate_distance(point[0], point[1], query.center.lat, query.center.lng)
    if query.min_distance_meters is not None and distance < query.min_distance_meters:
        return False
    return distance <= query.max_distance_meters


def _geo_box(value, box: BoundingBox, ctx) -> bool:
    point = to_point(value)
    if point is None:
        return False
    lat, lng = point
    if not box.southwest.lat <= lat <= box.northeast.lat:
        return False
    if box.southwest.lng > box.northeast.lng:
        return lng >= box.southwest.lng or lng <= box.northeast.lng
    return box.southwest.lng <= lng <= box.northeast.lng


def _geo_polygon(value, polygon: PolygonQuery, ctx) -> bool:
    point = to_point(value)
    if point is None:
        return False
    lat, lng = point
    vertices = polygon.points

    # vertices themselves are not considered inside
    if any(v.lat == lat and v.lng == lng for v in vertices):
        return False

    inside = False
    j = len(vertices) - 1
    for i in range(len(vertices)):
        vi, vj = vertices[i], vertices[j]
        if (vi.lng > lng) != (vj.lng > lng):
            crossing = (vj.lat - vi.lat) * (lng - vi.lng) / (vj.lng - vi.lng) + vi.lat
            if lat < crossing:
                inside = not inside
        j = i
    return inside


GEOSPATIAL_OPERATORS: Dict[str, Callable[[Any, Any, Any], bool]] = {
    "$near": _near,
    "$geoBox": _geo_box,
    "$geoPolygon": _geo_polygon,
}
