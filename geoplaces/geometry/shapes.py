# geoplaces/geometry/shapes.py
"""
In-memory geometry values.

Seven frozen dataclasses, one per OGC simple-feature kind. They do not share
a base class: ``Geometry`` is the closed union of the seven and code that
needs to branch on the kind looks the exact type up in ``GEOMETRY_TYPES``.

Every value carries an SRID. Members of multi-geometries and collections
must carry the same SRID as their container.
"""

import math
import operator
from dataclasses import dataclass
from typing import Tuple, Union

from geoplaces.errors import InvalidGeometry

DEFAULT_SRID = 4326

Coordinate = Tuple[float, float]


# ======================
# Validation helpers
# ======================

def _check_srid(srid) -> int:
    # numpy integers (shapely.get_srid) are accepted and normalised to int
    try:
        value = operator.index(srid) if not isinstance(srid, bool) else 0
    except TypeError:
        value = 0
    if value <= 0:
        raise InvalidGeometry(f"SRID must be a positive integer, got {srid!r}")
    return int(value)


def _number(value, axis: str) -> float:
    if isinstance(value, (str, bytes)):
        raise InvalidGeometry(f"{axis} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidGeometry(f"{axis} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise InvalidGeometry(f"{axis} must be finite, got {value!r}")
    return number


def _coordinate(value) -> Coordinate:
    if isinstance(value, (str, bytes)):
        raise InvalidGeometry(f"Coordinate must be an (x, y) pair, got {value!r}")
    try:
        size = len(value)
    except TypeError:
        raise InvalidGeometry(f"Coordinate must be an (x, y) pair, got {value!r}")
    if size != 2:
        raise InvalidGeometry(f"Coordinate must be an (x, y) pair, got {value!r}")
    return (_number(value[0], "x"), _number(value[1], "y"))


def _coordinates(values) -> Tuple[Coordinate, ...]:
    if isinstance(values, (str, bytes)):
        raise InvalidGeometry("Coordinates must be a sequence of (x, y) pairs")
    try:
        return tuple(_coordinate(v) for v in values)
    except TypeError:
        raise InvalidGeometry(f"Coordinates must be a sequence of (x, y) pairs, got {values!r}")


def _ring(values, label: str) -> Tuple[Coordinate, ...]:
    ring = _coordinates(values)
    if len(ring) < 4:
        raise InvalidGeometry(f"{label} needs at least 4 coordinates, got {len(ring)}")
    if ring[0] != ring[-1]:
        raise InvalidGeometry(f"{label} is not closed: {ring[0]} != {ring[-1]}")
    return ring


def _members(values, kinds, container: str, srid: int) -> tuple:
    if isinstance(values, (str, bytes)):
        raise InvalidGeometry(f"{container} members must be a sequence of geometries")
    try:
        members = tuple(values)
    except TypeError:
        raise InvalidGeometry(f"{container} members must be a sequence of geometries")

    for member in members:
        if type(member) not in kinds:
            raise InvalidGeometry(
                f"{container} cannot contain {type(member).__name__}"
            )
        if member.srid != srid:
            raise InvalidGeometry(
                f"{container} member SRID {member.srid} does not match container SRID {srid}"
            )
    return members


# ======================
# Geometry kinds
# ======================

@dataclass(frozen=True)
class Point:
    x: float
    y: float
    srid: int = DEFAULT_SRID

    def __post_init__(self):
        object.__setattr__(self, "x", _number(self.x, "x"))
        object.__setattr__(self, "y", _number(self.y, "y"))
        object.__setattr__(self, "srid", _check_srid(self.srid))

    @property
    def coordinate(self) -> Coordinate:
        return (self.x, self.y)


@dataclass(frozen=True)
class LineString:
    coordinates: Tuple[Coordinate, ...]
    srid: int = DEFAULT_SRID

    def __post_init__(self):
        coords = _coordinates(self.coordinates)
        if len(coords) < 2:
            raise InvalidGeometry(f"LineString needs at least 2 coordinates, got {len(coords)}")
        object.__setattr__(self, "coordinates", coords)
        object.__setattr__(self, "srid", _check_srid(self.srid))


@dataclass(frozen=True)
class Polygon:
    """Outer ring plus optional holes. Rings are kept in the order given."""

    shell: Tuple[Coordinate, ...]
    holes: Tuple[Tuple[Coordinate, ...], ...] = ()
    srid: int = DEFAULT_SRID

    def __post_init__(self):
        object.__setattr__(self, "shell", _ring(self.shell, "Polygon shell"))
        if isinstance(self.holes, (str, bytes)):
            raise InvalidGeometry("Polygon holes must be a sequence of rings")
        holes = tuple(
            _ring(hole, f"Polygon hole {i}") for i, hole in enumerate(self.holes)
        )
        object.__setattr__(self, "holes", holes)
        object.__setattr__(self, "srid", _check_srid(self.srid))


@dataclass(frozen=True)
class MultiPoint:
    points: Tuple[Point, ...]
    srid: int = DEFAULT_SRID

    def __post_init__(self):
        object.__setattr__(self, "srid", _check_srid(self.srid))
        object.__setattr__(
            self, "points", _members(self.points, (Point,), "MultiPoint", self.srid)
        )


@dataclass(frozen=True)
class MultiLineString:
    lines: Tuple[LineString, ...]
    srid: int = DEFAULT_SRID

    def __post_init__(self):
        object.__setattr__(self, "srid", _check_srid(self.srid))
        object.__setattr__(
            self, "lines", _members(self.lines, (LineString,), "MultiLineString", self.srid)
        )


@dataclass(frozen=True)
class MultiPolygon:
    polygons: Tuple[Polygon, ...]
    srid: int = DEFAULT_SRID

    def __post_init__(self):
        object.__setattr__(self, "srid", _check_srid(self.srid))
        object.__setattr__(
            self, "polygons", _members(self.polygons, (Polygon,), "MultiPolygon", self.srid)
        )


@dataclass(frozen=True)
class GeometryCollection:
    geometries: tuple
    srid: int = DEFAULT_SRID

    def __post_init__(self):
        object.__setattr__(self, "srid", _check_srid(self.srid))
        object.__setattr__(
            self,
            "geometries",
            _members(self.geometries, GEOMETRY_TYPES, "GeometryCollection", self.srid),
        )


Geometry = Union[
    Point,
    LineString,
    Polygon,
    MultiPoint,
    MultiLineString,
    MultiPolygon,
    GeometryCollection,
]

GEOMETRY_TYPES = (
    Point,
    LineString,
    Polygon,
    MultiPoint,
    MultiLineString,
    MultiPolygon,
    GeometryCollection,
)


def is_geometry(value) -> bool:
    return type(value) in GEOMETRY_TYPES


def geometry_type(geometry: Geometry) -> str:
    """OGC type name of ``geometry`` (``"Point"``, ``"MultiPolygon"``, ...)."""
    if type(geometry) not in GEOMETRY_TYPES:
        raise TypeError(f"Not a geometry: {type(geometry).__name__}")
    return type(geometry).__name__
