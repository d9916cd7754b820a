# geoplaces/geometry/codec.py
"""
Conversions between geometry values and their serialized forms.

Storage form is EWKB: OGC WKB, little-endian, 2D, with the PostGIS SRID
flag (0x20000000) set on the outer type and a 4-byte SRID following it.
Members of multi-geometries and collections inherit the outer SRID on
decode.

Text form is EWKT (``SRID=4326;POINT (78.4867 17.385)``). GeoJSON mappings
are used by the HTTP layer.
"""

import re
from typing import Optional

import shapely
from shapely import geometry as sg
from shapely.errors import ShapelyError
from geoalchemy2.elements import WKBElement, WKTElement

from geoplaces.errors import InvalidGeometry, MalformedGeometry
from geoplaces.geometry.shapes import (
    DEFAULT_SRID,
    Geometry,
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    geometry_type,
)

_HEX_RE = re.compile(r"^(?:[0-9A-Fa-f]{2})+$")


# ======================
# Value model <-> shapely
# ======================

def to_shapely(geometry: Geometry):
    """Build the shapely geometry for a value (SRID is not attached)."""
    kind = type(geometry)

    if kind is Point:
        return sg.Point(geometry.x, geometry.y)
    if kind is LineString:
        return sg.LineString(geometry.coordinates)
    if kind is Polygon:
        return sg.Polygon(geometry.shell, geometry.holes)
    if kind is MultiPoint:
        return sg.MultiPoint([to_shapely(p) for p in geometry.points])
    if kind is MultiLineString:
        return sg.MultiLineString([to_shapely(line) for line in geometry.lines])
    if kind is MultiPolygon:
        return sg.MultiPolygon([to_shapely(p) for p in geometry.polygons])
    if kind is GeometryCollection:
        return sg.GeometryCollection([to_shapely(g) for g in geometry.geometries])

    raise TypeError(f"Not a geometry: {kind.__name__}")


def _xy(coords):
    return [(c[0], c[1]) for c in coords]


def from_shapely(shape, srid: int) -> Geometry:
    """Build a value from a shapely geometry. Z/M ordinates are dropped."""
    kind = shape.geom_type

    if kind == "Point":
        if shape.is_empty:
            raise InvalidGeometry("Empty Point is not supported")
        return Point(shape.x, shape.y, srid)
    if kind == "LineString":
        return LineString(_xy(shape.coords), srid)
    if kind == "Polygon":
        return Polygon(
            _xy(shape.exterior.coords),
            [_xy(ring.coords) for ring in shape.interiors],
            srid,
        )
    if kind == "MultiPoint":
        return MultiPoint([from_shapely(p, srid) for p in shape.geoms], srid)
    if kind == "MultiLineString":
        return MultiLineString([from_shapely(line, srid) for line in shape.geoms], srid)
    if kind == "MultiPolygon":
        return MultiPolygon([from_shapely(p, srid) for p in shape.geoms], srid)
    if kind == "GeometryCollection":
        return GeometryCollection([from_shapely(g, srid) for g in shape.geoms], srid)

    raise InvalidGeometry(f"Unsupported geometry type: {kind}")


# ======================
# EWKB / EWKT
# ======================

def encode(geometry: Geometry) -> bytes:
    """EWKB bytes for ``geometry``. Identical input gives identical bytes."""
    shape = shapely.set_srid(to_shapely(geometry), geometry.srid)
    return shapely.to_wkb(
        shape,
        hex=False,
        output_dimension=2,
        byte_order=1,
        include_srid=True,
    )


def encode_text(geometry: Geometry) -> str:
    wkt = shapely.to_wkt(
        to_shapely(geometry),
        rounding_precision=-1,
        trim=True,
        output_dimension=2,
    )
    return f"SRID={geometry.srid};{wkt}"


def _load(reader, payload):
    try:
        return reader(payload)
    except (ShapelyError, ValueError, TypeError) as e:
        raise MalformedGeometry(f"Cannot parse geometry: {e}") from e


def decode(data, default_srid: Optional[int] = None) -> Geometry:
    """
    Decode EWKB (bytes, memoryview or hex text), EWKT/WKT text or a
    GeoAlchemy2 element into a geometry value.

    ``default_srid`` is used when the input does not carry an SRID; without
    one such input is rejected.
    """
    if isinstance(data, (WKBElement, WKTElement)):
        return from_element(data, default_srid)

    srid = None
    if isinstance(data, (bytearray, memoryview)):
        data = bytes(data)

    if isinstance(data, bytes):
        if not data:
            raise MalformedGeometry("Empty geometry payload")
        shape = _load(shapely.from_wkb, data)
    elif isinstance(data, str):
        text = data.strip()
        if text[:5].upper() == "SRID=":
            head, _, text = text.partition(";")
            try:
                srid = int(head[5:])
            except ValueError:
                raise MalformedGeometry(f"Bad SRID prefix: {head!r}") from None
            text = text.strip()
        if not text:
            raise MalformedGeometry("Empty geometry payload")
        if _HEX_RE.match(text):
            shape = _load(shapely.from_wkb, text)
        else:
            shape = _load(shapely.from_wkt, text)
    else:
        raise MalformedGeometry(f"Cannot decode geometry from {type(data).__name__}")

    if srid is None:
        srid = int(shapely.get_srid(shape)) or default_srid
    if not srid:
        raise MalformedGeometry("Geometry carries no SRID")

    try:
        return from_shapely(shape, srid)
    except InvalidGeometry as e:
        raise MalformedGeometry(str(e)) from e


# ======================
# GeoAlchemy2 elements
# ======================

def to_element(geometry: Geometry) -> WKBElement:
    return WKBElement(encode(geometry), srid=geometry.srid, extended=True)


def from_element(element, default_srid: Optional[int] = None) -> Geometry:
    """Decode a ``WKBElement``/``WKTElement`` as returned by a Geometry column."""
    if element.srid and element.srid > 0:
        default_srid = element.srid
    payload = element.data
    if isinstance(payload, (bytearray, memoryview)):
        payload = bytes(payload)
    return decode(payload, default_srid)


# ======================
# GeoJSON
# ======================

def to_geojson(geometry: Geometry) -> dict:
    kind = type(geometry)

    if kind is Point:
        return {"type": "Point", "coordinates": [geometry.x, geometry.y]}
    if kind is LineString:
        return {"type": "LineString", "coordinates": [list(c) for c in geometry.coordinates]}
    if kind is Polygon:
        rings = (geometry.shell,) + geometry.holes
        return {
            "type": "Polygon",
            "coordinates": [[list(c) for c in ring] for ring in rings],
        }
    if kind is GeometryCollection:
        return {
            "type": "GeometryCollection",
            "geometries": [to_geojson(g) for g in geometry.geometries],
        }

    if kind is MultiPoint:
        members = geometry.points
    elif kind is MultiLineString:
        members = geometry.lines
    elif kind is MultiPolygon:
        members = geometry.polygons
    else:
        raise TypeError(f"Not a geometry: {kind.__name__}")
    return {
        "type": geometry_type(geometry),
        "coordinates": [to_geojson(m)["coordinates"] for m in members],
    }


def _geojson_point(coords, srid):
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        raise InvalidGeometry(f"GeoJSON position must be [x, y], got {coords!r}")
    return Point(coords[0], coords[1], srid)


def _geojson_polygon(coords, srid):
    if not isinstance(coords, (list, tuple)) or not coords:
        raise InvalidGeometry("GeoJSON Polygon needs at least one ring")
    return Polygon(coords[0], coords[1:], srid)


_FROM_GEOJSON = {
    "Point": _geojson_point,
    "LineString": lambda coords, srid: LineString(coords, srid),
    "Polygon": _geojson_polygon,
    "MultiPoint": lambda coords, srid: MultiPoint(
        [_geojson_point(c, srid) for c in coords], srid
    ),
    "MultiLineString": lambda coords, srid: MultiLineString(
        [LineString(c, srid) for c in coords], srid
    ),
    "MultiPolygon": lambda coords, srid: MultiPolygon(
        [_geojson_polygon(c, srid) for c in coords], srid
    ),
}


def from_geojson(mapping: dict, srid: int = DEFAULT_SRID) -> Geometry:
    """Build a value from a GeoJSON geometry object. Rings are not auto-closed."""
    if not isinstance(mapping, dict) or "type" not in mapping:
        raise InvalidGeometry("GeoJSON geometry must be an object with a 'type'")

    kind = mapping["type"]
    try:
        if kind == "GeometryCollection":
            return GeometryCollection(
                [from_geojson(g, srid) for g in mapping.get("geometries") or []], srid
            )
        if kind not in _FROM_GEOJSON:
            raise InvalidGeometry(f"Unsupported GeoJSON type: {kind!r}")
        return _FROM_GEOJSON[kind](mapping.get("coordinates"), srid)
    except TypeError as e:
        raise InvalidGeometry(f"Bad GeoJSON {kind}: {e}") from e
