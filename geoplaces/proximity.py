# geoplaces/proximity.py
"""
"Within D metres of P" lookups.

The distance test itself is PostGIS ``ST_DWithin``. For geographic SRIDs
(lon/lat degrees) both sides are cast to ``geography`` so the distance is
geodesic metres; for projected SRIDs the column's own linear unit is used
and must be the metre.
"""

import math
from dataclasses import dataclass

from sqlalchemy import cast, func, select
from geoalchemy2 import Geography

from geoplaces.geometry import codec
from geoplaces.geometry.shapes import Point
from geoplaces.models.place import Place
from geoplaces.statements import require_srid
from geoplaces.utils import srid as srid_utils

_METRE_UNITS = ("metre", "meter")


@dataclass(frozen=True)
class WithinDistance:
    origin: Point
    meters: float

    def __post_init__(self):
        if type(self.origin) is not Point:
            raise TypeError(f"origin must be a Point, got {type(self.origin).__name__}")
        meters = float(self.meters)
        if not math.isfinite(meters) or meters < 0:
            raise ValueError(f"Distance must be a non-negative number of metres, got {self.meters!r}")
        object.__setattr__(self, "meters", meters)

    def predicate(self, srid: int):
        require_srid(self.origin, srid)
        origin = func.ST_GeomFromEWKB(codec.encode(self.origin))

        if srid_utils.is_geographic(srid):
            as_geography = Geography(geometry_type=None)
            return func.ST_DWithin(
                cast(Place.location, as_geography),
                cast(origin, as_geography),
                self.meters,
            )

        unit = srid_utils.linear_unit(srid)
        if unit not in _METRE_UNITS:
            raise ValueError(f"SRID {srid} is measured in {unit}, not metres")
        return func.ST_DWithin(Place.location, origin, self.meters)

    def statement(self, srid: int):
        return (
            select(Place)
            .where(Place.location.isnot(None), self.predicate(srid))
            .order_by(Place.id)
        )


def within_distance(store, origin: Point, meters: float, timeout=None):
    """Records whose location lies within ``meters`` of ``origin``."""
    return store.query(WithinDistance(origin, meters), timeout=timeout)
