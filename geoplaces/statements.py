# geoplaces/statements.py
"""
Statement builders for the record store.

Each request is a plain value; ``statement(srid)`` turns it into one
SQLAlchemy statement against the ``places`` table, which the store runs in a
single session. Mutations are always one UPDATE/DELETE, never a loop over
rows on the client.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import delete, func, select, update

from geoplaces.errors import InvalidGeometry, SridMismatch
from geoplaces.geometry import codec
from geoplaces.geometry.shapes import Geometry, is_geometry
from geoplaces.models.place import Place


def require_srid(geometry, srid: int) -> None:
    """Reject non-geometries and geometries outside the column SRID."""
    if not is_geometry(geometry):
        raise InvalidGeometry(f"Expected a geometry, got {type(geometry).__name__}")
    if geometry.srid != srid:
        raise SridMismatch(srid, geometry.srid)


@dataclass(frozen=True)
class NameMatch:
    name: str
    exact: bool = True
    limit: Optional[int] = None

    def statement(self, srid: int):
        if self.exact:
            condition = Place.name == self.name
        else:
            condition = Place.name.contains(self.name, autoescape=True)

        stmt = select(Place).where(condition).order_by(Place.id)
        if self.limit is not None:
            stmt = stmt.limit(self.limit)
        return stmt


@dataclass(frozen=True)
class BatchUpdate:
    """Set ``location`` and append ``name_suffix`` on every row with id > threshold."""

    id_greater_than: int
    location: Geometry
    name_suffix: str = ""

    def statement(self, srid: int):
        require_srid(self.location, srid)

        values = {"location": codec.to_element(self.location)}
        if self.name_suffix:
            # NULL names become the bare suffix
            values["name"] = func.coalesce(Place.name, "") + self.name_suffix

        return (
            update(Place)
            .where(Place.id > self.id_greater_than)
            .values(**values)
            .execution_options(synchronize_session=False)
        )


@dataclass(frozen=True)
class DeleteWhere:
    id_at_most: int

    def statement(self, srid: int):
        return (
            delete(Place)
            .where(Place.id <= self.id_at_most)
            .execution_options(synchronize_session=False)
        )
