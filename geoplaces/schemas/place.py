# geoplaces/schemas/place.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from geoplaces import config
from geoplaces.geometry import codec
from geoplaces.geometry.shapes import geometry_type


class PlaceCreate(BaseModel):
    name: Optional[str] = None
    location: Optional[Dict[str, Any]] = None   # GeoJSON geometry object
    srid: int = config.PLACES_SRID


class LocationUpdate(BaseModel):
    location: Dict[str, Any]
    srid: int = config.PLACES_SRID


class BatchUpdateRequest(BaseModel):
    id_greater_than: int
    location: Dict[str, Any]
    srid: int = config.PLACES_SRID
    name_suffix: str = ""


class PlaceResponse(BaseModel):
    id: int
    name: Optional[str] = None
    geometry_type: Optional[str] = None
    srid: Optional[int] = None
    location: Optional[Dict[str, Any]] = None
    ewkt: Optional[str] = None

    @classmethod
    def from_record(cls, record):
        if record.location is None:
            return cls(id=record.id, name=record.name)
        return cls(
            id=record.id,
            name=record.name,
            geometry_type=geometry_type(record.location),
            srid=record.location.srid,
            location=codec.to_geojson(record.location),
            ewkt=codec.encode_text(record.location),
        )


class PlaceListResponse(BaseModel):
    items: List[PlaceResponse]
    total: int

    @classmethod
    def from_records(cls, records):
        items = [PlaceResponse.from_record(r) for r in records]
        return cls(items=items, total=len(items))


class CountResponse(BaseModel):
    count: int = Field(..., ge=0)
