# geoplaces/routers/places.py

from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from geoplaces.db import get_engine
from geoplaces.geometry import codec
from geoplaces.geometry.shapes import Point
from geoplaces.proximity import within_distance
from geoplaces.schemas.place import (
    BatchUpdateRequest,
    CountResponse,
    LocationUpdate,
    PlaceCreate,
    PlaceListResponse,
    PlaceResponse,
)
from geoplaces.store import Record, RecordStore
from geoplaces.utils.srid import is_geographic, validate_wgs84

router = APIRouter(prefix="/places", tags=["places"])


@lru_cache()
def get_store() -> RecordStore:
    return RecordStore(get_engine())


# ---------------- CREATE ----------------

@router.post("", response_model=PlaceListResponse, status_code=status.HTTP_201_CREATED)
def create_places(places: List[PlaceCreate], store: RecordStore = Depends(get_store)):
    """Insert all places in one transaction."""
    records = [
        Record(
            name=p.name,
            location=codec.from_geojson(p.location, p.srid) if p.location is not None else None,
        )
        for p in places
    ]
    return PlaceListResponse.from_records(store.insert_many(records))


# ---------------- READ ----------------

@router.get("", response_model=PlaceListResponse)
def list_places(store: RecordStore = Depends(get_store)):
    return PlaceListResponse.from_records(store.list_all())


@router.get("/search", response_model=PlaceListResponse)
def search_places(
    name: str = Query(..., min_length=1),
    exact: bool = False,
    store: RecordStore = Depends(get_store),
):
    if exact:
        match = store.find_by_name(name)
        records = [match] if match is not None else []
    else:
        records = store.search_name(name)
    return PlaceListResponse.from_records(records)


@router.get("/nearby", response_model=PlaceListResponse)
def nearby_places(
    lon: float,
    lat: float,
    meters: float = Query(2000, ge=0),
    store: RecordStore = Depends(get_store),
):
    """Places within `meters` of (lon, lat), measured by the database."""
    if is_geographic(store.srid) and not validate_wgs84(lon, lat):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"({lon}, {lat}) is not a valid longitude/latitude",
        )
    origin = Point(lon, lat, store.srid)
    return PlaceListResponse.from_records(within_distance(store, origin, meters))


@router.get("/{place_id}", response_model=PlaceResponse)
def get_place(place_id: int, store: RecordStore = Depends(get_store)):
    return PlaceResponse.from_record(store.get(place_id))


# ---------------- UPDATE ----------------

@router.put("/{place_id}/location", response_model=PlaceResponse)
def update_place_location(
    place_id: int,
    data: LocationUpdate,
    store: RecordStore = Depends(get_store),
):
    location = codec.from_geojson(data.location, data.srid)
    return PlaceResponse.from_record(store.update_one(place_id, location))


@router.post("/batch-update", response_model=CountResponse)
def batch_update_places(data: BatchUpdateRequest, store: RecordStore = Depends(get_store)):
    location = codec.from_geojson(data.location, data.srid)
    count = store.batch_update(data.id_greater_than, location, data.name_suffix)
    return CountResponse(count=count)


# ---------------- DELETE ----------------

@router.delete("", response_model=CountResponse)
def delete_places(id_at_most: int, store: RecordStore = Depends(get_store)):
    return CountResponse(count=store.delete_where(id_at_most))
