# geoplaces/demo.py
"""
Walk through the store end to end against a live PostGIS database:
create the schema, insert one place per geometry kind, list them, find the
ones within 2 km of Monument Point, correct one geometry, batch update the
rest, then delete everything.

Usage:
    python -m geoplaces.demo --database-url postgresql+psycopg2://user:pw@host/db
"""

import argparse
import logging
import sys

from geoplaces import config
from geoplaces.db import make_engine
from geoplaces.errors import GeoPlacesError
from geoplaces.geometry import codec
from geoplaces.geometry.shapes import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from geoplaces.logging_config import setup_logging
from geoplaces.proximity import within_distance
from geoplaces.store import Record, RecordStore
from geoplaces.utils.srid import describe

logger = logging.getLogger(__name__)

MONUMENT_POINT = (78.4867, 17.385)


def sample_places(srid: int):
    """One place per geometry kind, around Hyderabad."""
    return [
        Record("Monument Point", Point(*MONUMENT_POINT, srid=srid)),
        Record(
            "Outer Ring Road Segment",
            LineString([MONUMENT_POINT, (78.5, 17.4)], srid),
        ),
        Record(
            "Lake Boundary",
            Polygon([(78.48, 17.38), (78.49, 17.39), (78.48, 17.40), (78.48, 17.38)], srid=srid),
        ),
        Record(
            "Metro Station Entrances",
            MultiPoint([Point(78.48, 17.38, srid), Point(78.49, 17.39, srid)], srid),
        ),
        Record(
            "Metro Corridor Network",
            MultiLineString([
                LineString([(78.1, 17.1), (78.2, 17.2)], srid),
                LineString([(78.3, 17.3), (78.4, 17.4)], srid),
            ], srid),
        ),
        Record(
            "Local Parks",
            MultiPolygon([
                Polygon([(78.1, 17.1), (78.2, 17.1), (78.2, 17.2), (78.1, 17.1)], srid=srid),
                Polygon([(78.3, 17.3), (78.4, 17.3), (78.4, 17.4), (78.3, 17.3)], srid=srid),
            ], srid),
        ),
        Record(
            "City Highlights Collection",
            GeometryCollection([
                Point(78.5, 17.5, srid),
                LineString([(78.6, 17.6), (78.7, 17.7)], srid),
            ], srid),
        ),
    ]


def _show(records):
    for r in records:
        location = codec.encode_text(r.location) if r.location is not None else "-"
        print(f"{r.id}: {r.name} - {location}")
    print()


def _pause(enabled: bool, message: str):
    if enabled:
        input(f"Press 'Enter' key to {message}.")


def run(store: RecordStore, pause: bool = False):
    srid = store.srid
    logger.info("Places are stored in %s", describe(srid))

    print("Drop and recreate database...")
    store.drop_schema()
    store.ensure_schema()
    print("Database ready.\n")

    places = sample_places(srid)
    print(f"Created {len(places)} geometry samples.\n")

    print("Inserting sample geometries...")
    store.insert_many(places)
    print("Insert completed.\n")

    print(">>> All locations in database:")
    _show(store.list_all())

    print(">>> Places within 2 kilometers of Monument Point (78.4867, 17.385):")
    origin = Point(*MONUMENT_POINT, srid=srid)
    for place in within_distance(store, origin, 2000):
        print("==========> " + place.name)
    print()

    _pause(pause, "perform location updates")

    print("Updating geometry for 'Metro Corridor Network'...")
    corridor = store.find_by_name("Metro Corridor Network")
    if corridor is not None:
        corrected = MultiLineString([
            LineString([(0, 0), (10, 10)], srid),
            LineString([(20, 20), (30, 30)], srid),
        ], srid)
        store.update_one(corridor.id, corrected)
        print("Update completed for 'Metro Corridor Network' geometry.")
        for place in store.search_name("Metro Corridor Network"):
            print(codec.encode_text(place.location))
    print()

    print("Batch updating geometries where ID is greater than 4...")
    line = LineString([(0, 0), (10, 10)], srid)
    store.batch_update(4, line, " - Updated")
    print("Batch update completed.")
    _show(store.list_all())

    _pause(pause, "delete all places from the database")
    store.delete_where(10)
    print("All rows deleted.\n")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Spatial record store walkthrough")
    parser.add_argument("--database-url", default=config.DATABASE_URL,
                        help="SQLAlchemy URL of a PostGIS database (default: $DATABASE_URL)")
    parser.add_argument("--pause", action="store_true",
                        help="Wait for Enter before updating and before deleting")
    parser.add_argument("--log-level", default=None, help="Logging level (default: $LOG_LEVEL)")
    args = parser.parse_args(argv)

    if not args.database_url:
        parser.error("--database-url or DATABASE_URL is required")

    setup_logging(args.log_level)

    engine = make_engine(args.database_url)
    try:
        run(RecordStore(engine), pause=args.pause)
    except GeoPlacesError as e:
        logger.error("Demo failed: %s", e)
        return 1
    finally:
        engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
