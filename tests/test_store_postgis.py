"""Store behaviour against a live PostGIS database (TEST_DATABASE_URL)."""

import pytest
from sqlalchemy import text

from geoplaces.db import make_engine
from geoplaces.demo import run, sample_places
from geoplaces.errors import ConstraintViolation, NotFound
from geoplaces.geometry.shapes import LineString, MultiLineString, Point, Polygon
from geoplaces.proximity import within_distance
from geoplaces.store import Record, RecordStore

MONUMENT = (78.4867, 17.385)


@pytest.fixture
def store(postgis_url):
    engine = make_engine(postgis_url, echo=False)
    store = RecordStore(engine)
    store.drop_schema()
    store.ensure_schema()
    yield store
    store.drop_schema()
    engine.dispose()


def test_ensure_schema_is_idempotent(store):
    store.ensure_schema()
    store.ensure_schema()
    assert store.list_all() == []


def test_point_line_polygon_scenario(store):
    srid = store.srid
    records = [
        Record("Monument Point", Point(*MONUMENT, srid=srid)),
        Record("Outer Ring Road Segment", LineString([MONUMENT, (78.5, 17.4)], srid)),
        Record(
            "Lake Boundary",
            Polygon([(78.48, 17.38), (78.49, 17.39), (78.48, 17.40), (78.48, 17.38)], srid=srid),
        ),
    ]
    inserted = store.insert_many(records)
    assert [r.id for r in inserted] == sorted(r.id for r in inserted)

    stored = store.list_all()
    assert len(stored) == 3
    assert [type(r.location) for r in stored] == [Point, LineString, Polygon]
    assert [r.location for r in stored] == [r.location for r in records]
    assert stored == inserted


def test_all_kinds_round_trip_through_the_store(store):
    records = sample_places(store.srid)
    store.insert_many(records)
    assert [r.location for r in store.list_all()] == [r.location for r in records]


def test_insert_is_all_or_nothing(store):
    with store.engine.begin() as conn:
        conn.execute(text(
            "ALTER TABLE places ADD CONSTRAINT places_name_not_rejected CHECK (name <> 'reject me')"
        ))
    store.insert_many([Record("existing", Point(1, 1, store.srid))])
    before = store.list_all()

    batch = [
        Record("first", Point(2, 2, store.srid)),
        Record("second", Point(3, 3, store.srid)),
        Record("reject me", Point(4, 4, store.srid)),
        Record("fourth", Point(5, 5, store.srid)),
    ]
    with pytest.raises(ConstraintViolation):
        store.insert_many(batch)

    assert store.list_all() == before


def test_batch_update_touches_only_higher_ids(store):
    inserted = store.insert_many(sample_places(store.srid))
    threshold = inserted[3].id
    before = {r.id: r for r in store.list_all()}

    line = LineString([(0, 0), (10, 10)], store.srid)
    count = store.batch_update(threshold, line, " - Updated")

    after = {r.id: r for r in store.list_all()}
    assert count == len([i for i in before if i > threshold])
    for record_id, record in after.items():
        if record_id <= threshold:
            assert record == before[record_id]
        else:
            assert record.location == line
            assert record.name == before[record_id].name + " - Updated"


def test_batch_update_null_name_gets_suffix(store):
    [record] = store.insert_many([Record(None, Point(1, 1, store.srid))])
    store.batch_update(record.id - 1, Point(2, 2, store.srid), "-x")
    assert store.get(record.id).name == "-x"


def test_batch_update_matching_nothing(store):
    store.insert_many([Record("only", Point(1, 1, store.srid))])
    assert store.batch_update(10_000, Point(0, 0, store.srid), "!") == 0


def test_delete_matching_nothing_is_not_an_error(store):
    store.insert_many(sample_places(store.srid))
    before = store.list_all()
    assert store.delete_where(0) == 0
    assert store.list_all() == before


def test_delete_where(store):
    inserted = store.insert_many(sample_places(store.srid))
    assert store.delete_where(inserted[-1].id) == len(inserted)
    assert store.list_all() == []


def test_update_one(store):
    inserted = store.insert_many(sample_places(store.srid))
    corridor = store.find_by_name("Metro Corridor Network")
    corrected = MultiLineString([
        LineString([(0, 0), (10, 10)], store.srid),
        LineString([(20, 20), (30, 30)], store.srid),
    ], store.srid)

    updated = store.update_one(corridor.id, corrected)

    assert updated.location == corrected
    assert store.get(corridor.id).location == corrected
    others = [r for r in store.list_all() if r.id != corridor.id]
    assert others == [r for r in inserted if r.id != corridor.id]


def test_update_one_missing_id(store):
    with pytest.raises(NotFound):
        store.update_one(999, Point(0, 0, store.srid))


def test_find_and_search_by_name(store):
    store.insert_many(sample_places(store.srid))
    assert store.find_by_name("Lake Boundary").name == "Lake Boundary"
    assert store.find_by_name("Atlantis") is None
    assert [r.name for r in store.search_name("Metro")] == [
        "Metro Station Entrances",
        "Metro Corridor Network",
    ]
    assert store.search_name("100%") == []


def test_within_distance(store):
    near, far = store.insert_many([
        Record("Monument Point", Point(*MONUMENT, srid=store.srid)),
        # ~50 km east along the same parallel
        Record("Far Away", Point(MONUMENT[0] + 0.47, MONUMENT[1], srid=store.srid)),
    ])
    origin = Point(*MONUMENT, srid=store.srid)

    names = [r.name for r in within_distance(store, origin, 2000)]
    assert near.name in names
    assert far.name not in names

    assert far.name in [r.name for r in within_distance(store, origin, 60_000)]


def test_statement_timeout_passes_through(store):
    store.insert_many([Record("a", Point(1, 1, store.srid))])
    assert len(store.list_all(timeout=5)) == 1


def test_demo_walkthrough(store, capsys):
    run(store)
    out = capsys.readouterr().out
    assert "==========> Monument Point" in out
    assert "Update completed for 'Metro Corridor Network' geometry." in out
    assert store.list_all() == []
