import math

import pytest
from sqlalchemy.dialects import postgresql

from geoplaces.errors import InvalidGeometry, SridMismatch
from geoplaces.geometry.shapes import LineString, Point
from geoplaces.proximity import WithinDistance
from geoplaces.statements import BatchUpdate, DeleteWhere, NameMatch, require_srid

LINE = LineString([(0, 0), (10, 10)])


def compile_pg(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def test_require_srid():
    require_srid(Point(0, 0), 4326)
    with pytest.raises(SridMismatch) as err:
        require_srid(Point(0, 0, 3857), 4326)
    assert err.value.expected == 4326 and err.value.actual == 3857
    with pytest.raises(InvalidGeometry):
        require_srid((0, 0), 4326)


def test_batch_update_is_one_update_statement():
    sql = compile_pg(BatchUpdate(4, LINE, " - Updated").statement(4326))
    assert sql.startswith("UPDATE places SET")
    assert "WHERE places.id >" in sql
    assert sql.count("UPDATE") == 1
    assert "location=" in sql.replace(" ", "")
    assert "coalesce(places.name" in sql
    assert "||" in sql


def test_batch_update_without_suffix_leaves_name():
    sql = compile_pg(BatchUpdate(4, LINE).statement(4326))
    assert "name=" not in sql.replace(" ", "")
    assert "coalesce" not in sql


def test_batch_update_checks_srid():
    with pytest.raises(SridMismatch):
        BatchUpdate(4, LineString([(0, 0), (1, 1)], 3857)).statement(4326)


def test_delete_is_one_statement():
    sql = compile_pg(DeleteWhere(10).statement(4326))
    assert sql.startswith("DELETE FROM places WHERE places.id <=")


def test_name_match_exact_and_contains():
    exact = compile_pg(NameMatch("Lake Boundary", limit=1).statement(4326))
    assert "places.name =" in exact
    assert "ORDER BY places.id" in exact
    assert "LIMIT" in exact

    contains = compile_pg(NameMatch("Metro", exact=False).statement(4326))
    assert "LIKE" in contains
    assert "LIMIT" not in contains


def test_within_distance_uses_geography_for_lon_lat():
    request = WithinDistance(Point(78.4867, 17.385), 2000)
    sql = compile_pg(request.statement(4326))
    assert "ST_DWithin" in sql
    assert "CAST(places.location AS geography)" in sql
    assert "ST_GeomFromEWKB" in sql
    assert "places.location IS NOT NULL" in sql


def test_within_distance_stays_planar_for_metric_projection():
    request = WithinDistance(Point(240000, 1925000, 32644), 500)
    sql = compile_pg(request.statement(32644))
    assert "ST_DWithin(places.location, ST_GeomFromEWKB" in sql
    assert "geography" not in sql


def test_within_distance_rejects_non_metre_projection():
    # NAD83 / New York Long Island, US survey feet
    request = WithinDistance(Point(1000000, 200000, 2263), 500)
    with pytest.raises(ValueError, match="not metres"):
        request.statement(2263)


def test_within_distance_checks_origin_srid():
    with pytest.raises(SridMismatch):
        WithinDistance(Point(0, 0, 3857), 10).statement(4326)


@pytest.mark.parametrize("meters", [-1, math.nan, math.inf])
def test_within_distance_rejects_bad_distance(meters):
    with pytest.raises(ValueError):
        WithinDistance(Point(0, 0), meters)


def test_within_distance_needs_point_origin():
    with pytest.raises(TypeError):
        WithinDistance(LINE, 10)
