import pytest

from geoplaces.utils.srid import describe, is_geographic, linear_unit, validate_wgs84


def test_geographic_and_projected():
    assert is_geographic(4326)
    assert not is_geographic(3857)
    assert linear_unit(32644) == "metre"


def test_unknown_srid():
    with pytest.raises(ValueError, match="Unknown SRID"):
        is_geographic(999999)


def test_describe():
    assert describe(4326) == "EPSG:4326 WGS84 (Lon/Lat)"
    assert describe(4269).startswith("EPSG:4269 NAD83")


def test_validate_wgs84():
    assert validate_wgs84(78.4867, 17.385)
    assert not validate_wgs84(181, 0)
    assert not validate_wgs84(0, -91)
