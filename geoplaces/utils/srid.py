# geoplaces/utils/srid.py
# Spatial reference lookups backed by pyproj

from functools import lru_cache

from pyproj import CRS
from pyproj.exceptions import CRSError

# Reference systems the sample data and the defaults are expressed in
COORDINATE_SYSTEMS = {
    4326: {
        "name": "WGS84 (Lon/Lat)",
        "description": "Global GPS coordinates (Longitude, Latitude)",
    },
    3857: {
        "name": "WGS84 / Pseudo-Mercator",
        "description": "Web map tiles (Easting, Northing in metres)",
    },
    32644: {
        "name": "UTM Zone 44N",
        "description": "Hyderabad and central India (Easting, Northing)",
    },
}


@lru_cache(maxsize=64)
def get_crs(srid: int) -> CRS:
    """
    Resolve an EPSG code to a pyproj CRS.

    Raises:
        ValueError: if the code is not a known EPSG reference system
    """
    try:
        return CRS.from_epsg(srid)
    except CRSError as e:
        raise ValueError(f"Unknown SRID {srid}: {e}") from e


def is_geographic(srid: int) -> bool:
    """True when coordinates are angular (degrees), e.g. 4326."""
    return get_crs(srid).is_geographic


def linear_unit(srid: int) -> str:
    """Unit name of the first axis ("degree", "metre", "US survey foot", ...)."""
    return get_crs(srid).axis_info[0].unit_name


def describe(srid: int) -> str:
    info = COORDINATE_SYSTEMS.get(srid)
    if info:
        return f"EPSG:{srid} {info['name']}"
    return f"EPSG:{srid} {get_crs(srid).name}"


# Validation helpers
def validate_wgs84(lon: float, lat: float) -> bool:
    """Validate WGS84 coordinates are within valid ranges."""
    return -180 <= lon <= 180 and -90 <= lat <= 90
