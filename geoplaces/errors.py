# geoplaces/errors.py
"""Error taxonomy shared by the geometry model, codec and record store."""


class GeoPlacesError(Exception):
    """Base class for every error raised by geoplaces."""


class InvalidGeometry(GeoPlacesError, ValueError):
    """A geometry was constructed with an invalid shape."""


class MalformedGeometry(GeoPlacesError, ValueError):
    """Serialized geometry could not be decoded."""


class NotFound(GeoPlacesError, LookupError):
    """The requested record does not exist."""

    def __init__(self, record_id):
        self.record_id = record_id
        super().__init__(f"Place {record_id} not found")


class ConstraintViolation(GeoPlacesError):
    """The store rejected a write."""


class SridMismatch(ConstraintViolation):
    """A geometry's SRID differs from the column SRID."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Geometry SRID {actual} does not match column SRID {expected}")


class StoreUnavailable(GeoPlacesError):
    """Connection or transport failure talking to the store."""


class StoreTimeout(StoreUnavailable):
    """A statement was cancelled by the statement timeout."""
