# geoplaces/store.py
"""
Record store over the ``places`` table.

Every operation opens its own session, runs one unit of work, commits on
success and rolls back on any failure; the session is closed on every path.
SQLAlchemy errors are translated once, here, into the geoplaces taxonomy.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

from sqlalchemy import select, text
from sqlalchemy.exc import (
    DataError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)

from geoplaces import config
from geoplaces.db import make_sessionmaker
from geoplaces.db_init import drop_db, init_db
from geoplaces.errors import (
    ConstraintViolation,
    NotFound,
    StoreTimeout,
    StoreUnavailable,
)
from geoplaces.geometry import codec
from geoplaces.geometry.shapes import Geometry
from geoplaces.models.place import Place
from geoplaces.statements import BatchUpdate, DeleteWhere, NameMatch, require_srid

logger = logging.getLogger(__name__)

# PostgreSQL query_canceled, raised when statement_timeout fires
_PG_QUERY_CANCELED = "57014"


@dataclass(frozen=True)
class Record:
    name: Optional[str] = None
    location: Optional[Geometry] = None
    id: Optional[int] = None


# ---------------- ERRORS ----------------

def translate_error(error: SQLAlchemyError) -> Exception:
    """Map a SQLAlchemy error to the geoplaces taxonomy (or return it unchanged)."""
    detail = str(getattr(error, "orig", None) or error).strip()

    if isinstance(error, (IntegrityError, DataError)):
        return ConstraintViolation(detail)
    if isinstance(error, (OperationalError, InterfaceError, DisconnectionError)):
        if getattr(getattr(error, "orig", None), "pgcode", None) == _PG_QUERY_CANCELED:
            return StoreTimeout(detail)
        return StoreUnavailable(detail)
    return error


@contextmanager
def translate_errors():
    try:
        yield
    except SQLAlchemyError as e:
        translated = translate_error(e)
        if translated is e:
            raise
        logger.warning("Store error: %s", translated)
        raise translated from e


def _rollback(db):
    try:
        db.rollback()
    except SQLAlchemyError:
        logger.warning("Rollback failed", exc_info=True)


@contextmanager
def session_scope(session_factory, timeout_ms=None):
    """Session for one unit of work: commit on success, rollback otherwise, always close."""
    db = session_factory()
    try:
        with translate_errors():
            try:
                if timeout_ms and db.get_bind().dialect.name == "postgresql":
                    # SET does not take bind parameters; timeout_ms is an int
                    db.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))
                yield db
                db.commit()
            except BaseException:
                _rollback(db)
                raise
    finally:
        db.close()


# ---------------- STORE ----------------

class RecordStore:

    def __init__(self, engine, statement_timeout_ms=None):
        self.engine = engine
        self.srid = Place.__table__.c.location.type.srid
        self.statement_timeout_ms = (
            config.DB_STATEMENT_TIMEOUT_MS if statement_timeout_ms is None
            else statement_timeout_ms
        )
        self._session_factory = make_sessionmaker(engine)

    def _timeout_ms(self, timeout=None):
        if timeout is None:
            return self.statement_timeout_ms
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout!r}")
        return max(1, int(timeout * 1000))

    def _session(self, timeout=None):
        return session_scope(self._session_factory, self._timeout_ms(timeout))

    def _to_record(self, place: Place) -> Record:
        location = None
        if place.location is not None:
            location = codec.from_element(place.location, default_srid=self.srid)
        return Record(name=place.name, location=location, id=place.id)

    # ---------------- SCHEMA ----------------

    def ensure_schema(self, timeout=None):
        timeout_ms = self._timeout_ms(timeout)
        with translate_errors():
            init_db(self.engine, timeout_ms)

    def drop_schema(self, timeout=None):
        timeout_ms = self._timeout_ms(timeout)
        with translate_errors():
            drop_db(self.engine, timeout_ms)

    # ---------------- WRITES ----------------

    def insert_many(self, records: Iterable[Record], timeout=None) -> List[Record]:
        """Insert all records in one transaction and return them with ids assigned."""
        records = list(records)
        rows = []
        for record in records:
            if not isinstance(record, Record):
                raise TypeError(f"Expected Record, got {type(record).__name__}")
            if record.id is not None:
                raise ValueError(f"Record already has id {record.id}")

            location = None
            if record.location is not None:
                require_srid(record.location, self.srid)
                location = codec.to_element(record.location)
            rows.append(Place(name=record.name, location=location))

        if not rows:
            return []

        with self._session(timeout) as db:
            db.add_all(rows)
            db.flush()
            ids = [row.id for row in rows]

        logger.info("Inserted %d places (ids %s..%s)", len(ids), ids[0], ids[-1])
        return [replace(record, id=row_id) for record, row_id in zip(records, ids)]

    def update_one(self, record_id: int, new_location: Geometry, timeout=None) -> Record:
        require_srid(new_location, self.srid)

        with self._session(timeout) as db:
            place = db.get(Place, record_id)
            if place is None:
                raise NotFound(record_id)
            place.location = codec.to_element(new_location)
            db.flush()
            record = Record(name=place.name, location=new_location, id=place.id)

        logger.info("Updated location of place %s", record_id)
        return record

    def batch_update(self, id_greater_than: int, location: Geometry, name_suffix: str = "",
                     timeout=None) -> int:
        """Rewrite every row with id > threshold in one UPDATE. Returns the row count."""
        count = self.execute(BatchUpdate(id_greater_than, location, name_suffix), timeout=timeout)
        logger.info("Batch updated %d places with id > %s", count, id_greater_than)
        return count

    def delete_where(self, id_at_most: int, timeout=None) -> int:
        count = self.execute(DeleteWhere(id_at_most), timeout=timeout)
        logger.info("Deleted %d places with id <= %s", count, id_at_most)
        return count

    def execute(self, request, timeout=None) -> int:
        """Run a mutating request as one statement and return the affected row count."""
        with self._session(timeout) as db:
            result = db.execute(request.statement(self.srid))
            return result.rowcount

    # ---------------- READS ----------------

    def query(self, request, timeout=None) -> List[Record]:
        """Run a select-building request and decode its rows."""
        with self._session(timeout) as db:
            places = db.execute(request.statement(self.srid)).scalars().all()
            return [self._to_record(p) for p in places]

    def list_all(self, timeout=None) -> List[Record]:
        with self._session(timeout) as db:
            places = db.execute(select(Place).order_by(Place.id)).scalars().all()
            return [self._to_record(p) for p in places]

    def get(self, record_id: int, timeout=None) -> Record:
        with self._session(timeout) as db:
            place = db.get(Place, record_id)
            if place is None:
                raise NotFound(record_id)
            return self._to_record(place)

    def find_by_name(self, name: str, timeout=None) -> Optional[Record]:
        matches = self.query(NameMatch(name, limit=1), timeout=timeout)
        return matches[0] if matches else None

    def search_name(self, fragment: str, timeout=None) -> List[Record]:
        return self.query(NameMatch(fragment, exact=False), timeout=timeout)
