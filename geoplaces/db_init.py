# geoplaces/db_init.py
import logging

from sqlalchemy import text

from geoplaces.db_base import Base

# Import ALL models so SQLAlchemy registers them
from geoplaces.models.place import Place  # noqa: F401

logger = logging.getLogger(__name__)


def _set_timeout(conn, timeout_ms):
    if timeout_ms and conn.dialect.name == "postgresql":
        conn.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))


def init_db(engine, timeout_ms=None):
    """Create missing tables (and the PostGIS extension on PostgreSQL)."""
    with engine.begin() as conn:
        _set_timeout(conn, timeout_ms)
        if conn.dialect.name == "postgresql":
            conn.execute(text("CREATE EXTENSION IF NOT EXISTS postgis"))
        Base.metadata.create_all(bind=conn)
    logger.info("Schema ready: %s", ", ".join(sorted(Base.metadata.tables)))


def drop_db(engine, timeout_ms=None):
    with engine.begin() as conn:
        _set_timeout(conn, timeout_ms)
        Base.metadata.drop_all(bind=conn)
    logger.info("Schema dropped")
