# geoplaces/db.py
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from geoplaces import config
from geoplaces.errors import StoreUnavailable


def make_engine(url=None, echo=None):
    url = url or config.DATABASE_URL
    if not url:
        raise StoreUnavailable("DATABASE_URL is not set")

    options = {
        "echo": config.DB_ECHO if echo is None else echo,
        "pool_pre_ping": True,
    }
    if not url.startswith("sqlite"):
        options["pool_size"] = config.DB_POOL_SIZE
        options["max_overflow"] = config.DB_MAX_OVERFLOW

    return create_engine(url, **options)


def make_sessionmaker(engine):
    return sessionmaker(
        autoflush=False,
        expire_on_commit=False,
        bind=engine
    )


@lru_cache()
def get_engine():
    """Process-wide engine for the configured DATABASE_URL."""
    return make_engine()
