# geoplaces/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from geoplaces import config
from geoplaces.errors import (
    ConstraintViolation,
    InvalidGeometry,
    MalformedGeometry,
    NotFound,
    StoreUnavailable,
)
from geoplaces.logging_config import setup_logging
from geoplaces.routers import health, places

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Create tables on startup
    if config.DATABASE_URL:
        places.get_store().ensure_schema()
    else:
        logger.warning("DATABASE_URL is not set; schema was not checked")
    yield


app = FastAPI(title="GeoPlaces API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=False,  # Must be False when allow_origins is "*"
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# ---------------- ERROR MAPPING ----------------

def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(NotFound)
def not_found_handler(request: Request, exc: NotFound):
    return _error(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(InvalidGeometry)
@app.exception_handler(MalformedGeometry)
@app.exception_handler(ConstraintViolation)
def unprocessable_handler(request: Request, exc: Exception):
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


@app.exception_handler(StoreUnavailable)
def unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error("Store unavailable: %s", exc)
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, exc)


# Routers
app.include_router(health.router)
app.include_router(places.router)


@app.get("/")
def root():
    return {"status": "ok"}
