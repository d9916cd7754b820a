# geoplaces/routers/health.py
from fastapi import APIRouter

from geoplaces import config

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok", "srid": config.PLACES_SRID}
