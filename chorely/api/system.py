"""Health and server info endpoints."""

from fastapi import APIRouter

from chorely import __version__
from chorely.config import settings

router = APIRouter(tags=["system"])


@router.get("/health")
def health():
    return {"status": "ok", "name": settings.server_name, "version": __version__}
