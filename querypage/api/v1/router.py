"""
Main API router for v1 endpoints.
"""
from fastapi import APIRouter

from . import cats

router = APIRouter()

router.include_router(cats.router, prefix="/cats", tags=["cats"])
