"""API router for v1 endpoints."""

from fastapi import APIRouter

from gap_engine.api import analyze, meta, rooms

router = APIRouter()

# Rooms and answer submission
router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])

# Stateless analysis
router.include_router(analyze.router, tags=["analyze"])

# Question catalog and diagnostics
router.include_router(meta.router, tags=["meta"])
