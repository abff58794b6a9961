"""
API v1 routes.
"""

from fastapi import APIRouter

from lessoncore.api.v1 import admin, checkpoints, lessons

router = APIRouter()

router.include_router(lessons.router, prefix="/lessons", tags=["Lessons"])
router.include_router(checkpoints.router, prefix="/checkpoints", tags=["Checkpoints"])
router.include_router(admin.router, prefix="/admin", tags=["Admin"])
