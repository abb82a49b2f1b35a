from fastapi import APIRouter

from .groups import router as groups_router
from .activity import router as activity_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(groups_router, prefix="/groups", tags=["groups"])
api_router.include_router(activity_router, prefix="/activity-feed", tags=["activity"])
