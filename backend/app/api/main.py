from fastapi import APIRouter

from app.api.routes import health, pm_schedules

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(pm_schedules.router)
