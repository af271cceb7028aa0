from fastapi import APIRouter

from markboard.api.routes import health, marks, push

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(marks.router, prefix="/marks", tags=["marks"])
api_router.include_router(push.router, prefix="/push", tags=["push"])
