from fastapi import APIRouter

from app.api.v1 import analysis, roadmap

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(analysis.router)
api_router.include_router(roadmap.router)
