"""
API Routes
"""

from fastapi import APIRouter

from .projects import router as projects_router
from .sessions import router as sessions_router
from .analysis import router as analysis_router
from .ingest import router as ingest_router

api_router = APIRouter()

api_router.include_router(projects_router, prefix="/projects", tags=["Projects"])
api_router.include_router(sessions_router, prefix="/sessions", tags=["Sessions"])
api_router.include_router(analysis_router, prefix="/analysis", tags=["Analysis"])
api_router.include_router(ingest_router, prefix="/ingest", tags=["Ingest"])
