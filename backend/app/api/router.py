"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from app.api.routes import journal, cores, settings

api_router = APIRouter()

# Include all route modules
api_router.include_router(journal.router)
api_router.include_router(cores.router)
api_router.include_router(settings.router)
