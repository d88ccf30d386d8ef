from fastapi import APIRouter

from hdnotes.features.auth.routes.auth import router as auth_router
from hdnotes.features.health.routes.health import router as health_router
from hdnotes.features.notes.routes.notes import router as notes_router

api_router = APIRouter()

# Register all feature routes
api_router.include_router(auth_router)
api_router.include_router(notes_router)
api_router.include_router(health_router)
