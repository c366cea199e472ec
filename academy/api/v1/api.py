# Fichier: academy/api/v1/api.py
from fastapi import APIRouter

from .endpoints import admin_router, formation_router, progress_router, user_router

api_router = APIRouter()

api_router.include_router(user_router.router, prefix="/users", tags=["Users"])
api_router.include_router(formation_router.router, prefix="/formations", tags=["Formations"])
api_router.include_router(progress_router.router, prefix="/progress", tags=["Progress"])
api_router.include_router(admin_router.router, prefix="/admin", tags=["Admin"])
