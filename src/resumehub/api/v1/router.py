from fastapi import APIRouter

from resumehub.api.v1 import admin, health, resumes

api_v1_router = APIRouter()
api_v1_router.include_router(health.router)
api_v1_router.include_router(resumes.router)
api_v1_router.include_router(admin.router)
