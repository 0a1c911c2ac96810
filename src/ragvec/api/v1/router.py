from fastapi import APIRouter

from ragvec.api.v1 import ai, documents, health

api_v1_router = APIRouter()
api_v1_router.include_router(health.router)
api_v1_router.include_router(documents.router)
api_v1_router.include_router(ai.router)
