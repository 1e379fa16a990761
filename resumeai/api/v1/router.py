from fastapi import APIRouter

from resumeai.api.v1.ai import router as ai_router
from resumeai.api.v1.resume import router as resume_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(resume_router)
api_v1_router.include_router(ai_router)
