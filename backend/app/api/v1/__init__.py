"""Test Planner - API v1 Router."""
from fastapi import APIRouter

from app.api.v1.auth import router as auth_router
from app.api.v1.curriculum import router as curriculum_router
from app.api.v1.questions import router as questions_router
from app.api.v1.test_plans import router as test_plans_router
from app.api.v1.executions import router as executions_router

api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(curriculum_router)
api_router.include_router(questions_router)
api_router.include_router(test_plans_router)
api_router.include_router(executions_router)
