"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as auth_router
from app.api.routes.user_routes import router as user_router
from app.api.routes.company_routes import router as company_router
from app.api.routes.job_routes import router as job_router
from app.api.routes.application_routes import router as application_router
from app.api.routes.message_routes import router as message_router
from app.api.routes.resume_routes import router as resume_router
from app.api.routes.story_routes import router as story_router
from app.api.routes.partner_routes import router as partner_router
from app.api.routes.saved_candidate_routes import router as saved_candidate_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(company_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(message_router)
api_router.include_router(resume_router)
api_router.include_router(story_router)
api_router.include_router(partner_router)
api_router.include_router(saved_candidate_router)
