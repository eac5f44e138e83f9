"""
Page Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from foresty.api.routes.public_routes import router as public_router
from foresty.api.routes.auth_routes import router as auth_router
from foresty.api.routes.job_routes import router as job_router
from foresty.api.routes.profile_routes import router as profile_router
from foresty.api.routes.feedback_routes import router as feedback_router
from foresty.api.routes.admin_routes import router as admin_router

# Main page router
page_router = APIRouter()

# Include all sub-routers
page_router.include_router(public_router)
page_router.include_router(auth_router)
page_router.include_router(job_router)
page_router.include_router(profile_router)
page_router.include_router(feedback_router)
page_router.include_router(admin_router)
