"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from jobportal.api.routes.auth_routes import router as auth_router
from jobportal.api.routes.job_routes import router as job_router
from jobportal.api.routes.application_routes import router as application_router
from jobportal.api.routes.company_routes import router as company_router
from jobportal.api.routes.resume_routes import router as resume_router
from jobportal.api.routes.referral_routes import router as referral_router
from jobportal.api.routes.payment_routes import router as payment_router
from jobportal.api.routes.admin_routes import router as admin_router
from jobportal.api.routes.content_routes import router as content_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(company_router)
api_router.include_router(resume_router)
api_router.include_router(referral_router)
api_router.include_router(payment_router)
api_router.include_router(admin_router)
api_router.include_router(content_router)
