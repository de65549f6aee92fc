"""
Job Portal - Main Application

FastAPI backend with:
- PostgreSQL for all data (raw SQL through SQLAlchemy)
- JWT authentication (candidate / recruiter / admin)
- Static content pages

Run: uvicorn jobportal.main:app --reload --port 5000
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobportal.api.routes import api_router
from jobportal.core.config import get_settings
from jobportal.core.logging_config import setup_logging
from jobportal.db.postgres import test_postgres_connection

settings = get_settings()
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Job Portal API",
    description="""
    Conventional job portal backend.

    ## Features
    - **Authentication**: JWT-based auth for candidates, recruiters and admins
    - **Jobs**: Search, filter, post and apply to jobs
    - **Applications**: Track and move applications through the hiring pipeline
    - **Resumes**: Templates and structured resumes with skills
    - **Referrals & payments**: Job referrals and admin-kept payment records
    - **Admin**: Dashboard counts and pipeline analytics
    - **Content**: Blogs, salary guide, pricing and policy pages
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Job Portal API"}


@app.get("/health", tags=["Health"])
@app.get("/api/health", tags=["Health"], include_in_schema=False)
async def health_check():
    """Detailed health check."""
    connected = test_postgres_connection()
    return {
        "status": "healthy" if connected else "degraded",
        "postgres": "connected" if connected else "disconnected",
        "environment": "development" if settings.debug else "production",
    }
