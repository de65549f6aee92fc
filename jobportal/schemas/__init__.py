"""
Schemas module - Request/Response schemas for API endpoints.

Usage:
    from jobportal.schemas.schemas import RegisterRequest, TokenResponse
"""
