"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification (JWT_SECRET, JWT_EXPIRE)
- FastAPI dependencies for protected routes:
    protect          -> signed-in, active user (401 otherwise)
    optional_auth    -> user or None, never fails
    authorize(*roles)-> protect + role check (403 otherwise)
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import text

from jobportal.core.config import get_settings
from jobportal.db.postgres import get_db_session

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor; missing tokens are handled here so they map to 401
bearer_scheme = HTTPBearer(auto_error=False)

USER_COLUMNS = "id, first_name, last_name, email, role, phone, is_active, created_at"


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def load_user(user_id: int) -> Optional[dict]:
    """User row as a dict (no password hash), or None."""
    with get_db_session() as db:
        result = db.execute(
            text(f"SELECT {USER_COLUMNS} FROM users WHERE id = :id"),
            {"id": user_id}
        )
        row = result.mappings().fetchone()
    return dict(row) if row else None


def _user_from_token(token: str) -> Optional[dict]:
    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        return None
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return None
    return load_user(user_id)


async def protect(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(protect)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authorized to access this route",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    user = _user_from_token(credentials.credentials)
    if not user:
        raise credentials_exception

    if not user["is_active"]:
        raise HTTPException(status_code=401, detail="User account is deactivated")

    return user


async def optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[dict]:
    """Dependency - Current user when a valid token is sent, None otherwise."""
    if credentials is None:
        return None
    user = _user_from_token(credentials.credentials)
    if user and user["is_active"]:
        return user
    logger.info("Ignoring invalid token on public route")
    return None


def authorize(*roles: str):
    """Dependency factory - Require one of the given roles."""
    async def dependency(user: dict = Depends(protect)) -> dict:
        if user["role"] not in roles:
            raise HTTPException(
                status_code=403,
                detail=f"User role '{user['role']}' is not authorized to access this route"
            )
        return user
    return dependency
