"""
Authentication Routes

POST /auth/register - Register new user, returns token + user
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
PUT /auth/profile - Update name / phone of current user
"""

import logging

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.exc import IntegrityError

from jobportal.db.postgres import execute_raw_sql
from jobportal.core.auth import (
    USER_COLUMNS, hash_password, verify_password, create_access_token, protect
)
from jobportal.core.validation import (
    FormValidator, create_login_validator, create_signup_validator, name, phone, raise_for_errors
)
from jobportal.schemas.schemas import (
    RegisterRequest, LoginRequest, ProfileUpdate, TokenResponse, UserResponse, UserRole
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

DUPLICATE_EMAIL = "User with this email already exists"


def _token_response(user: dict) -> TokenResponse:
    token = create_access_token(data={"sub": str(user["id"]), "role": user["role"]})
    return TokenResponse(access_token=token, user=UserResponse(**user))


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new candidate or recruiter account.

    Admin accounts are created with scripts/create_admin.py only.
    """
    # Terms are accepted in the client form, not re-sent to the API
    raise_for_errors(create_signup_validator(require_terms=False), request.model_dump())

    if request.role == UserRole.admin:
        raise HTTPException(status_code=403, detail="Admin accounts cannot be self-registered")

    email = request.email.strip().lower()
    if execute_raw_sql("SELECT id FROM users WHERE email = :email", {"email": email}):
        raise HTTPException(status_code=400, detail=DUPLICATE_EMAIL)

    try:
        rows = execute_raw_sql(
            f"""
                INSERT INTO users (first_name, last_name, email, password_hash, role, phone, last_login)
                VALUES (:first_name, :last_name, :email, :password_hash, :role, :phone, CURRENT_TIMESTAMP)
                RETURNING {USER_COLUMNS}
            """,
            {
                "first_name": request.first_name.strip(),
                "last_name": request.last_name.strip(),
                "email": email,
                "password_hash": hash_password(request.password),
                "role": request.role.value,
                "phone": request.phone or None,
            }
        )
    except IntegrityError:
        # Lost a race with a concurrent sign-up for the same email
        raise HTTPException(status_code=400, detail=DUPLICATE_EMAIL)

    logger.info("Registered user %s as %s", rows[0]["id"], request.role.value)
    return _token_response(rows[0])


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    raise_for_errors(create_login_validator(), request.model_dump())

    rows = execute_raw_sql(
        f"SELECT {USER_COLUMNS}, password_hash FROM users WHERE email = :email",
        {"email": request.email.strip().lower()}
    )
    if not rows:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user = rows[0]
    if not user["is_active"]:
        raise HTTPException(status_code=401, detail="Account is deactivated. Please contact support.")

    if not verify_password(request.password, user.pop("password_hash")):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    execute_raw_sql(
        "UPDATE users SET last_login = CURRENT_TIMESTAMP WHERE id = :id RETURNING id",
        {"id": user["id"]}
    )
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(protect)):
    """Get current authenticated user's info."""
    return UserResponse(**user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(update: ProfileUpdate, user: dict = Depends(protect)):
    """Update the current user's name and phone. Omitted fields are kept."""
    changes = update.model_dump(exclude_unset=True, exclude_none=True)

    validator = (
        FormValidator()
        .field("first_name", name)
        .field("last_name", name)
        .field("phone", phone)
    )
    raise_for_errors(validator, changes)

    if not changes:
        return UserResponse(**user)

    assignments = ", ".join(f"{column} = :{column}" for column in changes)
    rows = execute_raw_sql(
        f"""
            UPDATE users SET {assignments}, updated_at = CURRENT_TIMESTAMP
            WHERE id = :id
            RETURNING {USER_COLUMNS}
        """,
        {**changes, "id": user["id"]}
    )
    return UserResponse(**rows[0])
