"""
Authentication Routes

POST /auth/register - Register veteran or employer account
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
POST /auth/forgot-password - Email a password reset link
PUT /auth/reset-password/{token} - Set a new password with a reset token
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, Request
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.auth import (
    hash_password, verify_password, create_access_token, get_current_user,
    generate_reset_token, hash_reset_token
)
from app.core.config import get_settings
from app.core.rate_limit import limiter
from app.services.mongo_service import UserService, CompanyService
from app.utils.email import send_email, EmailDeliveryError
from app.schemas.schemas import (
    RegisterRequest, LoginRequest, AuthResponse, UserResponse, UserRole,
    ForgotPasswordRequest, ResetPasswordRequest, ResetPasswordResponse, MessageResponse
)

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(user: dict) -> AuthResponse:
    return AuthResponse(
        id=user["id"],
        first_name=user["first_name"],
        last_name=user["last_name"],
        email=user["email"],
        role=user["role"],
        company_id=user.get("company_id"),
        token=create_access_token(user["id"]),
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit(settings.auth_rate_limit)
async def register(request: Request, payload: RegisterRequest):
    """
    Register a new account and log it in.

    - Veterans must give their military branch
    - Employers must give a company name; a company record is created and linked
    """
    if not payload.terms_accepted:
        raise HTTPException(status_code=400, detail="You must accept the terms and conditions")
    if payload.role == UserRole.veteran and not payload.military_branch:
        raise HTTPException(status_code=400, detail="Military branch is required for veterans")
    if payload.role == UserRole.employer and not payload.company_name:
        raise HTTPException(status_code=400, detail="Company name is required for employers")

    users = UserService()
    if users.get_by_email(payload.email):
        raise HTTPException(status_code=400, detail="User already exists")

    data = payload.model_dump(exclude={"password"})
    data["role"] = payload.role.value
    try:
        user = users.insert(data, hash_password(payload.password))
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists")

    if payload.role == UserRole.employer:
        # Registration still succeeds if the company record cannot be created
        try:
            company = CompanyService().insert({
                "name": payload.company_name,
                "website": payload.company_website,
                "industry": "Unspecified",
                "verified": False,
            })
            user = users.update(user["id"], {"company_id": company["id"]}) or user
        except PyMongoError as e:
            logger.error("Company creation failed during registration of %s: %s", user["id"], e)

    logger.info("Registered %s account %s", user["role"], user["id"])
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.auth_rate_limit)
async def login(request: Request, payload: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = UserService().get_by_email(payload.email, include_secrets=True)

    if not user or not verify_password(payload.password, user.get("password_hash")):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current user info."""
    return UserResponse(**user)


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(settings.auth_rate_limit)
async def forgot_password(request: Request, payload: ForgotPasswordRequest):
    """
    Email a password reset link valid for a few minutes.

    Only the SHA-256 hash of the token is stored.
    """
    users = UserService()
    user = users.get_by_email(payload.email)
    if not user:
        raise HTTPException(status_code=404, detail="There is no user with that email")

    token, token_hash, expires_at = generate_reset_token()
    users.set_reset_token(user["id"], token_hash, expires_at)

    reset_url = f"{settings.frontend_url}/reset-password/{token}"
    body = (
        "You are receiving this email because you (or someone else) has requested "
        "the reset of a password.\n\n"
        f"Please open the following link to reset your password:\n\n{reset_url}\n\n"
        f"The link expires in {settings.reset_token_expire_minutes} minutes."
    )

    try:
        send_email(user["email"], "Password reset token", body)
    except EmailDeliveryError as e:
        logger.error("Password reset email to %s failed: %s", user["email"], e)
        users.clear_reset_token(user["id"])
        raise HTTPException(status_code=500, detail="Email could not be sent")

    return MessageResponse(message="Email sent")


@router.put("/reset-password/{token}", response_model=ResetPasswordResponse)
@limiter.limit(settings.auth_rate_limit)
async def reset_password(request: Request, token: str, payload: ResetPasswordRequest):
    """Set a new password using the emailed token and log the user in."""
    users = UserService()
    user = users.get_by_reset_token(hash_reset_token(token))
    if not user:
        raise HTTPException(status_code=400, detail="Invalid token")

    users.set_password(user["id"], hash_password(payload.password))
    logger.info("Password reset for user %s", user["id"])

    return ResetPasswordResponse(success=True, token=create_access_token(user["id"]))
