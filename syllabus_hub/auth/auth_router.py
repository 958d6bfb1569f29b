from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub import config
from syllabus_hub.auth import auth_service as service
from syllabus_hub.auth.auth_schemas import (
    LoginRequest, RefreshRequest, RegisterRequest, ResendVerificationRequest
)
from syllabus_hub.auth.tokens import ACCESS, REFRESH, token_max_age
from syllabus_hub.database import get_db
from syllabus_hub.dependencies import ACCESS_COOKIE, REFRESH_COOKIE, UserContext, get_current_user
from syllabus_hub.errors import AuthError
from syllabus_hub.limiter import AUTH_LIMIT, limiter

router = APIRouter(prefix="/auth", tags=["Auth"])


def set_auth_cookies(response: Response, tokens: dict):
    for cookie, token_type, key in (
        (ACCESS_COOKIE, ACCESS, "access_token"),
        (REFRESH_COOKIE, REFRESH, "refresh_token"),
    ):
        response.set_cookie(
            cookie,
            tokens[key],
            max_age=token_max_age(token_type),
            httponly=True,
            secure=config.COOKIE_SECURE,
            samesite="strict",
        )


def clear_auth_cookies(response: Response):
    for cookie in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(cookie, httponly=True, secure=config.COOKIE_SECURE, samesite="strict")

# ==================== ACCOUNT ====================

@router.post("/register", status_code=201)
@limiter.limit(AUTH_LIMIT)
async def register(
    request: Request,
    response: Response,
    data: RegisterRequest,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Create an account and sign in"""
    result = await service.register(db, data.name, data.email, data.password)
    set_auth_cookies(response, result)
    return result

@router.post("/login")
@limiter.limit(AUTH_LIMIT)
async def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    result = await service.login(db, data.email, data.password)
    set_auth_cookies(response, result)
    return result

@router.post("/refresh")
@limiter.limit(AUTH_LIMIT)
async def refresh(
    request: Request,
    response: Response,
    data: Optional[RefreshRequest] = None,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Issue a new token pair. The refresh token is read from the body or,
    failing that, from the refreshToken cookie.
    """
    token = (data.refresh_token if data else None) or request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise AuthError("Refresh token required")
    tokens = await service.refresh(db, token)
    set_auth_cookies(response, tokens)
    return tokens

@router.post("/logout")
async def logout(response: Response):
    clear_auth_cookies(response)
    return {"message": "Logged out successfully"}

@router.get("/me")
async def me(user: UserContext = Depends(get_current_user)):
    return {"user": {"_id": user.user_id, "email": user.email, "role": user.role}}

# ==================== EMAIL VERIFICATION ====================

@router.get("/verify-email/{token}")
async def verify_email(token: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.verify_email(db, token)

@router.post("/resend-verification")
@limiter.limit(AUTH_LIMIT)
async def resend_verification(
    request: Request,
    data: ResendVerificationRequest,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.resend_verification(db, data.email)
