from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import CurrentUser, get_current_user_optional
from core.config import get_settings
from core.database import get_db, get_db_transactional
from core.rate_limit import limiter
from models.user import User
from schemas.auth import (
    AdminRegisterRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    SessionResponse,
    SessionUser,
)
from schemas.user import UserResponse
from services.auth_service import AuthService, UserSession

router = APIRouter()
settings = get_settings()


def _session_user(session: UserSession) -> SessionUser:
    base = UserResponse.model_validate(session.user).model_dump()
    return SessionUser(**base, roles=session.roles, is_admin=session.is_admin)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,  # Required by slowapi for rate limiting (extracts remote address)
    response: Response,
    credentials: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    """
    Verify credentials and open a session.

    The token is set as an httpOnly cookie and also returned in the body
    for clients that prefer the Authorization header.
    """
    result = await AuthService(db).login(credentials.email, credentials.password)

    response.set_cookie(
        key=settings.auth_cookie_name,
        value=result.access_token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.access_token_expire_days * 24 * 60 * 60,
        path="/",
    )
    return LoginResponse(
        user=_session_user(result.session),
        access_token=result.access_token,
        redirect_url=result.session.redirect_url,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    response.delete_cookie(key=settings.auth_cookie_name, path="/")
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=SessionUser)
async def me(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Current principal with role names"""
    return _session_user(await AuthService(db).describe(current_user))


@router.get("/session", response_model=SessionResponse)
async def session(
    user: Annotated[User | None, Depends(get_current_user_optional)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Like /me but answers {"user": null} instead of 401"""
    if user is None:
        return SessionResponse(user=None)
    return SessionResponse(user=_session_user(await AuthService(db).describe(user)))


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    user = await AuthService(db).register(data.name, data.email, data.password)
    return UserResponse.model_validate(user)


@router.post("/admin-register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def admin_register(
    data: AdminRegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    """Create an administrator; requires the configured admin secret key"""
    user = await AuthService(db).register_admin(
        data.name, data.email, data.password, data.secret_key
    )
    return UserResponse.model_validate(user)


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(settings.login_rate_limit)
async def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    message = await AuthService(db).forgot_password(data.email)
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    data: ResetPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
):
    await AuthService(db).reset_password(data.token, data.password)
    return MessageResponse(message="Password has been reset successfully")
