from fastapi import APIRouter, Depends, Query, Request, Response, status
from pydantic import EmailStr
from sqlalchemy.orm import Session

from marketplace.core.config import get_settings
from marketplace.core.database import get_db
from marketplace.core.deps import get_current_user, get_token
from marketplace.core.rate_limit import limiter
from marketplace.models.user import User
from marketplace.schemas.auth import ForgotPasswordResponse, LoginRequest, RegisterRequest
from marketplace.schemas.common import ApiResponse, ok
from marketplace.schemas.user import UserResponse
from marketplace.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


def set_auth_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        settings.ACCESS_COOKIE_NAME,
        token,
        max_age=settings.COOKIE_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )


def clear_auth_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        settings.ACCESS_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def register(request: Request, response: Response, payload: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register(db, payload)
    token = auth_service.issue_access_token(user)
    set_auth_cookie(response, token)
    return ok(UserResponse.model_validate(user), "User registered successfully", access_token=token)


@router.post("/login", response_model=ApiResponse[UserResponse])
@limiter.limit("20/minute")
def login(request: Request, response: Response, payload: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, payload.email, payload.password)
    token = auth_service.issue_access_token(user)
    set_auth_cookie(response, token)
    return ok(UserResponse.model_validate(user), "Login successful", access_token=token)


@router.post("/logout", response_model=ApiResponse[None])
def logout(response: Response):
    clear_auth_cookie(response)
    return ok(message="User has been logged out!")


@router.post("/refresh-token", response_model=ApiResponse[str])
def refresh_token(
    response: Response,
    token: str | None = Query(default=None),
    current_token: str | None = Depends(get_token),
    db: Session = Depends(get_db),
):
    _, new_token = auth_service.refresh_access_token(db, token or current_token)
    set_auth_cookie(response, new_token)
    return ok(new_token, "Token refreshed successfully", access_token=new_token)


@router.post("/forgot-password", response_model=ApiResponse[ForgotPasswordResponse])
@limiter.limit("5/minute")
def forgot_password(request: Request, email: EmailStr = Query(...), db: Session = Depends(get_db)):
    reset_url = auth_service.request_password_reset(db, email)
    return ok(
        ForgotPasswordResponse(debug_reset_url=reset_url),
        "If an account exists for this email, a reset link has been sent",
    )


@router.post("/reset-password", response_model=ApiResponse[None])
def reset_password(
    token: str = Query(...),
    new_password: str = Query(..., alias="newPassword"),
    db: Session = Depends(get_db),
):
    auth_service.reset_password(db, token, new_password)
    return ok(message="Password has been reset successfully")


@router.get("/current-user", response_model=ApiResponse[UserResponse])
def current_user(user: User = Depends(get_current_user)):
    return ok(UserResponse.model_validate(user), "Current user retrieved successfully")
