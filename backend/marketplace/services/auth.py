import logging

from jose import JWTError
from sqlalchemy.orm import Session

from marketplace.core.config import get_settings
from marketplace.core.errors import AuthenticationError, PermissionDeniedError, ValidationError
from marketplace.core.security import (
    ACCESS_TOKEN_TYPE,
    RESET_TOKEN_TYPE,
    create_access_token,
    create_reset_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from marketplace.models.user import User, UserRole
from marketplace.schemas.auth import RegisterRequest
from marketplace.services.email import send_email
from marketplace.services.users import create_user, ensure_password

logger = logging.getLogger(__name__)

WRONG_CREDENTIALS = "Wrong credentials!"
INVALID_TOKEN = "Token is not valid"


def parse_signup_role(value: str | None) -> UserRole:
    if not value:
        return UserRole.USER
    try:
        role = UserRole(value.strip().upper())
    except ValueError:
        return UserRole.USER
    if role == UserRole.ADMIN:
        raise PermissionDeniedError("Admin accounts must be created by an administrator")
    return role


def register(db: Session, payload: RegisterRequest) -> User:
    role = parse_signup_role(payload.role)
    return create_user(
        db,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=payload.password,
        phone=payload.phone,
        role=role,
    )


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    # Same message for unknown email and bad password.
    if not user or not verify_password(password, user.hashed_password):
        logger.info("Failed login attempt")
        raise AuthenticationError(WRONG_CREDENTIALS)
    if not user.is_active:
        raise PermissionDeniedError("User inactive")
    return user


def issue_access_token(user: User) -> str:
    return create_access_token(user.email, user.id, user.session_version)


def _decode(token: str, expected_type: str) -> dict:
    try:
        claims = decode_token(token)
    except JWTError:
        raise PermissionDeniedError(INVALID_TOKEN)
    if claims.get("typ") != expected_type:
        raise PermissionDeniedError(INVALID_TOKEN)
    return claims


def _user_from_claims(db: Session, claims: dict) -> User:
    user_id = claims.get("userId")
    if user_id is not None:
        user = db.query(User).filter(User.id == int(user_id)).first()
    else:
        user = db.query(User).filter(User.email == claims.get("sub")).first()
    if not user:
        raise AuthenticationError("User not found")
    sv = claims.get("sv")
    if sv is not None and user.session_version != int(sv):
        raise AuthenticationError("Session revoked")
    return user


def resolve_access_token(db: Session, token: str) -> User:
    user = _user_from_claims(db, _decode(token, ACCESS_TOKEN_TYPE))
    if not user.is_active:
        raise PermissionDeniedError("User inactive")
    return user


def refresh_access_token(db: Session, token: str | None) -> tuple[User, str]:
    if not token:
        raise AuthenticationError("Authentication token is required")
    user = resolve_access_token(db, token)
    return user, issue_access_token(user)


def request_password_reset(db: Session, email: str) -> str | None:
    """Hand a reset link to the mailer. Returns the link outside production for manual testing."""
    settings = get_settings()
    user = db.query(User).filter(User.email == email.strip().lower()).first()

    # Always succeed to avoid user enumeration.
    if not user or not user.is_active:
        return None

    token = create_reset_token(user.email, user.id, user.session_version)
    reset_url = f"{settings.FRONTEND_URL}/reset-password?token={token}"
    body = (
        "You requested a password reset.\n\n"
        f"Reset link (expires in {settings.PASSWORD_RESET_TOKEN_TTL_MINUTES} minutes):\n{reset_url}\n\n"
        "If you did not request this, you can ignore this email."
    )
    try:
        send_email(user.email, "Reset your password", body)
    except OSError:
        # Do not leak SMTP details to the client.
        logger.exception("Password reset email failed for user id=%s", user.id)

    if settings.is_production:
        return None
    return reset_url


def reset_password(db: Session, token: str, new_password: str) -> User:
    ensure_password(new_password)
    try:
        claims = _decode(token, RESET_TOKEN_TYPE)
        user = _user_from_claims(db, claims)
    except (PermissionDeniedError, AuthenticationError):
        raise ValidationError("Invalid or expired token")

    user.hashed_password = get_password_hash(new_password)
    user.session_version += 1
    db.commit()
    db.refresh(user)
    logger.info("Password reset completed for user id=%s", user.id)
    return user
