from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from marketplace.core.config import get_settings

pwd_context = CryptContext(schemes=["argon2", "bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
RESET_TOKEN_TYPE = "reset"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def validate_password_strength(password: str) -> bool:
    return bool(password) and len(password) >= get_settings().PASSWORD_MIN_LENGTH


def _token_payload(email: str, user_id: int, session_version: int, token_type: str) -> dict:
    return {
        "sub": email,
        "userId": user_id,
        "sv": session_version,
        "typ": token_type,
        "iat": datetime.now(timezone.utc),
    }


def create_access_token(
    email: str, user_id: int, session_version: int, expires_delta: timedelta | None = None
) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    payload = _token_payload(email, user_id, session_version, ACCESS_TOKEN_TYPE)
    payload["exp"] = expire
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_reset_token(email: str, user_id: int, session_version: int) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_TTL_MINUTES)
    payload = _token_payload(email, user_id, session_version, RESET_TOKEN_TYPE)
    payload["exp"] = expire
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Verify signature and expiry; raises ``jose.JWTError`` otherwise."""
    settings = get_settings()
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def extract_token(authorization: str | None, cookie_token: str | None) -> str | None:
    # Bearer header wins over the cookie everywhere.
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()
    if cookie_token:
        return cookie_token
    return None
