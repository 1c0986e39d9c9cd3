from fastapi import Depends
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from marketplace.core.config import get_settings
from marketplace.core.database import get_db
from marketplace.core.errors import AuthenticationError, MarketplaceError, PermissionDeniedError
from marketplace.core.security import extract_token
from marketplace.models.user import User, UserRole
from marketplace.services.auth import resolve_access_token

bearer_scheme = HTTPBearer(auto_error=False)
cookie_scheme = APIKeyCookie(name=get_settings().ACCESS_COOKIE_NAME, auto_error=False)


def get_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    cookie_token: str | None = Depends(cookie_scheme),
) -> str | None:
    header = f"{credentials.scheme} {credentials.credentials}" if credentials else None
    return extract_token(header, cookie_token)


def get_current_user(db: Session = Depends(get_db), token: str | None = Depends(get_token)) -> User:
    if not token:
        raise AuthenticationError("Authentication token is required")
    return resolve_access_token(db, token)


def get_optional_user(db: Session = Depends(get_db), token: str | None = Depends(get_token)) -> User | None:
    # Anonymous callers and stale tokens are both treated as guests.
    if not token:
        return None
    try:
        return resolve_access_token(db, token)
    except MarketplaceError:
        return None


def require_roles(*roles: UserRole):
    def role_dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise PermissionDeniedError("Insufficient permissions")
        return current_user

    return role_dependency
