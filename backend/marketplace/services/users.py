import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.core.config import get_settings
from marketplace.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from marketplace.core.security import get_password_hash, validate_password_strength
from marketplace.models.listing import Listing, ListingStatus
from marketplace.models.user import User, UserRole
from marketplace.schemas.user import UserUpdate

logger = logging.getLogger(__name__)


def display_username(first_name: str | None, last_name: str | None) -> str:
    return f"{(first_name or '').strip()} {(last_name or '').strip()}".strip()


def ensure_self_or_admin(actor: User, user_id: int) -> None:
    if actor.id != user_id and actor.role != UserRole.ADMIN:
        raise PermissionDeniedError("You can only access your own account")


def ensure_password(password: str) -> None:
    if not validate_password_strength(password):
        raise ValidationError(
            f"Password must be at least {get_settings().PASSWORD_MIN_LENGTH} characters long"
        )


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError(f"User not found with id: {user_id}")
    return user


def get_user_by_email(db: Session, email: str) -> User:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        raise NotFoundError(f"User not found with email: {email}")
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def create_user(
    db: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    phone: str | None = None,
    role: UserRole = UserRole.USER,
) -> User:
    email = email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("User with this email already exists")
    ensure_password(password)

    user = User(
        username=display_username(first_name, last_name) or email,
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=email,
        hashed_password=get_password_hash(password),
        phone=phone,
        role=role,
        is_active=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent registration won the unique email index.
        db.rollback()
        raise ConflictError("User with this email already exists")
    db.refresh(user)
    logger.info("Created %s user id=%s", role.value, user.id)
    return user


def update_user(db: Session, user_id: int, payload: UserUpdate, actor: User) -> User:
    ensure_self_or_admin(actor, user_id)
    user = get_user(db, user_id)

    changes = payload.model_dump(exclude_none=True)
    if "email" in changes:
        email = changes.pop("email").strip().lower()
        if email != user.email:
            if db.query(User).filter(User.email == email, User.id != user.id).first():
                raise ConflictError("User with this email already exists")
            user.email = email
    for field, value in changes.items():
        setattr(user, field, value)
    if "first_name" in changes or "last_name" in changes:
        user.username = display_username(user.first_name, user.last_name) or user.username

    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int, actor: User) -> None:
    ensure_self_or_admin(actor, user_id)
    user = get_user(db, user_id)
    db.delete(user)
    db.commit()
    logger.info("Deleted user id=%s by user id=%s", user_id, actor.id)


def user_listings(db: Session, user_id: int, active_only: bool = False) -> list[Listing]:
    get_user(db, user_id)
    query = db.query(Listing).filter(Listing.user_id == user_id)
    if active_only:
        query = query.filter(Listing.status == ListingStatus.ACTIVE)
    return query.order_by(Listing.created_at.desc(), Listing.id.desc()).all()


def set_active(db: Session, user_id: int, active: bool) -> User:
    user = get_user(db, user_id)
    user.is_active = active
    if not active:
        # Outstanding tokens stop working immediately.
        user.session_version += 1
    db.commit()
    db.refresh(user)
    logger.info("User id=%s active=%s", user_id, active)
    return user


def admin_reset_password(db: Session, email: str, new_password: str) -> User:
    ensure_password(new_password)
    user = get_user_by_email(db, email)
    user.hashed_password = get_password_hash(new_password)
    user.session_version += 1
    db.commit()
    db.refresh(user)
    logger.info("Admin reset password for user id=%s", user.id)
    return user
