from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from marketplace.core.database import get_db
from marketplace.core.deps import get_current_user, require_roles
from marketplace.models.user import User, UserRole
from marketplace.schemas.common import ApiResponse, ok
from marketplace.schemas.listing import ListingResponse
from marketplace.schemas.user import AdminUserCreate, PublicUserResponse, UserResponse, UserUpdate
from marketplace.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


def _listings(items) -> list[ListingResponse]:
    return [ListingResponse.model_validate(item) for item in items]


@router.get("", response_model=ApiResponse[list[UserResponse]])
def list_users(db: Session = Depends(get_db), _: User = Depends(require_roles(UserRole.ADMIN))):
    users = [UserResponse.model_validate(u) for u in user_service.list_users(db)]
    return ok(users, "Users retrieved successfully")


@router.post("", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
def create_user(
    payload: AdminUserCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(UserRole.ADMIN)),
):
    user = user_service.create_user(
        db,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=payload.password,
        phone=payload.phone,
        role=payload.role,
    )
    return ok(UserResponse.model_validate(user), "User created successfully")


@router.get("/public/{user_id}", response_model=ApiResponse[PublicUserResponse])
def public_profile(user_id: int, db: Session = Depends(get_db)):
    user = user_service.get_user(db, user_id)
    return ok(PublicUserResponse.model_validate(user), "User retrieved successfully")


@router.get("/email/{email}", response_model=ApiResponse[UserResponse])
def get_by_email(email: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    user = user_service.get_user_by_email(db, email)
    user_service.ensure_self_or_admin(current_user, user.id)
    return ok(UserResponse.model_validate(user), "User retrieved successfully")


@router.get("/listings/active/{user_id}", response_model=ApiResponse[list[ListingResponse]])
def active_listings(user_id: int, db: Session = Depends(get_db)):
    items = _listings(user_service.user_listings(db, user_id, active_only=True))
    return ok(items, "Active listings retrieved successfully", listings=items)


@router.get("/listings/{user_id}", response_model=ApiResponse[list[ListingResponse]])
def user_listings(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    user_service.ensure_self_or_admin(current_user, user_id)
    items = _listings(user_service.user_listings(db, user_id))
    return ok(items, "User listings retrieved successfully", listings=items)


@router.put("/update/{user_id}", response_model=ApiResponse[UserResponse])
@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = user_service.update_user(db, user_id, payload, current_user)
    return ok(UserResponse.model_validate(user), "User updated successfully")


@router.delete("/delete/{user_id}", response_model=ApiResponse[None])
@router.delete("/{user_id}", response_model=ApiResponse[None])
def delete_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    user_service.delete_user(db, user_id, current_user)
    return ok(message="User has been deleted!")


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    user_service.ensure_self_or_admin(current_user, user_id)
    user = user_service.get_user(db, user_id)
    return ok(UserResponse.model_validate(user), "User retrieved successfully")
