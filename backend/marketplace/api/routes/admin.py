from fastapi import APIRouter, Depends, Query
from pydantic import EmailStr
from sqlalchemy.orm import Session

from marketplace.core.database import get_db
from marketplace.core.deps import get_current_user, require_roles
from marketplace.models.user import User, UserRole
from marketplace.schemas.common import ApiResponse, ok
from marketplace.schemas.user import UserResponse
from marketplace.services import users as user_service

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_roles(UserRole.ADMIN))])


@router.post("/reset-password", response_model=ApiResponse[None])
def reset_password(
    email: EmailStr = Query(...),
    new_password: str = Query(..., alias="newPassword"),
    db: Session = Depends(get_db),
):
    user_service.admin_reset_password(db, email, new_password)
    return ok(message="Password reset successfully")


@router.get("/user-details", response_model=ApiResponse[UserResponse])
def user_details(email: EmailStr = Query(...), db: Session = Depends(get_db)):
    user = user_service.get_user_by_email(db, email)
    return ok(UserResponse.model_validate(user), "User details retrieved successfully")


@router.get("/users", response_model=ApiResponse[list[UserResponse]])
def list_users(db: Session = Depends(get_db)):
    users = [UserResponse.model_validate(u) for u in user_service.list_users(db)]
    return ok(users, "Users retrieved successfully")


@router.get("/users/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(user_id: int, db: Session = Depends(get_db)):
    return ok(UserResponse.model_validate(user_service.get_user(db, user_id)), "User retrieved successfully")


@router.put("/users/{user_id}/activate", response_model=ApiResponse[UserResponse])
def activate(user_id: int, db: Session = Depends(get_db)):
    user = user_service.set_active(db, user_id, True)
    return ok(UserResponse.model_validate(user), "User activated successfully")


@router.put("/users/{user_id}/deactivate", response_model=ApiResponse[UserResponse])
def deactivate(user_id: int, db: Session = Depends(get_db)):
    user = user_service.set_active(db, user_id, False)
    return ok(UserResponse.model_validate(user), "User deactivated successfully")


@router.delete("/users/{user_id}", response_model=ApiResponse[None])
def delete_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    user_service.delete_user(db, user_id, current_user)
    return ok(message="User deleted successfully")
