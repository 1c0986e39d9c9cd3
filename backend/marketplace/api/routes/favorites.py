from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.core.database import get_db
from marketplace.core.deps import get_current_user
from marketplace.models.user import User
from marketplace.schemas.common import ApiResponse, ok
from marketplace.schemas.favorite import FavoriteCount, FavoriteStatus
from marketplace.schemas.listing import ListingResponse
from marketplace.services import favorites as favorite_service
from marketplace.services.users import ensure_self_or_admin

router = APIRouter(prefix="/favorites", tags=["favorites"])


def _listings(db: Session, user_id: int) -> list[ListingResponse]:
    return [ListingResponse.model_validate(item) for item in favorite_service.favorite_listings(db, user_id)]


@router.get("", response_model=ApiResponse[list[ListingResponse]])
def my_favorites(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(_listings(db, current_user.id), "Favorites retrieved successfully")


@router.get("/check", response_model=ApiResponse[FavoriteStatus])
def check_for_user(
    user_id: int = Query(..., alias="userId"),
    listing_id: int = Query(..., alias="listingId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_self_or_admin(current_user, user_id)
    state = favorite_service.is_favorite(db, user_id, listing_id)
    return ok(FavoriteStatus(listing_id=listing_id, is_favorite=state), "Favorite status retrieved")


@router.get("/user/{user_id}", response_model=ApiResponse[list[ListingResponse]])
def user_favorites(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_self_or_admin(current_user, user_id)
    return ok(_listings(db, user_id), "Favorites retrieved successfully")


@router.get("/listing/{listing_id}/count", response_model=ApiResponse[FavoriteCount])
def favorite_count(listing_id: int, db: Session = Depends(get_db)):
    count = favorite_service.favorite_count(db, listing_id)
    return ok(FavoriteCount(listing_id=listing_id, count=count), "Favorite count retrieved")


@router.get("/{listing_id}/check", response_model=ApiResponse[FavoriteStatus])
def check(listing_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    state = favorite_service.is_favorite(db, current_user.id, listing_id)
    return ok(FavoriteStatus(listing_id=listing_id, is_favorite=state), "Favorite status retrieved")


@router.post("/{listing_id}/toggle", response_model=ApiResponse[FavoriteStatus])
def toggle(listing_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    state = favorite_service.toggle_favorite(db, current_user.id, listing_id)
    message = "Added to favorites" if state else "Removed from favorites"
    return ok(FavoriteStatus(listing_id=listing_id, is_favorite=state), message)


@router.post("/{listing_id}", response_model=ApiResponse[FavoriteStatus])
def add(listing_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    state = favorite_service.add_favorite(db, current_user.id, listing_id)
    return ok(FavoriteStatus(listing_id=listing_id, is_favorite=state), "Added to favorites")


@router.delete("/{listing_id}", response_model=ApiResponse[FavoriteStatus])
def remove(listing_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    state = favorite_service.remove_favorite(db, current_user.id, listing_id)
    return ok(FavoriteStatus(listing_id=listing_id, is_favorite=state), "Removed from favorites")


@router.post("/{user_id}/{listing_id}", response_model=ApiResponse[FavoriteStatus])
def add_for_user(
    user_id: int,
    listing_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_self_or_admin(current_user, user_id)
    state = favorite_service.add_favorite(db, user_id, listing_id)
    return ok(FavoriteStatus(listing_id=listing_id, is_favorite=state), "Added to favorites")


@router.delete("/{user_id}/{listing_id}", response_model=ApiResponse[FavoriteStatus])
def remove_for_user(
    user_id: int,
    listing_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_self_or_admin(current_user, user_id)
    state = favorite_service.remove_favorite(db, user_id, listing_id)
    return ok(FavoriteStatus(listing_id=listing_id, is_favorite=state), "Removed from favorites")
