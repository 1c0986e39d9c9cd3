import logging

from sqlalchemy.orm import Session, joinedload

from marketplace.core.errors import NotFoundError
from marketplace.models.favorite import Favorite
from marketplace.models.listing import Listing

logger = logging.getLogger(__name__)


def _find(db: Session, user_id: int, listing_id: int) -> Favorite | None:
    return db.query(Favorite).filter(Favorite.user_id == user_id, Favorite.listing_id == listing_id).first()


def _ensure_listing(db: Session, listing_id: int) -> None:
    if not db.query(Listing.id).filter(Listing.id == listing_id).scalar():
        raise NotFoundError(f"Listing not found with id: {listing_id}")


def favorite_listings(db: Session, user_id: int) -> list[Listing]:
    return (
        db.query(Listing)
        .options(joinedload(Listing.owner))
        .join(Favorite, Favorite.listing_id == Listing.id)
        .filter(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        .all()
    )


def is_favorite(db: Session, user_id: int, listing_id: int) -> bool:
    return _find(db, user_id, listing_id) is not None


def add_favorite(db: Session, user_id: int, listing_id: int) -> bool:
    _ensure_listing(db, listing_id)
    if _find(db, user_id, listing_id) is None:
        db.add(Favorite(user_id=user_id, listing_id=listing_id))
        db.commit()
    return True


def remove_favorite(db: Session, user_id: int, listing_id: int) -> bool:
    favorite = _find(db, user_id, listing_id)
    if favorite is not None:
        db.delete(favorite)
        db.commit()
    return False


def toggle_favorite(db: Session, user_id: int, listing_id: int) -> bool:
    """Add when absent, remove when present. Returns the new state."""
    if is_favorite(db, user_id, listing_id):
        return remove_favorite(db, user_id, listing_id)
    return add_favorite(db, user_id, listing_id)


def favorite_count(db: Session, listing_id: int) -> int:
    return db.query(Favorite).filter(Favorite.listing_id == listing_id).count()
