import logging
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from marketplace.core.config import get_settings
from marketplace.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from marketplace.models.listing import DEFAULT_LISTING_TYPE, Listing, ListingStatus, PropertyType
from marketplace.models.user import User, UserRole
from marketplace.schemas.listing import ListingCreate, ListingUpdate
from marketplace.services.images import clean_image_urls

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "createdAt": Listing.created_at,
    "created_at": Listing.created_at,
    "updatedAt": Listing.updated_at,
    "updated_at": Listing.updated_at,
    "price": Listing.price,
    "name": Listing.name,
    "bedrooms": Listing.bedrooms,
    "bathrooms": Listing.bathrooms,
    "squareFeet": Listing.square_feet,
    "square_feet": Listing.square_feet,
}


def parse_property_type(value: str | None) -> PropertyType | None:
    if value is None or not value.strip():
        return None
    try:
        return PropertyType(value)
    except ValueError:
        valid = ", ".join(p.value for p in PropertyType)
        raise ValidationError(f"Invalid property type: {value}. Valid values are: {valid}")


def _normalize_listing_type(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip().upper()


def ensure_can_modify(listing: Listing, actor: User) -> None:
    if listing.user_id != actor.id and actor.role != UserRole.ADMIN:
        raise PermissionDeniedError("You can only modify your own listings")


def get_listing(db: Session, listing_id: int) -> Listing:
    listing = (
        db.query(Listing).options(joinedload(Listing.owner)).filter(Listing.id == listing_id).first()
    )
    if not listing:
        raise NotFoundError(f"Listing not found with id: {listing_id}")
    return listing


def create_listing(db: Session, payload: ListingCreate, owner: User) -> Listing:
    if not payload.name or not payload.name.strip():
        raise ValidationError("Listing name is required")

    property_type = parse_property_type(payload.property_type) or PropertyType.HOUSE
    status = ListingStatus.parse(payload.status) or ListingStatus.ACTIVE

    listing = Listing(
        name=payload.name.strip(),
        description=payload.description,
        address=payload.address,
        city=payload.city,
        state=payload.state,
        zip_code=payload.zip_code,
        price=payload.price,
        bathrooms=payload.bathrooms,
        bedrooms=payload.bedrooms,
        square_feet=payload.square_feet,
        furnished=payload.furnished,
        parking=payload.parking,
        amenities=payload.amenities or "",
        image_urls=clean_image_urls(payload.image_urls),
        status=status,
        listing_type=_normalize_listing_type(payload.listing_type) or DEFAULT_LISTING_TYPE,
        property_type=property_type,
        user_id=owner.id,
    )
    db.add(listing)
    db.commit()
    db.refresh(listing)
    logger.info("Listing id=%s created by user id=%s", listing.id, owner.id)
    return listing


def update_listing(db: Session, listing_id: int, payload: ListingUpdate, actor: User) -> Listing:
    listing = get_listing(db, listing_id)
    ensure_can_modify(listing, actor)

    changes = payload.model_dump(exclude_none=True)
    if "property_type" in changes:
        changes["property_type"] = parse_property_type(changes["property_type"]) or listing.property_type
    if "status" in changes:
        # An unknown status keeps the current one.
        changes["status"] = ListingStatus.parse(changes["status"]) or listing.status
    if "listing_type" in changes:
        changes["listing_type"] = _normalize_listing_type(changes["listing_type"]) or listing.listing_type
    if "image_urls" in changes:
        changes["image_urls"] = clean_image_urls(changes["image_urls"])

    for field, value in changes.items():
        setattr(listing, field, value)

    db.commit()
    db.refresh(listing)
    return listing


def update_status(db: Session, listing_id: int, status: str, actor: User) -> Listing:
    listing = get_listing(db, listing_id)
    ensure_can_modify(listing, actor)

    parsed = ListingStatus.parse(status)
    if parsed is None:
        valid = ", ".join(s.value for s in ListingStatus)
        raise ValidationError(f"Invalid status value. Valid values are: {valid}")

    listing.status = parsed
    db.commit()
    db.refresh(listing)
    return listing


def delete_listing(db: Session, listing_id: int, actor: User) -> None:
    listing = get_listing(db, listing_id)
    ensure_can_modify(listing, actor)
    db.delete(listing)
    db.commit()
    logger.info("Listing id=%s deleted by user id=%s", listing_id, actor.id)


def active_listings_for(db: Session, user: User) -> list[Listing]:
    return (
        db.query(Listing)
        .filter(Listing.user_id == user.id, Listing.status == ListingStatus.ACTIVE)
        .order_by(Listing.created_at.desc(), Listing.id.desc())
        .all()
    )


def recent_listings(db: Session, limit: int = 6) -> list[Listing]:
    limit = max(1, min(limit, get_settings().SEARCH_MAX_LIMIT))
    return (
        db.query(Listing)
        .options(joinedload(Listing.owner))
        .filter(Listing.status == ListingStatus.ACTIVE)
        .order_by(Listing.created_at.desc(), Listing.id.desc())
        .limit(limit)
        .all()
    )


@dataclass
class ListingSearch:
    search_term: str | None = None
    status: str | None = None
    listing_type: str | None = None
    property_type: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    furnished: bool | None = None
    parking: bool | None = None
    limit: int | None = None
    start_index: int | None = None
    sort: str | None = None
    order: str | None = None


def search_listings(db: Session, params: ListingSearch) -> list[Listing]:
    """Compose the optional filters into one query with true OFFSET/LIMIT paging."""
    settings = get_settings()
    property_type = parse_property_type(params.property_type)
    status = ListingStatus.parse(params.status) or ListingStatus.ACTIVE

    query = db.query(Listing).options(joinedload(Listing.owner)).filter(Listing.status == status)

    if params.search_term and params.search_term.strip():
        # Wildcard characters in the term match literally.
        term = params.search_term.strip().lower()
        query = query.filter(func.lower(Listing.name).contains(term, autoescape=True))
    # Unset furnished/parking matches both true and false.
    if params.furnished is not None:
        query = query.filter(Listing.furnished == params.furnished)
    if params.parking is not None:
        query = query.filter(Listing.parking == params.parking)
    listing_type = _normalize_listing_type(params.listing_type)
    if listing_type:
        query = query.filter(Listing.listing_type == listing_type)
    if property_type is not None:
        query = query.filter(Listing.property_type == property_type)
    if params.min_price is not None:
        query = query.filter(Listing.price >= params.min_price)
    if params.max_price is not None:
        query = query.filter(Listing.price <= params.max_price)

    column = SORT_FIELDS.get(params.sort or "createdAt", Listing.created_at)
    if (params.order or "desc").lower() == "asc":
        query = query.order_by(column.asc(), Listing.id.asc())
    else:
        query = query.order_by(column.desc(), Listing.id.desc())

    limit = params.limit if params.limit is not None else settings.SEARCH_DEFAULT_LIMIT
    limit = max(1, min(limit, settings.SEARCH_MAX_LIMIT))
    start_index = max(params.start_index or 0, 0)

    return query.offset(start_index).limit(limit).all()
