from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from marketplace.core.database import get_db
from marketplace.core.deps import get_current_user
from marketplace.models.user import User
from marketplace.schemas.common import ApiResponse, ok
from marketplace.schemas.listing import ListingCreate, ListingResponse, ListingUpdate
from marketplace.services import listings as listing_service
from marketplace.services.listings import ListingSearch

router = APIRouter(prefix="/listings", tags=["listings"])


def search_params(
    search_term: str | None = Query(default=None, alias="searchTerm"),
    sort: str | None = Query(default=None),
    order: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    start_index: int | None = Query(default=None, alias="startIndex"),
    furnished: bool | None = Query(default=None),
    parking: bool | None = Query(default=None),
    listing_status: str | None = Query(default=None, alias="status"),
    listing_type: str | None = Query(default=None, alias="listingType"),
    property_type: str | None = Query(default=None, alias="propertyType"),
    min_price: float | None = Query(default=None, alias="minPrice"),
    max_price: float | None = Query(default=None, alias="maxPrice"),
) -> ListingSearch:
    return ListingSearch(
        search_term=search_term,
        status=listing_status,
        listing_type=listing_type,
        property_type=property_type,
        min_price=min_price,
        max_price=max_price,
        furnished=furnished,
        parking=parking,
        limit=limit,
        start_index=start_index,
        sort=sort,
        order=order,
    )


def _many(listings) -> list[ListingResponse]:
    return [ListingResponse.model_validate(item) for item in listings]


@router.get("/test", response_model=ApiResponse[str])
def test_endpoint():
    return ok("API is working!", "Listings API is up")


@router.post("/create", response_model=ApiResponse[ListingResponse], status_code=status.HTTP_201_CREATED)
def create_listing(
    payload: ListingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    listing = listing_service.create_listing(db, payload, current_user)
    return ok(ListingResponse.model_validate(listing), "Listing created successfully")


@router.put("/update/{listing_id}", response_model=ApiResponse[ListingResponse])
def update_listing(
    listing_id: int,
    payload: ListingUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    listing = listing_service.update_listing(db, listing_id, payload, current_user)
    return ok(ListingResponse.model_validate(listing), "Listing updated successfully")


@router.put("/status/{listing_id}", response_model=ApiResponse[ListingResponse])
def update_listing_status(
    listing_id: int,
    listing_status: str = Query(..., alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    listing = listing_service.update_status(db, listing_id, listing_status, current_user)
    return ok(ListingResponse.model_validate(listing), "Listing status updated successfully")


@router.delete("/delete/{listing_id}", response_model=ApiResponse[None])
def delete_listing(
    listing_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    listing_service.delete_listing(db, listing_id, current_user)
    return ok(message="Listing has been deleted!")


@router.get("/user", response_model=ApiResponse[list[ListingResponse]])
def user_listings(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    items = _many(listing_service.active_listings_for(db, current_user))
    return ok(items, "User listings retrieved successfully", listings=items)


@router.get("/recent", response_model=ApiResponse[list[ListingResponse]])
def recent_listings(limit: int = Query(default=6, ge=1), db: Session = Depends(get_db)):
    items = _many(listing_service.recent_listings(db, limit))
    return ok(items, "Recent listings retrieved successfully", listings=items)


@router.get("/search", response_model=ApiResponse[list[ListingResponse]])
def search_listings(params: ListingSearch = Depends(search_params), db: Session = Depends(get_db)):
    items = _many(listing_service.search_listings(db, params))
    return ok(items, "Listings retrieved successfully", listings=items)


@router.get("/get", response_model=ApiResponse[list[ListingResponse]])
def get_listings(params: ListingSearch = Depends(search_params), db: Session = Depends(get_db)):
    # Older clients still call /get with the search parameters.
    items = _many(listing_service.search_listings(db, params))
    return ok(items, "Listings retrieved successfully", listings=items)


@router.get("/get/{listing_id}", response_model=ApiResponse[ListingResponse])
def get_listing(listing_id: int, db: Session = Depends(get_db)):
    listing = listing_service.get_listing(db, listing_id)
    return ok(ListingResponse.model_validate(listing), "Listing retrieved successfully")
