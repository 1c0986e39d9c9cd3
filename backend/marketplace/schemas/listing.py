from datetime import datetime

from pydantic import Field

from marketplace.models.listing import DESCRIPTION_MAX_LENGTH, ListingStatus, PropertyType
from marketplace.schemas.common import CamelModel


class ListingCreate(CamelModel):
    name: str
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    price: float = 0.0
    bathrooms: int = 0
    bedrooms: int = 0
    square_feet: int | None = None
    furnished: bool = False
    parking: bool = False
    amenities: str | None = None
    image_urls: list[str] | None = None
    # Strings are parsed by the service so create/update/search share one rule set.
    status: str | None = None
    listing_type: str | None = None
    property_type: str | None = None


class ListingUpdate(CamelModel):
    name: str | None = None
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    price: float | None = None
    bathrooms: int | None = None
    bedrooms: int | None = None
    square_feet: int | None = None
    furnished: bool | None = None
    parking: bool | None = None
    amenities: str | None = None
    image_urls: list[str] | None = None
    status: str | None = None
    listing_type: str | None = None
    property_type: str | None = None


class ListingResponse(CamelModel):
    id: int
    name: str
    description: str | None
    address: str | None
    city: str | None
    state: str | None
    zip_code: str | None
    price: float
    bathrooms: int
    bedrooms: int
    square_feet: int | None
    furnished: bool
    parking: bool
    amenities: str
    image_urls: list[str]
    status: ListingStatus
    listing_type: str
    property_type: PropertyType
    user_id: int
    owner_id: int
    owner_name: str
    contact_email: str | None
    contact_phone: str | None
    created_at: datetime
    updated_at: datetime
