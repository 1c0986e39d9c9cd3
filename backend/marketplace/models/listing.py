from datetime import datetime
import enum

from sqlalchemy import JSON, Boolean, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketplace.core.database import Base


class ListingStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    SOLD = "SOLD"
    DELETED = "DELETED"

    @classmethod
    def parse(cls, value: str | None) -> "ListingStatus | None":
        if value is None:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class PropertyType(str, enum.Enum):
    HOUSE = "HOUSE"
    APARTMENT = "APARTMENT"
    CONDO = "CONDO"
    TOWNHOUSE = "TOWNHOUSE"
    LAND = "LAND"
    COMMERCIAL = "COMMERCIAL"
    OTHER = "OTHER"

    @classmethod
    def _missing_(cls, value):
        # Accept "apartment" / " Condo " from form inputs.
        if isinstance(value, str):
            normalized = value.strip().upper()
            for member in cls:
                if member.value == normalized:
                    return member
        return None


DEFAULT_LISTING_TYPE = "SALE"
DESCRIPTION_MAX_LENGTH = 1000
OWNER_NAME_FALLBACK = "Property Owner"


class Listing(Base):
    __tablename__ = "listings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LENGTH))
    address: Mapped[str | None] = mapped_column(String(255))
    city: Mapped[str | None] = mapped_column(String(120))
    state: Mapped[str | None] = mapped_column(String(120))
    zip_code: Mapped[str | None] = mapped_column(String(20))
    price: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    square_feet: Mapped[int | None] = mapped_column(Integer)
    furnished: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    parking: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    amenities: Mapped[str] = mapped_column(Text, default="", nullable=False)
    image_urls: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    status: Mapped[ListingStatus] = mapped_column(
        Enum(ListingStatus), default=ListingStatus.ACTIVE, index=True, nullable=False
    )
    listing_type: Mapped[str] = mapped_column(String(40), default=DEFAULT_LISTING_TYPE, nullable=False)
    property_type: Mapped[PropertyType] = mapped_column(
        Enum(PropertyType), default=PropertyType.HOUSE, nullable=False
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    owner = relationship("User", back_populates="listings")

    # Owner display fields are computed on read, never stored.
    @property
    def owner_id(self) -> int:
        return self.user_id

    @property
    def owner_name(self) -> str:
        if self.owner is None:
            return OWNER_NAME_FALLBACK
        return self.owner.full_name or OWNER_NAME_FALLBACK

    @property
    def contact_email(self) -> str | None:
        return self.owner.email if self.owner is not None else None

    @property
    def contact_phone(self) -> str | None:
        return self.owner.phone if self.owner is not None else None

    @property
    def first_image_url(self) -> str | None:
        return self.image_urls[0] if self.image_urls else None
