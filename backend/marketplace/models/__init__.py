from marketplace.models.user import User, UserRole
from marketplace.models.listing import Listing, ListingStatus, PropertyType
from marketplace.models.message import Message
from marketplace.models.meeting import Meeting, MeetingStatus
from marketplace.models.favorite import Favorite

__all__ = [
    "User",
    "UserRole",
    "Listing",
    "ListingStatus",
    "PropertyType",
    "Message",
    "Meeting",
    "MeetingStatus",
    "Favorite",
]
