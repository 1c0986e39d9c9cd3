"""Test data factories using Faker."""

from datetime import datetime, timedelta
from itertools import count

from faker import Faker

from marketplace.models.listing import Listing, ListingStatus, PropertyType
from marketplace.models.meeting import Meeting, MeetingStatus
from marketplace.models.user import UserRole
from marketplace.services.users import create_user

fake = Faker()
_seq = count(1)

DEFAULT_PASSWORD = "secret123"


def unique_email() -> str:
    return f"{fake.user_name().lower()}.{next(_seq)}@example.com"


def registration_data(**overrides) -> dict:
    data = {
        "firstName": fake.first_name(),
        "lastName": fake.last_name(),
        "email": unique_email(),
        "password": DEFAULT_PASSWORD,
        "phone": fake.numerify("555-###-####"),
    }
    data.update(overrides)
    return data


def make_user(db, role: UserRole = UserRole.USER, password: str = DEFAULT_PASSWORD, **overrides):
    return create_user(
        db,
        first_name=overrides.get("first_name", fake.first_name()),
        last_name=overrides.get("last_name", fake.last_name()),
        email=overrides.get("email", unique_email()),
        password=password,
        phone=overrides.get("phone"),
        role=role,
    )


def listing_data(**overrides) -> dict:
    data = {
        "name": f"{fake.street_name()} {fake.random_element(['Loft', 'Villa', 'Cottage'])}",
        "description": fake.sentence(nb_words=12),
        "address": fake.street_address(),
        "city": fake.city(),
        "state": fake.state_abbr(),
        "zipCode": fake.postcode(),
        "price": fake.random_int(min=50_000, max=900_000),
        "bathrooms": fake.random_int(min=1, max=4),
        "bedrooms": fake.random_int(min=1, max=6),
        "squareFeet": fake.random_int(min=400, max=4000),
        "furnished": False,
        "parking": False,
    }
    data.update(overrides)
    return data


def make_listing(db, owner, **overrides) -> Listing:
    fields = {
        "name": f"{fake.street_name()} Home",
        "price": float(fake.random_int(min=50_000, max=900_000)),
        "bathrooms": 1,
        "bedrooms": 2,
        "furnished": False,
        "parking": False,
        "amenities": "",
        "image_urls": ["https://i.imgur.com/n6B1Fuw.jpg"],
        "status": ListingStatus.ACTIVE,
        "listing_type": "SALE",
        "property_type": PropertyType.HOUSE,
    }
    fields.update(overrides)
    listing = Listing(user_id=owner.id, **fields)
    db.add(listing)
    db.commit()
    db.refresh(listing)
    return listing


def make_meeting(db, creator, participant, listing, **overrides) -> Meeting:
    fields = {
        "title": fake.sentence(nb_words=3).rstrip("."),
        "meeting_time": datetime.utcnow() + timedelta(days=1),
        "duration_minutes": 30,
        "status": MeetingStatus.PENDING,
    }
    fields.update(overrides)
    meeting = Meeting(
        creator_id=creator.id,
        participant_id=participant.id,
        property_id=listing.id,
        **fields,
    )
    db.add(meeting)
    db.commit()
    db.refresh(meeting)
    return meeting
