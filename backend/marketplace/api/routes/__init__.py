from marketplace.api.routes import admin, auth, favorites, listings, meetings, messages, users

__all__ = [
    "auth",
    "listings",
    "messages",
    "meetings",
    "favorites",
    "users",
    "admin",
]
