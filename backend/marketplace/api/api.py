from fastapi import APIRouter

from marketplace.api.routes import admin, auth, favorites, listings, meetings, messages, users

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(listings.router)
api_router.include_router(messages.router)
api_router.include_router(meetings.router)
api_router.include_router(favorites.router)
api_router.include_router(users.router)
api_router.include_router(admin.router)
