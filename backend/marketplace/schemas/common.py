from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, model_serializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")

_LEGACY_FIELDS = ("listings", "accessToken", "refreshToken", "access_token", "refresh_token")


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str = ""
    data: T | None = None

    # Legacy response shapes still read by the frontend.
    listings: list[Any] | None = None
    access_token: str | None = None
    refresh_token: str | None = None

    @model_serializer(mode="wrap")
    def _drop_unset_legacy_fields(self, handler):
        payload = handler(self)
        for key in _LEGACY_FIELDS:
            if key in payload and payload[key] is None:
                payload.pop(key)
        return payload


def ok(data: Any = None, message: str = "", **extra: Any) -> ApiResponse:
    return ApiResponse(success=True, message=message, data=data, **extra)


def failure_body(message: str) -> dict:
    return {"success": False, "message": message, "data": None}


def to_naive_utc(value: datetime | None) -> datetime | None:
    # Storage is naive UTC throughout.
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
