from pydantic import EmailStr

from marketplace.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    first_name: str
    last_name: str
    email: EmailStr
    password: str
    phone: str | None = None
    # Free text; unknown values fall back to USER, ADMIN is refused.
    role: str | None = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class ForgotPasswordResponse(CamelModel):
    debug_reset_url: str | None = None
