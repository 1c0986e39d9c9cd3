from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ignore unknown env vars so a shared .env can hold frontend/deploy keys too.
    # cwd is `backend` when running uvicorn locally; load backend/.env first, then repo-root/.env.
    model_config = SettingsConfigDict(env_file=(".env", "../.env"), case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "RealEstateMarketplace"
    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/api"

    LOG_LEVEL: str = "INFO"
    # Empty keeps logging on the console only.
    LOG_DIR: str = ""

    SECRET_KEY: str = "change_me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 10
    PASSWORD_RESET_TOKEN_TTL_MINUTES: int = 30
    PASSWORD_MIN_LENGTH: int = 6

    ACCESS_COOKIE_NAME: str = "access_token"
    COOKIE_MAX_AGE_SECONDS: int = 864000
    COOKIE_SECURE: bool = False

    DATABASE_URL: str = ""
    POSTGRES_SERVER: str = "db"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "real_estate_marketplace"

    REDIS_URL: str = "redis://redis:6379/0"
    CELERY_BROKER_URL: str = "redis://redis:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/2"

    REMINDER_CRON_MINUTE: str = "*/15"
    REMINDER_WINDOW_MINUTES: int = 60
    REMINDER_LOCK_TIMEOUT_SECONDS: int = 600

    # Cookies are sent cross-origin, so this must stay an explicit allowlist.
    BACKEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:4200",
            "http://127.0.0.1:4200",
            "https://real-estate-marketplace-application-front-end.vercel.app",
        ]
    )
    ALLOWED_HOSTS: list[str] = Field(
        default_factory=lambda: [
            "*.onrender.com",
            "*.vercel.app",
            "localhost",
            "127.0.0.1",
        ]
    )
    FRONTEND_URL: str = "http://localhost:4200"

    ENABLE_API_DOCS: bool = False
    RATE_LIMIT_ENABLED: bool = True

    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM_EMAIL: str = "no-reply@realestate-marketplace.local"
    SMTP_USE_TLS: bool = True

    DEFAULT_LISTING_IMAGE_URL: str = "https://i.imgur.com/n6B1Fuw.jpg"
    DEFAULT_PROPERTY_IMAGE_PATH: str = "/assets/images/prpty.jpg"
    DEFAULT_AVATAR_URL: str = (
        "https://cdn.pixabay.com/photo/2015/10/05/22/37/blank-profile-picture-973460_1280.png"
    )
    MAX_IMAGE_BYTES: int = 10 * 1024 * 1024

    SEARCH_DEFAULT_LIMIT: int = 9
    SEARCH_MAX_LIMIT: int = 100

    @model_validator(mode="after")
    def _prod_guards(self):
        if self.ENVIRONMENT.lower() == "production":
            if self.ENABLE_API_DOCS:
                raise ValueError("ENABLE_API_DOCS must be false in production")
            if not self.SECRET_KEY or len(self.SECRET_KEY) < 32:
                raise ValueError("SECRET_KEY must be 32+ chars in production")
            if any(h == "*" for h in self.ALLOWED_HOSTS):
                raise ValueError('ALLOWED_HOSTS must not contain "*" in production')
            if any(o == "*" for o in self.BACKEND_CORS_ORIGINS):
                raise ValueError('BACKEND_CORS_ORIGINS must not contain "*" when credentials are allowed')
        else:
            if not self.ALLOWED_HOSTS:
                self.ALLOWED_HOSTS = ["*"]
        return self

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
