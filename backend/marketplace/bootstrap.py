import logging
import os

from marketplace.core.config import get_settings
from marketplace.core.database import Base, SessionLocal, engine
from marketplace.core.errors import ConflictError
from marketplace.core.logging_config import setup_logging
from marketplace.models.user import UserRole
from marketplace.services.users import create_user

logger = logging.getLogger("marketplace.bootstrap")


def create_admin(email: str, password: str, first_name: str = "Site", last_name: str = "Admin") -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        create_user(
            db,
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
            role=UserRole.ADMIN,
        )
        logger.info("Created admin: %s", email)
    except ConflictError:
        logger.info("User already exists: %s", email)
    finally:
        db.close()


if __name__ == "__main__":
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)
    # Do not hardcode credentials in the repo. Use env vars for local bootstrap.
    admin_email = os.getenv("BOOTSTRAP_ADMIN_EMAIL")
    admin_password = os.getenv("BOOTSTRAP_ADMIN_PASSWORD")
    if admin_email and admin_password:
        create_admin(admin_email, admin_password)
    else:
        logger.info("Bootstrap skipped. Set BOOTSTRAP_ADMIN_EMAIL and BOOTSTRAP_ADMIN_PASSWORD to create an admin user.")
