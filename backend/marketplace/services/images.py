import base64
import binascii
import logging
import re

from marketplace.core.config import get_settings

logger = logging.getLogger(__name__)

DATA_URL_RE = re.compile(r"^data:image/(jpeg|jpg|png|gif);base64,(.*)$", re.DOTALL)


def is_valid_data_url(value: str) -> bool:
    match = DATA_URL_RE.match(value)
    if not match:
        return False
    try:
        decoded = base64.b64decode(match.group(2), validate=True)
    except (binascii.Error, ValueError):
        return False
    return 0 < len(decoded) <= get_settings().MAX_IMAGE_BYTES


def is_valid_image_url(value: str | None) -> bool:
    if not value or not value.strip():
        return False
    value = value.strip()
    if value.startswith("data:"):
        return is_valid_data_url(value)
    return value.startswith("http") or value.startswith("/")


def clean_image_urls(urls: list[str] | None) -> list[str]:
    """Keep usable URLs in order; fall back to the single placeholder image."""
    kept = [u.strip() for u in (urls or []) if is_valid_image_url(u)]
    dropped = len(urls or []) - len(kept)
    if dropped:
        logger.info("Dropped %s invalid image url(s)", dropped)
    return kept or [get_settings().DEFAULT_LISTING_IMAGE_URL]
