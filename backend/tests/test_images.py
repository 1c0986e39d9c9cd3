"""Unit tests for image URL validation."""

import base64
from unittest.mock import patch

from marketplace.core.config import get_settings
from marketplace.services.images import clean_image_urls, is_valid_image_url


def _data_url(payload: bytes, kind: str = "jpeg") -> str:
    return f"data:image/{kind};base64," + base64.b64encode(payload).decode()


class TestIsValidImageUrl:
    def test_http_and_relative_urls(self):
        assert is_valid_image_url("https://example.com/a.png")
        assert is_valid_image_url("http://example.com/a.png")
        assert is_valid_image_url("/assets/images/prpty.jpg")

    def test_blank_and_none(self):
        assert not is_valid_image_url(None)
        assert not is_valid_image_url("   ")

    def test_supported_data_url(self):
        assert is_valid_image_url(_data_url(b"image-bytes", "gif"))

    def test_unsupported_image_kind(self):
        assert not is_valid_image_url(_data_url(b"image-bytes", "webp"))

    def test_undecodable_payload(self):
        assert not is_valid_image_url("data:image/png;base64,***not base64***")

    def test_oversized_payload(self):
        settings = get_settings()
        with patch.object(settings, "MAX_IMAGE_BYTES", 4):
            assert not is_valid_image_url(_data_url(b"12345"))


class TestCleanImageUrls:
    def test_none_gives_placeholder(self):
        assert clean_image_urls(None) == [get_settings().DEFAULT_LISTING_IMAGE_URL]

    def test_strips_whitespace(self):
        assert clean_image_urls(["  https://example.com/a.png  "]) == ["https://example.com/a.png"]
