"""Tests for magic-byte sniffing and allow-list matching."""

import pytest
from payloads import GIF_SIGNATURE, JPEG_SIGNATURE, PNG_SIGNATURE, make_image

from upload_api.uploads.signatures import is_allowed, sniff_mime_type

JPEG_2000_HEADER = b"\x00\x00\x00\x0cjP  \r\n\x87\n\x00\x00\x00\x14ftypjp2 \x00\x00\x00\x00jp2 "
JPEG_XL_CODESTREAM = b"\xff\x0a"


class TestSniffMimeType:
    """Tests for sniff_mime_type."""

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            (make_image(64, PNG_SIGNATURE), "image/png"),
            (make_image(64, JPEG_SIGNATURE), "image/jpeg"),
            (make_image(64, GIF_SIGNATURE), "image/gif"),
            (b"RIFF\x24\x00\x00\x00WEBPVP8 " + b"\x00" * 16, "image/webp"),
            (b"%PDF-1.7\n" + b"\x00" * 16, "application/pdf"),
            (b"PK\x03\x04" + b"\x00" * 64, "application/zip"),
        ],
    )
    def test_known_types(self, data: bytes, expected: str) -> None:
        assert sniff_mime_type(data) == expected

    @pytest.mark.parametrize(
        "data",
        [
            make_image(64, JPEG_2000_HEADER),
            make_image(64, JPEG_XL_CODESTREAM),
            make_image(64, b"II*\x00"),
        ],
    )
    def test_less_common_images_are_images(self, data: bytes) -> None:
        mime_type = sniff_mime_type(data)
        assert mime_type is not None
        assert is_allowed(mime_type, ("image/*",))

    @pytest.mark.parametrize("data", [b"", b"plain text file", b"<svg xmlns='x'/>", b"RIFF\x00\x00\x00\x00XXXX"])
    def test_unknown_content(self, data: bytes) -> None:
        assert sniff_mime_type(data) is None


class TestIsAllowed:
    """Tests for is_allowed."""

    def test_category_wildcard(self) -> None:
        assert is_allowed("image/png", ("image/*",))
        assert not is_allowed("application/pdf", ("image/*",))

    def test_exact_type(self) -> None:
        assert is_allowed("application/pdf", ("image/*", "application/pdf"))
        assert not is_allowed("application/zip", ("application/pdf",))

    def test_unknown_type_never_allowed(self) -> None:
        assert not is_allowed(None, ("*/*",))

    def test_match_all(self) -> None:
        assert is_allowed("audio/wav", ("*/*",))

    def test_entries_are_normalized(self) -> None:
        assert is_allowed("image/gif", [" Image/* "])
