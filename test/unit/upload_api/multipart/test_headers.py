"""Tests for multipart header parsing and boundary derivation."""

import pytest

from upload_api.core.errors import BoundaryNotFound, MalformedMultipart
from upload_api.multipart.headers import (
    extract_boundary,
    parse_content_disposition,
    parse_headers,
    parse_options_header,
)
from upload_api.multipart.models import DispositionFields


class TestParseOptionsHeader:
    """Tests for parse_options_header."""

    def test_main_value_and_params(self) -> None:
        main, params = parse_options_header('form-data; name="field"; filename="a.png"')
        assert main == "form-data"
        assert params == {"name": "field", "filename": "a.png"}

    def test_unquoted_values_are_stripped(self) -> None:
        _, params = parse_options_header("multipart/form-data; boundary= abc123 ")
        assert params["boundary"] == "abc123"

    def test_quoted_value_may_contain_separator(self) -> None:
        _, params = parse_options_header('form-data; name="f"; filename="a; b.png"')
        assert params["filename"] == "a; b.png"

    def test_keys_are_lowercased(self) -> None:
        _, params = parse_options_header('form-data; NAME="f"')
        assert params == {"name": "f"}


class TestContentDisposition:
    """Tests for Content-Disposition parsing."""

    def test_file_field(self) -> None:
        fields = parse_content_disposition('form-data; name="fileupload"; filename="photo.png"')
        assert fields == DispositionFields(disposition="form-data", name="fileupload", filename="photo.png")

    def test_plain_field_has_no_filename(self) -> None:
        fields = parse_content_disposition('form-data; name="title"')
        assert fields.name == "title"
        assert fields.filename is None

    def test_empty_filename_is_kept_empty(self) -> None:
        fields = parse_content_disposition('form-data; name="fileupload"; filename=""')
        assert fields.filename == ""


class TestParseHeaders:
    """Tests for part header blocks."""

    def test_keys_are_case_insensitive(self) -> None:
        headers = parse_headers('Content-Disposition: form-data; name="a"\r\nCONTENT-TYPE: image/png')
        assert set(headers) == {"content-disposition", "content-type"}
        assert headers["content-type"] == "image/png"
        assert isinstance(headers["content-disposition"], DispositionFields)

    def test_value_split_on_first_colon_only(self) -> None:
        headers = parse_headers("X-Note: a: b")
        assert headers["x-note"] == "a: b"

    def test_line_without_colon_is_malformed(self) -> None:
        with pytest.raises(MalformedMultipart):
            parse_headers("garbage line")

    def test_blank_lines_are_ignored(self) -> None:
        assert parse_headers("\r\nContent-Type: image/gif\r\n") == {"content-type": "image/gif"}


class TestExtractBoundary:
    """Tests for boundary derivation from the request Content-Type."""

    def test_boundary_is_returned_as_bytes(self) -> None:
        assert extract_boundary("multipart/form-data; boundary=xyz") == b"xyz"

    def test_quoted_boundary(self) -> None:
        assert extract_boundary('multipart/form-data; boundary="----WebKit123"') == b"----WebKit123"

    def test_boundary_followed_by_other_params(self) -> None:
        assert extract_boundary("multipart/form-data; boundary=xyz; charset=utf-8") == b"xyz"

    @pytest.mark.parametrize("content_type", [None, "", "multipart/form-data", "multipart/form-data; boundary="])
    def test_missing_boundary(self, content_type: str | None) -> None:
        with pytest.raises(BoundaryNotFound):
            extract_boundary(content_type)

    def test_wrong_media_type(self) -> None:
        with pytest.raises(MalformedMultipart):
            extract_boundary("application/json; boundary=xyz")

    def test_overlong_boundary(self) -> None:
        with pytest.raises(MalformedMultipart):
            extract_boundary("multipart/form-data; boundary=" + "a" * 71)
