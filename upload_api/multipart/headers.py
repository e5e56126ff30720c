"""Header parsing for multipart bodies and the request Content-Type."""

import re

from upload_api.core.errors import BoundaryNotFound, MalformedMultipart
from upload_api.multipart.models import DispositionFields, HeaderValue

MULTIPART_FORM_DATA = "multipart/form-data"
MAX_BOUNDARY_LENGTH = 70

# `; key=value` or `; key="quoted; value"`
_PARAM_RE = re.compile(r';\s*([^\s=;]+)\s*=\s*("(?:[^"\\]|\\.)*"|[^;]*)')


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        value = value[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return value.replace('"', "")


def parse_options_header(value: str) -> tuple[str, dict[str, str]]:
    """Split a header like ``form-data; name="a"`` into its main value and parameters.

    Parameter keys are lower-cased; values have surrounding whitespace and
    wrapping quotes removed.
    """
    main, _, rest = value.partition(";")
    params: dict[str, str] = {}
    for match in _PARAM_RE.finditer(";" + rest):
        params[match.group(1).lower()] = _unquote(match.group(2))
    return main.strip().lower(), params


def parse_content_disposition(value: str) -> DispositionFields:
    disposition, params = parse_options_header(value)
    return DispositionFields(
        disposition=disposition,
        name=params.get("name"),
        filename=params.get("filename"),
    )


def parse_headers(block: str) -> dict[str, HeaderValue]:
    """Parse a part's raw header block into a lower-cased mapping.

    Each line is split once on the first colon. ``content-disposition`` is
    parsed further into :class:`DispositionFields`.
    """
    headers: dict[str, HeaderValue] = {}
    for line in block.split("\r\n"):
        if not line.strip():
            continue
        key, sep, value = line.partition(":")
        key = key.strip().lower()
        if not sep or not key:
            raise MalformedMultipart(f"Invalid part header line: {line[:80]!r}")

        value = value.strip()
        headers[key] = parse_content_disposition(value) if key == "content-disposition" else value
    return headers


def extract_boundary(content_type: str | None) -> bytes:
    """Derive the boundary token from the request Content-Type header."""
    if not content_type:
        raise BoundaryNotFound("Content-Type header is missing or undefined")

    media_type, params = parse_options_header(content_type)
    if media_type != MULTIPART_FORM_DATA:
        raise MalformedMultipart(f"Unsupported Content-Type: expected {MULTIPART_FORM_DATA}")

    boundary = params.get("boundary", "")
    if not boundary:
        raise BoundaryNotFound("Boundary not found in Content-Type header")
    if len(boundary) > MAX_BOUNDARY_LENGTH or not boundary.isascii():
        raise MalformedMultipart("Invalid boundary in Content-Type header")
    return boundary.encode("ascii")
