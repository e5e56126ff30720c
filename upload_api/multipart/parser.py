"""Turn raw part segments into structured parts."""

from collections.abc import Iterable

from upload_api.core.errors import MalformedMultipart
from upload_api.multipart.headers import parse_headers
from upload_api.multipart.models import DispositionFields, Part, RawPart

HEADER_SEPARATOR = b"\r\n\r\n"


def parse_part(raw: RawPart) -> Part:
    """Split one segment at the first blank line into headers and body."""
    headers_end = raw.data.find(HEADER_SEPARATOR)
    if headers_end == -1:
        raise MalformedMultipart(f"Part at offset {raw.start} has no header separator")

    headers = parse_headers(raw.data[:headers_end].decode("utf-8", errors="replace"))
    disposition = headers.get("content-disposition")
    filename = disposition.filename if isinstance(disposition, DispositionFields) else None

    return Part(headers=headers, body=raw.data[headers_end + len(HEADER_SEPARATOR) :], filename=filename)


def parse_parts(raw_parts: Iterable[RawPart]) -> list[Part]:
    return [parse_part(raw) for raw in raw_parts]
