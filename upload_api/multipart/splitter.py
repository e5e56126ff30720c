"""Partition a multipart body into raw part segments."""

from collections.abc import Iterator

from upload_api.core.errors import BoundaryNotFound, MalformedMultipart
from upload_api.multipart.models import RawPart

CRLF_LENGTH = 2
TERMINATOR_SUFFIX = b"--"


class BoundarySplitter:
    """Slices the body between consecutive ``--{boundary}`` occurrences.

    Anything before the first delimiter is preamble and dropped. The closing
    ``--{boundary}--`` ends the stream, so no empty trailing part is emitted.
    Each slice loses the line terminator that precedes the next delimiter.
    """

    def __init__(self, boundary: bytes) -> None:
        if not boundary:
            raise BoundaryNotFound("Boundary must not be empty")
        self.delimiter = b"--" + boundary

    def iter_parts(self, data: bytes) -> Iterator[RawPart]:
        delimiter = self.delimiter
        first = data.find(delimiter)
        if first == -1:
            raise BoundaryNotFound("Boundary not found in the request body")

        last = first
        start = first + len(delimiter) + CRLF_LENGTH
        end = data.find(delimiter, start)
        while end != -1:
            if start >= end - CRLF_LENGTH:
                raise MalformedMultipart("Overlapping boundaries or incorrect multipart format")

            yield RawPart(start=start, end=end - CRLF_LENGTH, data=data[start : end - CRLF_LENGTH])

            last = end
            start = end + len(delimiter) + CRLF_LENGTH
            end = data.find(delimiter, start)

        closing = last + len(delimiter)
        if data[closing : closing + len(TERMINATOR_SUFFIX)] != TERMINATOR_SUFFIX:
            raise MalformedMultipart("Multipart body is missing its closing boundary")

    def split(self, data: bytes) -> list[RawPart]:
        return list(self.iter_parts(data))
