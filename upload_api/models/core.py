"""Core models for request/response handling."""

from collections.abc import AsyncIterator
from enum import StrEnum

from upload_api.multipart.ingest import iter_chunks


class BodyType(StrEnum):
    """Body content type classification for request parsing."""

    RAW = "raw"
    MULTIPART = "multipart"


class MultipartBody:
    """Raw multipart/form-data request body as handed over by the framework."""

    __slots__ = ("body", "content_length", "content_type")

    def __init__(
        self,
        body: bytes | str | None = None,
        content_type: str | None = None,
        content_length: int | None = None,
    ) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.body = body or b""
        self.content_type = content_type
        self.content_length = content_length

    def __bool__(self) -> bool:
        return bool(self.body)

    def __len__(self) -> int:
        return len(self.body)

    def chunks(self, chunk_size: int) -> AsyncIterator[bytes]:
        """Stream the body in ``chunk_size`` slices."""
        return iter_chunks(self.body, chunk_size)
