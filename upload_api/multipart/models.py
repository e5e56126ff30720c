"""Data structures produced while decoding a multipart/form-data body."""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class DispositionFields:
    """Parameters of a part's Content-Disposition header."""

    disposition: str = ""
    name: str | None = None
    filename: str | None = None


@dataclass(frozen=True, slots=True)
class RawPart:
    """Byte range ``[start, end)`` of one part inside the request body."""

    start: int
    end: int
    data: bytes = field(repr=False)

    def __len__(self) -> int:
        return self.end - self.start


HeaderValue = str | DispositionFields


@dataclass(slots=True)
class Part:
    """A decoded part: case-insensitive headers, body and optional filename."""

    headers: dict[str, HeaderValue]
    body: bytes = field(repr=False)
    filename: str | None = None

    @property
    def is_file(self) -> bool:
        return bool(self.filename)

    @property
    def name(self) -> str | None:
        disposition = self.headers.get("content-disposition")
        return disposition.name if isinstance(disposition, DispositionFields) else None

    @property
    def declared_type(self) -> str | None:
        """Client supplied Content-Type. Informational only, never trusted."""
        value = self.headers.get("content-type")
        return value if isinstance(value, str) else None
