"""Upload result models returned to the client."""

from enum import StrEnum

from pydantic import BaseModel, Field


class UploadStatus(StrEnum):
    """Lifecycle of an accepted file."""

    APPROVED = "File approved for upload"
    UPLOADED = "Uploaded successfully"


def bytes_to_kilobytes(size: int) -> str:
    return f"{size / 1024:.2f}"


class UploadResult(BaseModel):
    """Outcome for one file part: either accepted (type/size/status) or rejected (error)."""

    filename: str
    mime_type: str | None = Field(default=None, serialization_alias="type")
    size: str | None = None
    status: UploadStatus | None = None
    error: str | None = None
    size_bytes: int | None = Field(default=None, exclude=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def approved(cls, filename: str, mime_type: str, size_bytes: int) -> "UploadResult":
        return cls(
            filename=filename,
            mime_type=mime_type,
            size=f"{bytes_to_kilobytes(size_bytes)} Kb",
            size_bytes=size_bytes,
            status=UploadStatus.APPROVED,
        )

    @classmethod
    def rejected(cls, filename: str, error: str) -> "UploadResult":
        return cls(filename=filename, error=error)

    def mark_uploaded(self, filename: str | None = None) -> None:
        if filename:
            self.filename = filename
        self.status = UploadStatus.UPLOADED

    def to_payload(self) -> dict:
        """JSON shape: ``{filename, type, size, status}`` or ``{filename, error}``."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
