"""Per-file size and content-type policy."""

from dataclasses import dataclass

from upload_api.core.errors import FileTooLarge, InvalidContentType
from upload_api.core.logger import LogIcon, logger
from upload_api.core.settings import UploadConfig
from upload_api.multipart.models import Part
from upload_api.uploads.signatures import is_allowed, sniff_mime_type


@dataclass(frozen=True, slots=True)
class ValidatedFile:
    """A file part that passed every check, with its sniffed type."""

    part: Part
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.part.body)


class ContentValidator:
    """Checks a file part's size ceiling and sniffed type against the allow-list."""

    def __init__(self, config: UploadConfig) -> None:
        self.max_file_size = config.max_file_size
        self.allowed_content_types = config.allowed_content_types

    def check_size(self, part: Part) -> None:
        size = len(part.body)
        if size > self.max_file_size:
            raise FileTooLarge(part.filename or "", size=size, limit=self.max_file_size)

    def check_type(self, part: Part) -> str:
        detected = sniff_mime_type(part.body)
        if not is_allowed(detected, self.allowed_content_types):
            logger.warning(
                "Rejected file type",
                icon=LogIcon.THREAT,
                upload=part.filename,
                detected=detected,
                declared=part.declared_type,
            )
            raise InvalidContentType(part.filename or "", detected)
        return detected

    def validate(self, part: Part) -> ValidatedFile:
        """Run both checks. Raises a :class:`FileRejected` subclass on failure."""
        self.check_size(part)
        mime_type = self.check_type(part)
        return ValidatedFile(part=part, mime_type=mime_type)
