"""Upload pipeline: receive, split, validate all, then persist all."""

import asyncio
from collections.abc import AsyncIterable
from dataclasses import dataclass, field
from enum import StrEnum

from upload_api.core.errors import FileRejected, PersistenceFailure
from upload_api.core.logger import LogIcon, logger
from upload_api.core.settings import UploadConfig
from upload_api.models.uploads import UploadResult
from upload_api.multipart.headers import extract_boundary
from upload_api.multipart.ingest import StreamIngest
from upload_api.multipart.models import Part
from upload_api.multipart.parser import parse_parts
from upload_api.multipart.splitter import BoundarySplitter
from upload_api.uploads.naming import NameResolver
from upload_api.uploads.storage import UploadsNamespace
from upload_api.uploads.validator import ContentValidator

MAX_WRITE_ATTEMPTS = 100


class UploadState(StrEnum):
    RECEIVING = "receiving"
    SPLITTING = "splitting"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    REJECTED = "rejected"
    RESPONDING = "responding"


@dataclass
class UploadOutcome:
    """Aggregated per-file results of one request, in payload order."""

    results: list[UploadResult] = field(default_factory=list)
    field_count: int = 0
    persisted: bool = False

    @property
    def all_valid(self) -> bool:
        return all(result.ok for result in self.results)

    def to_payload(self) -> list[dict]:
        return [result.to_payload() for result in self.results]


@dataclass(slots=True)
class _Pending:
    part: Part
    result: UploadResult


class UploadOrchestrator:
    """Runs one multipart upload request through the pipeline.

    Files are written only once every file part passed validation, so a late
    rejection never leaves half a request on disk. Writes that already
    happened are not rolled back if a later write fails.
    """

    def __init__(self, config: UploadConfig, namespace: UploadsNamespace) -> None:
        self.config = config
        self.namespace = namespace
        self.validator = ContentValidator(config)
        self.resolver = NameResolver(namespace)
        self.state = UploadState.RECEIVING

    def _transition(self, state: UploadState) -> None:
        logger.debug("Upload state change", icon=LogIcon.PROCESSING, source=self.state, target=state)
        self.state = state

    async def receive(self, content_type: str | None, chunks: AsyncIterable[bytes]) -> list[Part]:
        """Capture the body and decode it into parts. Raises on any framing problem."""
        boundary = extract_boundary(content_type)
        data = await StreamIngest(self.config.max_request_size).collect(chunks)

        self._transition(UploadState.SPLITTING)
        raw_parts = BoundarySplitter(boundary).split(data)
        parts = parse_parts(raw_parts)

        logger.info(
            "Multipart body decoded",
            icon=LogIcon.PARSING,
            size=len(data),
            parts=len(parts),
            files=sum(part.is_file for part in parts),
        )
        return parts

    def validate(self, parts: list[Part], outcome: UploadOutcome) -> list[_Pending]:
        """Check and name every file part. Rejections become error results."""
        self._transition(UploadState.VALIDATING)
        pending: list[_Pending] = []

        for part in parts:
            if not part.is_file:
                outcome.field_count += 1
                logger.debug("Form field skipped", icon=LogIcon.PARSING, field=part.name)
                continue

            try:
                validated = self.validator.validate(part)
            except FileRejected as rejection:
                logger.warning(
                    "File rejected",
                    icon=LogIcon.FORBIDDEN,
                    upload=rejection.filename,
                    reason=rejection.message,
                )
                outcome.results.append(UploadResult.rejected(rejection.filename, rejection.message))
                continue

            name = self.resolver.resolve(part.filename or "")
            result = UploadResult.approved(name, validated.mime_type, validated.size)
            outcome.results.append(result)
            pending.append(_Pending(part=part, result=result))

        return pending

    def _write(self, name: str, original: str, data: bytes) -> str:
        """Write with exclusive create, re-resolving the name if another writer claimed it."""
        for _ in range(MAX_WRITE_ATTEMPTS):
            try:
                self.namespace.write_exclusive(name, data)
                return name
            except FileExistsError:
                logger.warning("Name claimed concurrently, re-resolving", icon=LogIcon.STORAGE, upload=name)
                name = self.resolver.resolve(original)
        raise PersistenceFailure(f"Could not find a free name after {MAX_WRITE_ATTEMPTS} attempts")

    async def persist(self, pending: list[_Pending]) -> None:
        self._transition(UploadState.PERSISTING)
        for item in pending:
            try:
                name = await asyncio.to_thread(
                    self._write, item.result.filename, item.part.filename or "", item.part.body
                )
            except OSError as ex:
                logger.exception("Failed to persist upload", icon=LogIcon.ERROR, upload=item.result.filename)
                raise PersistenceFailure(f"Failed writing {item.result.filename}: {ex}") from ex

            item.result.mark_uploaded(name)
            logger.info("File uploaded", icon=LogIcon.UPLOAD, upload=name, size=item.result.size)

    async def run(self, content_type: str | None, chunks: AsyncIterable[bytes]) -> UploadOutcome:
        """Process one request. Request-fatal errors propagate as :class:`UploadError`."""
        outcome = UploadOutcome()
        parts = await self.receive(content_type, chunks)
        pending = self.validate(parts, outcome)

        if outcome.all_valid:
            await self.persist(pending)
            outcome.persisted = bool(pending)
        else:
            self._transition(UploadState.REJECTED)
            logger.warning(
                "Upload rejected, nothing persisted",
                icon=LogIcon.WARNING,
                rejected=sum(not result.ok for result in outcome.results),
                approved=len(pending),
            )

        self._transition(UploadState.RESPONDING)
        return outcome
