"""Error taxonomy for the upload pipeline.

Request-fatal errors carry the HTTP status they map to and a message that is
safe to show to the client. Per-file rejections are recovered by the
orchestrator and reported in the result list instead of aborting the request.
"""

GENERIC_FAILURE_MESSAGE = "An error occurred while processing the request"


class UploadError(Exception):
    """Base error for the upload pipeline."""

    status_code: int = 500
    public_message: str = GENERIC_FAILURE_MESSAGE
    expose_detail: bool = False

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.public_message)
        self.detail = detail
        if detail is not None and self.expose_detail:
            self.public_message = detail


class TransportError(UploadError):
    """Reading the request body failed."""

    public_message = GENERIC_FAILURE_MESSAGE


class RequestTooLarge(UploadError):
    """Cumulative request size exceeded the configured ceiling."""

    status_code = 413
    public_message = "Total request size exceeds limit"

    def __init__(self, limit: int) -> None:
        super().__init__()
        self.limit = limit


class BoundaryNotFound(UploadError):
    """The boundary is missing from the Content-Type header or the body."""

    status_code = 400
    public_message = "Boundary not found"
    expose_detail = True


class MalformedMultipart(UploadError):
    """The body does not follow multipart/form-data framing."""

    status_code = 400
    public_message = "Malformed multipart data"
    expose_detail = True


class PersistenceFailure(UploadError):
    """Writing an approved file to the uploads namespace failed."""

    public_message = GENERIC_FAILURE_MESSAGE


class FileRejected(Exception):
    """A single file failed validation. Recoverable, reported per file."""

    def __init__(self, filename: str, message: str) -> None:
        super().__init__(message)
        self.filename = filename
        self.message = message


class FileTooLarge(FileRejected):
    def __init__(self, filename: str, size: int, limit: int) -> None:
        super().__init__(filename, f"File size exceeds {limit / 1024:.2f} Kb limit")
        self.size = size
        self.limit = limit


class InvalidContentType(FileRejected):
    def __init__(self, filename: str, detected: str | None) -> None:
        super().__init__(filename, "Invalid file type for upload")
        self.detected = detected
