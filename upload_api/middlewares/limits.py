"""Request size guard based on the declared Content-Length."""

from robyn import Request, Response

from upload_api.core.errors import RequestTooLarge
from upload_api.core.logger import LogIcon, logger
from upload_api.core.router import error_response, parse_content_length
from upload_api.middlewares.base import BaseMiddleware


class RequestSizeLimitMiddleware(BaseMiddleware):
    """Answers 413 before the handler runs when Content-Length already exceeds the ceiling.

    The body stream is still measured by the upload pipeline, since the
    declared length may be missing or wrong.
    """

    def __init__(self, max_request_size: int, endpoints: frozenset[str] | list[str] | None = None) -> None:
        super().__init__(endpoints)
        self.max_request_size = max_request_size

    def before(self, request: Request) -> Request | Response:
        declared = parse_content_length(request.headers.get("content-length"))
        if declared is None or declared <= self.max_request_size:
            return request

        logger.warning(
            "Declared request size exceeds limit",
            icon=LogIcon.FORBIDDEN,
            declared=declared,
            limit=self.max_request_size,
        )
        error = RequestTooLarge(self.max_request_size)
        return error_response(error.status_code, error.public_message)
