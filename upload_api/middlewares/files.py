"""File upload middleware for OpenAPI multipart/form-data patching."""

import orjson
from robyn import Response

from upload_api.core.logger import LogIcon, logger
from upload_api.core.router import MULTIPART_ENDPOINTS
from upload_api.middlewares.base import BaseMiddleware

MULTIPART_REQUEST_BODY = {
    "content": {
        "multipart/form-data": {
            "schema": {
                "type": "object",
                "properties": {
                    "fileupload": {
                        "type": "array",
                        "items": {"type": "string", "format": "binary"},
                        "description": "Image files to upload",
                    }
                },
                "required": ["fileupload"],
            }
        }
    },
    "required": True,
}


def patch_openapi_spec(spec: dict, endpoints: set[str] | frozenset[str]) -> dict:
    """Document every multipart endpoint's POST body as multipart/form-data."""
    paths = spec.get("paths", {})
    for endpoint in endpoints:
        operation = paths.get(endpoint, {}).get("post")
        if operation is not None:
            operation["requestBody"] = MULTIPART_REQUEST_BODY
    return spec


class FileUploadOpenAPIMiddleware(BaseMiddleware):
    """Patches OpenAPI responses to use multipart/form-data for file upload endpoints."""

    endpoints = frozenset(["/openapi.json"])

    def after(self, response: Response) -> Response:
        """Patch OpenAPI spec with multipart/form-data for file upload endpoints."""
        if not MULTIPART_ENDPOINTS:
            return response

        try:
            spec = orjson.loads(response.description)
        except orjson.JSONDecodeError:
            logger.warning("OpenAPI document is not valid JSON, left unpatched", icon=LogIcon.WARNING)
            return response

        response.description = orjson.dumps(patch_openapi_spec(spec, MULTIPART_ENDPOINTS)).decode()
        return response
