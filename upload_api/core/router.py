"""Router with automatic body injection, error mapping and response handling."""

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any
from uuid import uuid4

import orjson
from asgi_correlation_id import correlation_id
from pydantic import BaseModel
from robyn import Request, Response, SubRouter, status_codes
from robyn.robyn import HttpMethod

from upload_api.core.errors import GENERIC_FAILURE_MESSAGE, UploadError
from upload_api.core.logger import LogIcon, logger
from upload_api.models.core import BodyType, MultipartBody

MULTIPART_ENDPOINTS: set[str] = set()
REQUEST_ID_HEADER = "x-request-id"
JSON_HEADERS = {"content-type": "application/json"}


def parse_endpoint_signature(sig: inspect.Signature) -> dict[str, BodyType]:
    """Parse function signature for parameters fed from the request body."""
    parsed: dict[str, BodyType] = {}

    for name, param in sig.parameters.items():
        match param.annotation:
            case annotation if annotation is MultipartBody:
                parsed[name] = BodyType.MULTIPART
            case annotation if annotation is bytes:
                parsed[name] = BodyType.RAW

    return parsed


def parse_content_length(value: str | None) -> int | None:
    """Declared Content-Length, or None if absent or unparsable."""
    if value is None:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length >= 0 else None


def _request_body(request: Request) -> bytes:
    body = getattr(request, "body", None) or b""
    return body.encode("utf-8") if isinstance(body, str) else bytes(body)


def parse_request_body(
    body_config: dict[str, BodyType],
    request: Request,
    kwargs: dict[str, Any],
) -> None:
    """Inject raw or multipart body parameters."""
    for param_name, body_type in body_config.items():
        match body_type:
            case BodyType.MULTIPART:
                kwargs[param_name] = MultipartBody(
                    body=_request_body(request),
                    content_type=request.headers.get("content-type"),
                    content_length=parse_content_length(request.headers.get("content-length")),
                )
            case BodyType.RAW:
                kwargs[param_name] = _request_body(request)


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> Response:
    return Response(
        status_code=status_code,
        headers={**JSON_HEADERS, **(headers or {})},
        description=orjson.dumps({"error": message}).decode(),
    )


def _jsonable(item: Any) -> Any:
    if isinstance(item, BaseModel):
        return item.model_dump(mode="json", by_alias=True, exclude_none=True)
    return item


def parse_response(result: Any, headers: dict[str, str] | None = None) -> Response:
    """Convert handler result to Response."""
    extra = headers or {}
    match result:
        case Response():
            return result
        case BaseModel():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={**JSON_HEADERS, **extra},
                description=result.model_dump_json(by_alias=True, exclude_none=True),
            )
        case dict() | list() | tuple():
            payload = [_jsonable(item) for item in result] if not isinstance(result, dict) else result
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={**JSON_HEADERS, **extra},
                description=orjson.dumps(payload).decode(),
            )
        case _:
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers=dict(extra),
                description=str(result),
            )


HTTP_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.DELETE,
    HttpMethod.PATCH,
    HttpMethod.HEAD,
    HttpMethod.OPTIONS,
    HttpMethod.TRACE,
    HttpMethod.CONNECT,
)


async def call_handler(handler: Callable, request: Request, h_kwargs: dict[str, Any]) -> Response:
    """Run a handler under a request correlation id, mapping pipeline errors to responses."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
    token = correlation_id.set(request_id)
    id_header = {REQUEST_ID_HEADER: request_id}
    try:
        result = await handler(**h_kwargs)
        return parse_response(result, id_header)
    except UploadError as ex:
        logger.warning(
            "Request failed",
            icon=LogIcon.ERROR,
            error=type(ex).__name__,
            detail=str(ex),
            status=ex.status_code,
        )
        return error_response(ex.status_code, ex.public_message, id_header)
    except Exception:
        logger.exception("Unhandled error while processing request", icon=LogIcon.CRITICAL)
        return error_response(status_codes.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_FAILURE_MESSAGE, id_header)
    finally:
        correlation_id.reset(token)


def _create_method_wrapper(original_method: Callable, router_prefix: str = "") -> Callable:
    @wraps(original_method)
    def method_wrapper(*args, **kwargs) -> Callable:
        endpoint = args[0] if args else kwargs.get("endpoint", "")
        decorator = original_method(*args, **kwargs)

        def handler_decorator(handler: Callable) -> Callable:
            sig = inspect.signature(handler)
            body_config = parse_endpoint_signature(sig)
            has_request_param = "request" in sig.parameters

            if BodyType.MULTIPART in body_config.values():
                full_path = f"{router_prefix}{endpoint}".replace("//", "/")
                MULTIPART_ENDPOINTS.add(full_path)

            @wraps(handler)
            async def wrapped_handler(request: Request, **h_kwargs):
                parse_request_body(body_config, request, h_kwargs)

                # Pass request to handler only if it declared it
                if has_request_param:
                    h_kwargs["request"] = request

                return await call_handler(handler, request, h_kwargs)

            # Build signature: always include request for Robyn injection
            new_params = [inspect.Parameter("request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request)]
            for name, param in sig.parameters.items():
                if name == "request" or name in body_config:
                    continue
                new_params.append(param)

            wrapped_handler.__signature__ = sig.replace(parameters=new_params)  # type: ignore[attr-defined]
            return decorator(wrapped_handler)

        return handler_decorator

    return method_wrapper


class Router(SubRouter):
    """Enhanced SubRouter with body injection, error mapping and response handling."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._prefix = kwargs.get("prefix", "")
        self._wrap_methods()

    def _wrap_methods(self) -> None:
        """Wrap HTTP methods with parsing logic."""
        for method in HTTP_METHODS:
            method_name = str(method).split(".")[-1].lower()
            if hasattr(self, method_name):
                original_method = getattr(self, method_name)
                wrapped_method = _create_method_wrapper(original_method, self._prefix)
                setattr(self, method_name, wrapped_method)
