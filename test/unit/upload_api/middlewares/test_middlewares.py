"""Tests for middleware registration, the size guard and OpenAPI patching."""

from unittest.mock import MagicMock

import orjson
import pytest
from robyn import Response

from upload_api.core.router import MULTIPART_ENDPOINTS
from upload_api.middlewares.base import BaseMiddleware, MiddlewareHandler
from upload_api.middlewares.files import MULTIPART_REQUEST_BODY, FileUploadOpenAPIMiddleware, patch_openapi_spec
from upload_api.middlewares.limits import RequestSizeLimitMiddleware


# -----------------------------------------------------------------------------
# BaseMiddleware / MiddlewareHandler Tests
# -----------------------------------------------------------------------------


class TestBaseMiddleware:
    """Tests for BaseMiddleware hook detection."""

    def test_subclass_without_hooks_raises(self) -> None:
        with pytest.raises(TypeError, match="must implement at least one of before/after"):

            class Useless(BaseMiddleware):
                pass

    def test_hook_detection(self) -> None:
        assert RequestSizeLimitMiddleware.has_before()
        assert not RequestSizeLimitMiddleware.has_after()
        assert FileUploadOpenAPIMiddleware.has_after()
        assert not FileUploadOpenAPIMiddleware.has_before()

    def test_endpoints_override(self) -> None:
        assert RequestSizeLimitMiddleware(10, endpoints=["/"]).endpoints == frozenset({"/"})
        assert FileUploadOpenAPIMiddleware().endpoints == frozenset({"/openapi.json"})


class TestMiddlewareHandler:
    """Tests for MiddlewareHandler registration."""

    def test_registers_only_implemented_hooks(self) -> None:
        app = MagicMock()
        handler = MiddlewareHandler(app)

        result = handler.register(RequestSizeLimitMiddleware(10, endpoints=["/"]))

        assert result is handler
        app.before_request.assert_called_once_with("/")
        app.after_request.assert_not_called()
        assert len(handler.middlewares) == 1

    def test_defaults_to_all_routes(self) -> None:
        app = MagicMock()
        app.get_all_routes.return_value = [("GET", "/"), ("POST", "/"), ("GET", "/health")]

        MiddlewareHandler(app).register(RequestSizeLimitMiddleware(10))

        registered = {call.args[0] for call in app.before_request.call_args_list}
        assert registered == {"/", "/health"}


# -----------------------------------------------------------------------------
# RequestSizeLimitMiddleware Tests
# -----------------------------------------------------------------------------


class TestRequestSizeLimitMiddleware:
    """Tests for the declared Content-Length guard."""

    def test_within_limit_passes_through(self, make_mock_request) -> None:
        request = make_mock_request(headers={"Content-Length": "100"})
        assert RequestSizeLimitMiddleware(100).before(request) is request

    def test_missing_length_passes_through(self, make_mock_request) -> None:
        request = make_mock_request()
        assert RequestSizeLimitMiddleware(100).before(request) is request

    def test_over_limit_is_rejected(self, make_mock_request) -> None:
        request = make_mock_request(headers={"Content-Length": "101"})

        result = RequestSizeLimitMiddleware(100).before(request)

        assert isinstance(result, Response)
        assert result.status_code == 413
        assert orjson.loads(result.description) == {"error": "Total request size exceeds limit"}


# -----------------------------------------------------------------------------
# OpenAPI patching Tests
# -----------------------------------------------------------------------------


class TestPatchOpenAPISpec:
    """Tests for patch_openapi_spec."""

    def test_patches_post_operation(self) -> None:
        spec = {"paths": {"/": {"post": {"summary": "upload"}, "get": {"summary": "form"}}}}

        patched = patch_openapi_spec(spec, {"/"})

        assert patched["paths"]["/"]["post"]["requestBody"] == MULTIPART_REQUEST_BODY
        assert "requestBody" not in patched["paths"]["/"]["get"]

    def test_unknown_endpoint_is_ignored(self) -> None:
        spec = {"paths": {"/health": {"get": {}}}}
        assert patch_openapi_spec(spec, {"/"}) == {"paths": {"/health": {"get": {}}}}


class TestFileUploadOpenAPIMiddleware:
    """Tests for the OpenAPI after hook."""

    @pytest.fixture(autouse=True)
    def multipart_endpoint(self):
        added = "/" not in MULTIPART_ENDPOINTS
        MULTIPART_ENDPOINTS.add("/")
        yield
        if added:
            MULTIPART_ENDPOINTS.discard("/")

    def test_patches_document(self) -> None:
        document = {"paths": {"/": {"post": {}}}}
        response = Response(status_code=200, headers={}, description=orjson.dumps(document).decode())

        result = FileUploadOpenAPIMiddleware().after(response)

        patched = orjson.loads(result.description)
        assert patched["paths"]["/"]["post"]["requestBody"]["content"]["multipart/form-data"]

    def test_invalid_json_is_left_alone(self) -> None:
        response = Response(status_code=200, headers={}, description="not json")
        result = FileUploadOpenAPIMiddleware().after(response)
        assert result.description == "not json"
