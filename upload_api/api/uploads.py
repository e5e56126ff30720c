"""Upload form and multipart upload endpoints."""

from robyn import Response

from upload_api.core.logger import LogIcon, logger
from upload_api.core.router import Router, error_response
from upload_api.core.settings import UploadConfig
from upload_api.models.core import MultipartBody
from upload_api.models.uploads import UploadResult
from upload_api.uploads.orchestrator import UploadOrchestrator
from upload_api.uploads.storage import UploadsNamespace

ALLOWED_METHODS = "GET, POST"
UNSUPPORTED_METHODS = ("PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "TRACE", "CONNECT")

UPLOAD_FORM_HTML = """<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>Upload images</title></head>
  <body>
    <form action="/" method="post" enctype="multipart/form-data">
      <input type="file" name="fileupload" accept="image/*" multiple>
      <input type="submit" value="Upload">
    </form>
  </body>
</html>
"""

router = Router(__file__, prefix="")


def render_form() -> Response:
    return Response(status_code=200, headers={"content-type": "text/html; charset=utf-8"}, description=UPLOAD_FORM_HTML)


def method_not_allowed() -> Response:
    return error_response(405, "Method Not Allowed", {"allow": ALLOWED_METHODS})


async def process_upload(
    form: MultipartBody,
    config: UploadConfig,
    namespace: UploadsNamespace,
) -> list[UploadResult]:
    """Run one request body through the upload pipeline and return the per-file results."""
    logger.info(
        "Upload received",
        icon=LogIcon.UPLOAD,
        content_length=form.content_length,
        received=len(form),
    )
    orchestrator = UploadOrchestrator(config, namespace)
    outcome = await orchestrator.run(form.content_type, form.chunks(config.chunk_size))

    logger.info(
        "Upload processed",
        icon=LogIcon.COMPLETE if outcome.all_valid else LogIcon.WARNING,
        files=len(outcome.results),
        fields=outcome.field_count,
        persisted=outcome.persisted,
    )
    return outcome.results


@router.get("/")
async def upload_form() -> Response:
    return render_form()


@router.post("/")
async def upload_files(form: MultipartBody, global_dependencies) -> list[UploadResult]:
    state = global_dependencies["state"]
    return await process_upload(form, state.config, state.uploads)


async def reject_method() -> Response:
    return method_not_allowed()


def register_method_not_allowed(target: Router, endpoint: str) -> None:
    """Answer every method outside ``ALLOWED_METHODS`` on ``endpoint`` with 405."""
    for method in UNSUPPORTED_METHODS:
        getattr(target, method.lower())(endpoint)(reject_method)


register_method_not_allowed(router, "/")
