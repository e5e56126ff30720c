"""Health check endpoint."""

from pydantic import BaseModel

from upload_api.core.logger import LogIcon, logger
from upload_api.core.router import Router
from upload_api.core.settings import settings as st
from upload_api.uploads.storage import UploadsNamespace

router = Router(__file__, prefix="")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    service: str
    version: str
    uploads_writable: bool


def check_health(namespace: UploadsNamespace | None) -> HealthResponse:
    writable = namespace is not None and namespace.is_writable()
    return HealthResponse(
        status="healthy" if writable else "degraded",
        service=st.API_NAME,
        version=st.API_VERSION,
        uploads_writable=writable,
    )


@router.get("/health")
async def health_check(global_dependencies) -> HealthResponse:
    logger.info("Health check requested", icon=LogIcon.HEALTHCHECK)
    return check_health(global_dependencies["state"].get("uploads"))
