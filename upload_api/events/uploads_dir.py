"""Uploads directory lifespan event."""

from upload_api.core.lifespan import BaseEvent
from upload_api.core.logger import LogIcon, logger
from upload_api.uploads.storage import UploadsNamespace


class UploadsDirEvent(BaseEvent[UploadsNamespace]):
    """Creates the uploads directory on startup and publishes its namespace."""

    name = "uploads"

    async def startup(self) -> UploadsNamespace:
        namespace = UploadsNamespace(self.config.uploads_path).ensure()
        logger.info(
            "Uploads directory ready",
            icon=LogIcon.STORAGE,
            path=str(namespace.root),
            files=len(namespace.names()),
        )
        return namespace
