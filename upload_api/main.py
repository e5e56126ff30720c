"""robyn-upload-api - multipart image upload service powered by Robyn."""

from robyn import Robyn

from upload_api.api.health import router as health_router
from upload_api.api.uploads import router as uploads_router
from upload_api.core.lifespan import create_lifespan
from upload_api.core.logger import logger
from upload_api.core.settings import settings as st
from upload_api.events.uploads_dir import UploadsDirEvent
from upload_api.middlewares.base import MiddlewareHandler
from upload_api.middlewares.files import FileUploadOpenAPIMiddleware
from upload_api.middlewares.limits import RequestSizeLimitMiddleware

app = Robyn(__file__)
upload_config = st.upload_config()

# Lifespan events
lifespan = create_lifespan(app, upload_config)
lifespan.register(UploadsDirEvent)

app.startup_handler(lifespan.startup)
app.shutdown_handler(lifespan.shutdown)

# Routers
app.include_router(health_router)
app.include_router(uploads_router)

# Middlewares
middlewares = MiddlewareHandler(app)
middlewares.register(RequestSizeLimitMiddleware(upload_config.max_request_size, endpoints=["/"]))
middlewares.register(FileUploadOpenAPIMiddleware())


def main() -> None:
    logger.info(
        "🚀 STARTING %s | HOST=%s | PORT=%s | UPLOADS=%s",
        st.API_NAME,
        st.API_HOST,
        st.API_PORT,
        upload_config.uploads_path,
    )
    app.start(host=st.API_HOST, port=st.API_PORT)


if __name__ == "__main__":
    main()
