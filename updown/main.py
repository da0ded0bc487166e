"""FastAPI app entrypoint.

Exposes:
- GET  /          directory listing with upload form
- GET  /download  file download
- POST /upload    multipart file upload

``create_app`` builds an app around explicit settings; the module-level
``app`` is configured from the environment for plain ASGI servers
(``uvicorn updown.main:app``).
"""

import logging
import uuid
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from updown.core.config import Settings
from updown.core.logging import ACCESS_LOGGER, request_id_var, setup_logging
from updown.routers.download import router as download_router
from updown.routers.listing import router as listing_router
from updown.routers.upload import router as upload_router


async def empty_http_error(request: Request, exc: StarletteHTTPException) -> Response:
    # Error bodies stay empty; details go to the log
    return Response(status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def log_requests(request: Request, call_next):
    rid = request.headers.get("x-request-id") or uuid.uuid4().hex
    token = request_id_var.set(rid)
    try:
        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"
        logging.getLogger(ACCESS_LOGGER).info("%s %s %s", datetime.now().isoformat(), request.method, url)
        response = await call_next(request)
        response.headers["x-request-id"] = rid
        return response
    finally:
        request_id_var.reset(token)


def create_app(settings: Settings) -> FastAPI:
    app = FastAPI(title="Updown", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings

    app.add_exception_handler(StarletteHTTPException, empty_http_error)
    app.middleware("http")(log_requests)

    app.include_router(listing_router)
    app.include_router(download_router)
    app.include_router(upload_router)
    return app


setup_logging()
app = create_app(Settings.from_env())
