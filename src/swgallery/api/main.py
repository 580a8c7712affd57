"""swgallery — FastAPI host for the offline gallery request handler.

This module plays the part of the runtime that intercepts requests: it owns
the process lifecycle, calls the worker's ``install``/``activate`` hooks,
and forwards every request under the base path to
:class:`~swgallery.worker.lifecycle.GalleryWorker`.

Architecture
------------
- **Routing** is not done by FastAPI.  A single catch-all route hands the
  request to the worker's own ordered routing table.
- **Storage** is a SQLite file under ``config.data_dir`` holding both the
  blob table and the versioned response cache table.
- **Dependencies** are built once in the lifespan and kept on ``app.state``.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
GET       ``/sw/images``                List image retrieval URLs
GET       ``/sw/image/{id}``            Serve image bytes
POST      ``/sw/upload``                Upload an image (multipart ``file``)
DELETE    ``/sw/image/{id}``            Delete an image
========  ============================  ====================================

Usage
-----
CLI (installed entry point)::

    swgallery

Direct invocation::

    python -m swgallery.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from urllib.parse import quote

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from swgallery import __version__
from swgallery.core.config import GalleryConfig
from swgallery.worker.handlers import build_context
from swgallery.worker.lifecycle import GalleryWorker
from swgallery.worker.messages import FormValue, GalleryRequest, UploadedFile

logger = logging.getLogger(__name__)

_FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def _read_form(request: Request) -> dict[str, list[FormValue]] | None:
    """Parse a form body into plain values, or ``None`` when there is no form.

    Malformed multipart bodies are treated like a missing form so the upload
    handler answers with its own validation error.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith(_FORM_CONTENT_TYPES):
        return None

    try:
        form = await request.form()
    except StarletteHTTPException as e:
        logger.warning(f"Could not parse form body: {e.detail}")
        return None

    fields: dict[str, list[FormValue]] = {}
    for name, value in form.multi_items():
        if isinstance(value, UploadFile):
            fields.setdefault(name, []).append(
                UploadedFile(
                    filename=value.filename or "",
                    content=await value.read(),
                    content_type=value.content_type,
                )
            )
        else:
            fields.setdefault(name, []).append(value)
    await form.close()
    return fields


def request_url(request: Request) -> str:
    """Full request URL with the path still percent-encoded as sent.

    ``request.url`` is rebuilt from the decoded ``scope["path"]``; the core
    expects the encoded target so that it decodes path segments exactly once
    and cache keys match the quoted URLs built on delete.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path:
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
    else:
        path = quote(request.url.path)
    return str(request.url.replace(path=path))


async def to_gallery_request(request: Request) -> GalleryRequest:
    """Translate a Starlette request into the core's request type."""
    return GalleryRequest(
        method=request.method,
        url=request_url(request),
        mode=request.headers.get("sec-fetch-mode", ""),
        destination=request.headers.get("sec-fetch-dest", ""),
        referrer=request.headers.get("referer", ""),
        form=await _read_form(request) if request.method == "POST" else None,
    )


def create_app(
    config: GalleryConfig | None = None,
    clock: Callable[[], int] | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Gallery configuration.  Defaults to the global instance.
        clock: Optional millisecond clock for identifier generation.

    Returns:
        The configured FastAPI app.
    """
    if config is None:
        from swgallery.core.config import config as default_config

        config = default_config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Build dependencies, drop stale cache versions and activate the worker."""
        context = build_context(config, clock=clock)
        await context.response_cache.purge_other_versions()

        worker = GalleryWorker(context)
        worker.install()
        worker.activate()
        app.state.worker = worker

        yield

        logger.info("Gallery worker stopped.")

    app = FastAPI(
        title="swgallery",
        description="Offline image gallery served by a local request handler.",
        version=__version__,
        lifespan=lifespan,
    )

    # The gallery UI may be served from a different port during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.api_route(f"{config.base_path}/{{path:path}}", methods=["GET", "POST", "DELETE"])
    async def intercept(request: Request) -> Response:
        """Forward the request to the gallery worker."""
        worker: GalleryWorker = request.app.state.worker
        result = await worker.fetch(await to_gallery_request(request))
        if result is None:
            return Response(
                content=b'{"error":"Not found"}',
                status_code=404,
                media_type="application/json",
            )
        return Response(content=result.body, status_code=result.status, headers=result.headers)

    return app


def main() -> None:
    """Launch the uvicorn ASGI server.

    Host, port and log level come from :data:`~swgallery.core.config.config`
    (``SWGALLERY_SERVER_HOST``, ``SWGALLERY_SERVER_PORT``,
    ``SWGALLERY_LOG_LEVEL``).

    This function is registered as the ``swgallery`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    from swgallery.core.config import config

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "swgallery.api.main:create_app",
        factory=True,
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
