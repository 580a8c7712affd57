"""Request handlers for the gallery endpoints and the static routing table.

Endpoints
---------
========  ======================  =======================================
Method    Path                    Purpose
========  ======================  =======================================
GET       ``/sw/images``          List retrieval URLs of every image
GET       ``/sw/image/:id``       Serve image bytes (read-through cache)
POST      ``/sw/upload``          Normalize and store an uploaded file
DELETE    ``/sw/image/:id``       Delete an image and evict its response
========  ======================  =======================================

All dependencies arrive through :class:`GalleryContext`, which is built
once at process start (see :func:`build_context`) and handed to
:func:`build_router`.  Nothing here reaches for module-level state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote

from swgallery.api.models import DeleteResponse, UploadResponse, parse_upload_form
from swgallery.core.blob_store import BlobStore
from swgallery.core.config import GalleryConfig
from swgallery.core.errors import NotFoundError
from swgallery.core.identifiers import IdentifierGenerator
from swgallery.core.normalizer import CANONICAL_EXTENSION, ContentNormalizer
from swgallery.core.response_cache import CachedResponse, ResponseCache
from swgallery.worker.messages import GalleryRequest, GalleryResponse
from swgallery.worker.router import Router

logger = logging.getLogger(__name__)

# Extension → Content-Type for served images.  Unknown extensions are served
# as the canonical converted type.
CONTENT_TYPES: dict[str, str] = {
    "gif": "image/gif",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
}
DEFAULT_CONTENT_TYPE = CONTENT_TYPES[CANONICAL_EXTENSION]


def content_type_for(image_id: str) -> str:
    """Infer the Content-Type of a stored image from its identifier."""
    _, dot, extension = image_id.rpartition(".")
    if not dot:
        return DEFAULT_CONTENT_TYPE
    return CONTENT_TYPES.get(extension.lower(), DEFAULT_CONTENT_TYPE)


@dataclass
class GalleryContext:
    """Explicit dependencies shared by every handler.

    Attributes:
        blob_store: Authoritative image storage.
        response_cache: Read-through cache for the image retrieval path.
        normalizer: PNG/JPEG → WebP converter.
        identifiers: Storage key generator.
        base_path: Route prefix, e.g. ``/sw``.
        cache_control: ``Cache-Control`` header for served images.
    """

    blob_store: BlobStore
    response_cache: ResponseCache
    normalizer: ContentNormalizer
    identifiers: IdentifierGenerator
    base_path: str = "/sw"
    cache_control: str = "public, max-age=31536000"

    def image_path(self, image_id: str) -> str:
        """Percent-encoded retrieval path for *image_id*, usable as a URL as is."""
        return f"{self.base_path}/image/{quote(image_id, safe='')}"


def build_context(config: GalleryConfig, clock=None) -> GalleryContext:
    """Construct every dependency from *config*.

    Args:
        config: Gallery configuration.
        clock: Optional millisecond clock for the identifier generator.

    Returns:
        A ready-to-use :class:`GalleryContext`.
    """
    return GalleryContext(
        blob_store=BlobStore(config.database_path, timeout=config.sqlite_timeout),
        response_cache=ResponseCache(
            config.database_path,
            name=config.cache_name,
            timeout=config.sqlite_timeout,
        ),
        normalizer=ContentNormalizer(quality=config.webp_quality),
        identifiers=IdentifierGenerator(clock),
        base_path=config.base_path.rstrip("/"),
        cache_control=config.cache_control,
    )


class GalleryHandlers:
    """Upload, List, Get and Delete handlers bound to one context."""

    def __init__(self, context: GalleryContext) -> None:
        self.context = context

    async def upload(self, request: GalleryRequest, params: dict[str, str]) -> GalleryResponse:
        """Normalize, name and persist the uploaded file.

        Raises:
            UploadValidationError: If the form lacks a single ``file`` field.
            StorageError: If the blob cannot be written.
        """
        form = parse_upload_form(request.form)
        upload = form.file

        outcome = await self.context.normalizer.normalize_async(upload.content, upload.filename)
        image_id = self.context.identifiers.generate(upload.filename, outcome.extension)
        await self.context.blob_store.put(image_id, outcome.data)

        logger.info(
            f"Stored upload {upload.filename!r} as {image_id} "
            f"({'converted' if outcome.converted else 'unchanged'}, {len(outcome.data)} bytes)"
        )
        return GalleryResponse.json(UploadResponse(path=self.context.image_path(image_id)).model_dump())

    async def list_images(self, request: GalleryRequest, params: dict[str, str]) -> GalleryResponse:
        """Return the retrieval path of every stored image (unordered)."""
        keys = await self.context.blob_store.list_keys()
        return GalleryResponse.json([self.context.image_path(key) for key in keys])

    async def get_image(self, request: GalleryRequest, params: dict[str, str]) -> GalleryResponse:
        """Serve an image through the read-through response cache.

        The cache is keyed by the full request URL.  On a miss the blob is
        read, wrapped into a response and cached before being returned.

        Raises:
            NotFoundError: If no blob exists for the identifier.
        """
        image_id = params["id"]
        cache = self.context.response_cache

        cached = await cache.lookup(request.url)
        if cached is not None:
            logger.debug(f"Response cache hit for {request.url}")
            return GalleryResponse.binary(cached.body, cached.content_type, cached.cache_control)

        data = await self.context.blob_store.get(image_id)
        if data is None:
            raise NotFoundError()

        response = CachedResponse(
            body=data,
            content_type=content_type_for(image_id),
            cache_control=self.context.cache_control,
        )
        await cache.store(request.url, response)
        return GalleryResponse.binary(response.body, response.content_type, response.cache_control)

    async def delete_image(self, request: GalleryRequest, params: dict[str, str]) -> GalleryResponse:
        """Delete an image and best-effort evict its cached response.

        Eviction failures are logged and discarded; once the blob is gone
        the delete is reported as successful.

        Raises:
            NotFoundError: If no blob exists for the identifier.
        """
        image_id = params["id"]

        if await self.context.blob_store.get(image_id) is None:
            raise NotFoundError()

        await self.context.blob_store.delete(image_id)

        image_url = request.origin + self.context.image_path(image_id)
        eviction = await self.context.response_cache.evict_quietly(image_url)
        if not eviction.ok:
            logger.error(f"Failed to delete {image_url} from response cache: {eviction.error}")

        return GalleryResponse.json(DeleteResponse().model_dump())


def build_router(context: GalleryContext) -> Router:
    """Build the gallery routing table.

    The table is static: one literal route per collection endpoint and one
    ``:id`` route per method on the image resource.
    """
    handlers = GalleryHandlers(context)
    router = Router(context.base_path)

    routes = (
        ("GET", "/image/:id", handlers.get_image),
        ("GET", "/images", handlers.list_images),
        ("POST", "/upload", handlers.upload),
        ("DELETE", "/image/:id", handlers.delete_image),
    )
    for method, pattern, handler in routes:
        router.register(method, pattern, handler)
    return router
