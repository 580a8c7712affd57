"""Typed HTTP client for the gallery endpoints.

Wraps ``httpx.AsyncClient`` so scripts and tests can talk to a running
gallery (or to an in-process app through ``httpx.ASGITransport``) without
hand-building multipart requests::

    async with GalleryClient("http://127.0.0.1:8787") as client:
        path = await client.upload("photo.png", data)
        urls = await client.list_images()
        content_type, body = await client.fetch_image(path)
        await client.delete_image(path)
"""

from __future__ import annotations

import logging
import mimetypes
from urllib.parse import quote

import httpx

from swgallery.api.models import DeleteResponse, ErrorResponse, UploadResponse

logger = logging.getLogger(__name__)


class GalleryClientError(Exception):
    """Raised when the gallery answers with a non-2xx status."""

    def __init__(self, status_code: int, payload: ErrorResponse | None, text: str = ""):
        self.status_code = status_code
        self.payload = payload
        message = payload.error if payload is not None else text
        super().__init__(f"{status_code}: {message}")


class GalleryClient:
    """Async client for ``/sw/images``, ``/sw/image/{id}`` and ``/sw/upload``.

    Attributes:
        base_url: Origin of the gallery host, e.g. ``http://127.0.0.1:8787``.
        base_path: Route prefix, ``/sw`` by default.
    """

    def __init__(
        self,
        base_url: str,
        base_path: str = "/sw",
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.base_path = "/" + base_path.strip("/")
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> GalleryClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _image_path(self, path_or_id: str) -> str:
        prefix = f"{self.base_path}/image/"
        if path_or_id.startswith(prefix):
            return path_or_id
        return prefix + quote(path_or_id, safe="")

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            payload = ErrorResponse.model_validate(response.json())
        except ValueError:
            payload = None
        raise GalleryClientError(response.status_code, payload, response.text)

    async def list_images(self) -> list[str]:
        """Return the retrieval path of every stored image."""
        response = await self._http.get(f"{self.base_path}/images")
        self._raise_for_status(response)
        return list(response.json())

    async def upload(self, filename: str, data: bytes, content_type: str | None = None) -> str:
        """Upload *data* as *filename* and return its retrieval path."""
        content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        response = await self._http.post(
            f"{self.base_path}/upload",
            files={"file": (filename, data, content_type)},
        )
        self._raise_for_status(response)
        path = UploadResponse.model_validate(response.json()).path
        logger.debug(f"Uploaded {filename!r} to {path}")
        return path

    async def fetch_image(self, path_or_id: str) -> tuple[str, bytes]:
        """Download an image.

        Returns:
            ``(content_type, body)``.
        """
        response = await self._http.get(self._image_path(path_or_id))
        self._raise_for_status(response)
        return response.headers.get("content-type", ""), response.content

    async def delete_image(self, path_or_id: str) -> DeleteResponse:
        """Delete an image by identifier or retrieval path."""
        response = await self._http.delete(self._image_path(path_or_id))
        self._raise_for_status(response)
        return DeleteResponse.model_validate(response.json())
