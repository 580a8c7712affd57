"""HTTP-like request and response types consumed and produced by the core.

The core never sees framework objects.  Adapters (the FastAPI app in
:mod:`swgallery.api.main`, or tests) build a :class:`GalleryRequest` and
translate the returned :class:`GalleryResponse` back into their own types.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union
from urllib.parse import urlsplit


@dataclass(frozen=True)
class UploadedFile:
    """A file field from a multipart form."""

    filename: str
    content: bytes
    content_type: str | None = None


FormValue = Union[UploadedFile, str]


@dataclass(frozen=True)
class GalleryRequest:
    """An intercepted request.

    Attributes:
        method: Upper-case HTTP method.
        url: Full request URL including scheme and host.
        mode: Declared request mode (``navigate``, ``cors``, ...).
        destination: Declared destination (``image``, ``document``, ...).
        referrer: Referrer URL, or ``""``.
        form: Parsed form fields, each mapped to every value submitted
            under that name.  ``None`` when the body was not a form.
    """

    method: str
    url: str
    mode: str = ""
    destination: str = ""
    referrer: str = ""
    form: dict[str, list[FormValue]] | None = None

    @property
    def path(self) -> str:
        return urlsplit(self.url).path or "/"

    @property
    def origin(self) -> str:
        parts = urlsplit(self.url)
        return f"{parts.scheme}://{parts.netloc}"


@dataclass
class GalleryResponse:
    """A response returned by the router."""

    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def json(cls, payload: Any, status: int = 200) -> GalleryResponse:
        return cls(
            status=status,
            body=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json; charset=UTF-8"},
        )

    @classmethod
    def binary(cls, body: bytes, content_type: str, cache_control: str | None = None) -> GalleryResponse:
        headers = {"Content-Type": content_type}
        if cache_control:
            headers["Cache-Control"] = cache_control
        return cls(status=200, body=body, headers=headers)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("Content-Type")

    def json_body(self) -> Any:
        """Decode a JSON body (used by tests and the client)."""
        return json.loads(self.body.decode("utf-8"))
