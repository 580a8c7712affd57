"""Shared pytest fixtures for swgallery tests."""

import io
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from swgallery.api.main import create_app
from swgallery.core.config import GalleryConfig
from swgallery.worker.handlers import GalleryContext, build_context, build_router
from swgallery.worker.messages import GalleryRequest, UploadedFile
from swgallery.worker.router import Router

FIXED_CLOCK_MS = 1700000000000
ORIGIN = "http://testserver"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> GalleryConfig:
    """Gallery configuration pointing at a temporary data directory."""
    return GalleryConfig(
        data_dir=temp_dir / "data",
        cache_name="image-cache-test",
        webp_quality=90,
    )


@pytest.fixture
def fixed_clock():
    """A clock frozen at ``FIXED_CLOCK_MS``."""
    return lambda: FIXED_CLOCK_MS


@pytest.fixture
def context(test_config: GalleryConfig, fixed_clock) -> GalleryContext:
    """Gallery dependencies backed by a temporary database and a frozen clock."""
    return build_context(test_config, clock=fixed_clock)


@pytest.fixture
def router(context: GalleryContext) -> Router:
    """The gallery routing table bound to ``context``."""
    return build_router(context)


@pytest.fixture
def test_client(test_config: GalleryConfig, fixed_clock) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with the lifespan running."""
    app = create_app(test_config, clock=fixed_clock)
    with TestClient(app) as client:
        yield client


def make_image_bytes(fmt: str, size: tuple[int, int] = (8, 6), mode: str = "RGB") -> bytes:
    """Encode a small solid-colour image in *fmt* with Pillow."""
    colors = {"RGB": (200, 30, 60), "RGBA": (200, 30, 60, 128), "LA": (128, 200), "L": 128, "P": 7}
    image = Image.new(mode, size, colors[mode])
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def make_animated_gif(frames: int = 3) -> bytes:
    """Encode a small multi-frame GIF."""
    images = [Image.new("RGB", (4, 4), (index * 60, 255 - index * 60, 0)) for index in range(frames)]
    buffer = io.BytesIO()
    images[0].save(buffer, format="GIF", save_all=True, append_images=images[1:], duration=50, loop=0)
    return buffer.getvalue()


def gallery_request(method: str, path: str, **kwargs) -> GalleryRequest:
    """Build a request against ``ORIGIN``."""
    return GalleryRequest(method=method, url=f"{ORIGIN}{path}", **kwargs)


def upload_request(filename: str, data: bytes, content_type: str | None = None) -> GalleryRequest:
    """Build a ``POST /sw/upload`` request carrying one file field."""
    return gallery_request(
        "POST",
        "/sw/upload",
        form={"file": [UploadedFile(filename=filename, content=data, content_type=content_type)]},
    )


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes("JPEG")


@pytest.fixture
def gif_bytes() -> bytes:
    return make_animated_gif()
