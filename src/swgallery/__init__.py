"""swgallery - offline image gallery served by a local request handler."""

__version__ = "0.1.0"

from swgallery.core.config import GalleryConfig, config
from swgallery.worker.handlers import GalleryContext, build_context, build_router
from swgallery.worker.lifecycle import GalleryWorker
from swgallery.worker.messages import GalleryRequest, GalleryResponse, UploadedFile

__all__ = [
    "GalleryConfig",
    "config",
    "GalleryContext",
    "build_context",
    "build_router",
    "GalleryWorker",
    "GalleryRequest",
    "GalleryResponse",
    "UploadedFile",
]
