"""Core building blocks: configuration, errors, identifiers, normalizer and storage."""

from swgallery.core.blob_store import BlobStore
from swgallery.core.errors import GalleryError, NotFoundError, StorageError, UploadValidationError
from swgallery.core.identifiers import IdentifierGenerator
from swgallery.core.normalizer import ContentNormalizer, Converted, Unchanged
from swgallery.core.response_cache import CachedResponse, EvictionResult, ResponseCache

__all__ = [
    "BlobStore",
    "CachedResponse",
    "ContentNormalizer",
    "Converted",
    "EvictionResult",
    "GalleryError",
    "IdentifierGenerator",
    "NotFoundError",
    "ResponseCache",
    "StorageError",
    "Unchanged",
    "UploadValidationError",
]
