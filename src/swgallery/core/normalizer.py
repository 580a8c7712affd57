"""Content normalization for uploaded images.

PNG and JPEG uploads are re-encoded as WebP, the gallery's canonical
format.  Everything else (GIF animations in particular) is stored exactly
as uploaded.

Normalization never fails an upload.  If Pillow cannot decode or encode the
bytes, the failure is logged and the original bytes are kept together with
their original extension.

Usage
-----
::

    normalizer = ContentNormalizer(quality=90)
    outcome = normalizer.normalize(data, "photo.png")
    if outcome.converted:
        ...  # outcome.extension == "webp"

Encoder output is reproducible for a given Pillow/libwebp build only; do not
compare converted bytes against fixtures produced elsewhere.
"""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from typing import Union

from PIL import Image

from swgallery.core.identifiers import original_extension

logger = logging.getLogger(__name__)

CANONICAL_EXTENSION = "webp"
CONVERTIBLE_EXTENSIONS = frozenset({"png", "jpg", "jpeg"})

# Modes WebP can encode directly.  Anything else is flattened first.
_WEBP_MODES = {"RGB", "RGBA"}


@dataclass(frozen=True)
class Converted:
    """Bytes were re-encoded into the canonical format."""

    data: bytes
    extension: str = CANONICAL_EXTENSION

    @property
    def converted(self) -> bool:
        return True


@dataclass(frozen=True)
class Unchanged:
    """Bytes are stored as uploaded, under their original extension."""

    data: bytes
    extension: str

    @property
    def converted(self) -> bool:
        return False


NormalizationOutcome = Union[Converted, Unchanged]


class ContentNormalizer:
    """Convert PNG/JPEG uploads to WebP, pass everything else through.

    Attributes:
        quality: WebP encoder quality (1-100).
    """

    def __init__(self, quality: int = 90) -> None:
        self.quality = quality

    def should_convert(self, filename: str) -> bool:
        return original_extension(filename) in CONVERTIBLE_EXTENSIONS

    def normalize(self, data: bytes, filename: str) -> NormalizationOutcome:
        """Normalize *data* according to the extension of *filename*.

        Args:
            data: Raw uploaded bytes.
            filename: Original upload filename; only its extension is used.

        Returns:
            :class:`Converted` with WebP bytes, or :class:`Unchanged` with
            the input bytes and original extension.
        """
        extension = original_extension(filename)
        if extension not in CONVERTIBLE_EXTENSIONS:
            return Unchanged(data, extension)

        try:
            encoded = self._encode_webp(data)
        except Exception as e:
            logger.warning(f"Failed to convert {filename!r} to WebP, storing original bytes: {e}")
            return Unchanged(data, extension)

        logger.debug(f"Converted {filename!r} to WebP ({len(data)} -> {len(encoded)} bytes)")
        return Converted(encoded)

    async def normalize_async(self, data: bytes, filename: str) -> NormalizationOutcome:
        """Run :meth:`normalize` in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.normalize, data, filename)

    def _encode_webp(self, data: bytes) -> bytes:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            if image.mode not in _WEBP_MODES:
                has_alpha = image.mode in ("LA", "PA") or "transparency" in image.info
                image = image.convert("RGBA" if has_alpha else "RGB")

            buffer = io.BytesIO()
            image.save(buffer, format="WEBP", quality=self.quality)
            return buffer.getvalue()
