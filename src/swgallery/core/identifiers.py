"""Storage identifiers for uploaded images.

An identifier looks like ``1700000000000-photo.webp``: a millisecond
timestamp, the sanitized original base name, and the extension chosen by
the normalizer (``webp`` when conversion succeeded, otherwise the upload's
own extension).

Identifiers double as URL path segments (``/sw/image/<id>``), so the base
name is reduced to a single segment: directory components are dropped and
``?`` / ``#`` are replaced.
"""

from __future__ import annotations

import re
import threading
import time
from collections.abc import Callable

# Extensions stripped from the original name before the final extension is appended.
_IMAGE_EXTENSION_RE = re.compile(r"\.(png|jpg|jpeg|gif|webp)$", re.IGNORECASE)
_UNSAFE_SEGMENT_CHARS_RE = re.compile(r"[?#]")

_DEFAULT_BASE_NAME = "image"


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


def sanitize_base_name(filename: str) -> str:
    """Return the base name used inside an identifier.

    Args:
        filename: Original upload filename, possibly with a client-side path.

    Returns:
        The final path component with any recognized image extension removed.
    """
    name = re.split(r"[\\/]", filename)[-1]
    name = _IMAGE_EXTENSION_RE.sub("", name)
    name = _UNSAFE_SEGMENT_CHARS_RE.sub("_", name)
    return name or _DEFAULT_BASE_NAME


def original_extension(filename: str) -> str:
    """Return the lower-cased extension of *filename* without the dot, or ``""``."""
    name = re.split(r"[\\/]", filename)[-1]
    stem, dot, suffix = name.rpartition(".")
    if not dot or not stem or not suffix:
        return ""
    return suffix.lower()


class IdentifierGenerator:
    """Produce ``{timestamp}-{base}.{extension}`` identifiers.

    The timestamp never goes backwards within one generator.  When the clock
    has not advanced since the previous call, the timestamp is bumped by one
    millisecond so two uploads of the same filename in the same tick still
    get distinct identifiers.

    Attributes:
        _clock: Callable returning wall-clock milliseconds.
        _last: Timestamp handed out by the previous call.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock or _wall_clock_ms
        self._last: int | None = None
        self._lock = threading.Lock()

    def next_timestamp(self) -> int:
        with self._lock:
            now = int(self._clock())
            if self._last is not None and now <= self._last:
                now = self._last + 1
            self._last = now
            return now

    def generate(self, original_filename: str, extension: str) -> str:
        """Build a fresh identifier.

        Args:
            original_filename: Filename as uploaded by the client.
            extension: Extension reported by the normalizer, without the dot.
                An empty string yields an identifier without an extension.

        Returns:
            The new identifier.
        """
        base = sanitize_base_name(original_filename)
        timestamp = self.next_timestamp()
        if extension:
            return f"{timestamp}-{base}.{extension}"
        return f"{timestamp}-{base}"
