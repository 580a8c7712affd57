"""Error types raised by the gallery core.

Handlers raise these and the router turns them into structured JSON
responses, so callers always receive either a success body or an
``{"error": ...}`` body with a matching status code.

Conversion failures and cache eviction failures are deliberately absent:
both are recovered where they happen and only show up in the logs.
"""

from __future__ import annotations

from typing import Any


class GalleryError(Exception):
    """Base class for errors that map onto an HTTP-like status code."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body sent to the caller."""
        return {"error": self.message}


class NotFoundError(GalleryError):
    """Raised when a Get or Delete references an unknown identifier."""

    status_code = 404

    def __init__(self, message: str = "Image not found") -> None:
        super().__init__(message)


class UploadValidationError(GalleryError):
    """Raised when the upload form is missing or has a malformed ``file`` field."""

    status_code = 400

    def __init__(self, issues: list[dict[str, str]], message: str = "Invalid upload form") -> None:
        super().__init__(message)
        self.issues = issues

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "issues": self.issues}


class StorageError(GalleryError):
    """Raised when the underlying SQLite database rejects an operation.

    The detailed message stays in the logs; callers only see a generic
    ``"Storage failure"`` body.
    """

    status_code = 500

    def to_payload(self) -> dict[str, Any]:
        return {"error": "Storage failure"}
