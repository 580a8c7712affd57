"""Pydantic request and response models for the gallery endpoints.

Models
------
UploadForm
    Validated form of ``POST /sw/upload``: exactly one ``file`` field
    carrying an uploaded file.
UploadResponse
    Body of a successful upload: ``{"path": "/sw/image/<id>"}``.
DeleteResponse
    Body of a successful delete: ``{"success": true, "message": ...}``.
ErrorResponse
    Body of every error: ``{"error": ...}`` plus validation ``issues``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from swgallery.core.errors import UploadValidationError
from swgallery.worker.messages import FormValue, UploadedFile


class UploadForm(BaseModel):
    """Validated upload form.

    Attributes:
        file: The single uploaded file.  Plain string values, repeated
            ``file`` fields and files without a name are rejected.
    """

    file: UploadedFile = Field(..., description="The image file to upload.")

    @field_validator("file")
    @classmethod
    def _require_filename(cls, value: UploadedFile) -> UploadedFile:
        if not value.filename:
            raise ValueError("uploaded file must have a filename")
        return value


class UploadResponse(BaseModel):
    """Response body for ``POST /sw/upload``."""

    path: str = Field(..., description="Retrieval path of the stored image.")


class DeleteResponse(BaseModel):
    """Response body for ``DELETE /sw/image/{id}``."""

    success: bool = True
    message: str = "Image deleted"


class ErrorResponse(BaseModel):
    """Structured error body returned by every failing endpoint."""

    error: str
    issues: list[dict[str, str]] | None = None


def parse_upload_form(form: dict[str, list[FormValue]] | None) -> UploadForm:
    """Validate raw form fields into an :class:`UploadForm`.

    Args:
        form: Every submitted value per field name, or ``None`` when the
            request body was not a form.

    Returns:
        The validated form.

    Raises:
        UploadValidationError: If ``file`` is missing, repeated, not a file,
            or has no filename.
    """
    raw: dict[str, Any] = {}
    for name, values in (form or {}).items():
        raw[name] = values[0] if len(values) == 1 else values

    try:
        return UploadForm.model_validate(raw)
    except ValidationError as e:
        issues = [
            {"field": ".".join(str(part) for part in err["loc"]) or "form", "message": err["msg"]}
            for err in e.errors(include_url=False)
        ]
        raise UploadValidationError(issues) from e
