"""Tests for swgallery.api.models — upload validation and response bodies."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from swgallery.api.models import (
    DeleteResponse,
    ErrorResponse,
    UploadForm,
    UploadResponse,
    parse_upload_form,
)
from swgallery.core.errors import UploadValidationError
from swgallery.worker.messages import UploadedFile


class TestUploadForm:
    """Test UploadForm and parse_upload_form()."""

    def test_single_file_is_accepted(self):
        upload = UploadedFile("photo.png", b"data", "image/png")
        form = parse_upload_form({"file": [upload]})
        assert form.file == upload

    def test_missing_form(self):
        with pytest.raises(UploadValidationError) as exc_info:
            parse_upload_form(None)
        assert exc_info.value.issues[0]["field"] == "file"

    def test_string_value_is_rejected(self):
        with pytest.raises(UploadValidationError):
            parse_upload_form({"file": ["photo.png"]})

    def test_repeated_field_is_rejected(self):
        with pytest.raises(UploadValidationError):
            parse_upload_form({"file": [UploadedFile("a", b""), UploadedFile("b", b"")]})

    def test_empty_filename_is_rejected(self):
        with pytest.raises(UploadValidationError) as exc_info:
            parse_upload_form({"file": [UploadedFile("", b"data")]})
        assert "filename" in exc_info.value.issues[0]["message"]

    def test_error_payload_shape(self):
        with pytest.raises(UploadValidationError) as exc_info:
            parse_upload_form({})
        payload = exc_info.value.to_payload()
        assert payload["error"] == "Invalid upload form"
        assert isinstance(payload["issues"], list)
        assert exc_info.value.status_code == 400

    def test_model_requires_file(self):
        with pytest.raises(ValidationError):
            UploadForm()


class TestResponseModels:
    """Response bodies match the documented JSON shapes."""

    def test_upload_response(self):
        assert UploadResponse(path="/sw/image/1-a.webp").model_dump() == {
            "path": "/sw/image/1-a.webp"
        }

    def test_delete_response_defaults(self):
        assert DeleteResponse().model_dump() == {"success": True, "message": "Image deleted"}

    def test_error_response_from_json(self):
        err = ErrorResponse.model_validate({"error": "Image not found"})
        assert err.error == "Image not found"
        assert err.issues is None
