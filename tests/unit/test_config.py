"""Unit tests for swgallery configuration."""

import pytest
from pydantic import ValidationError

from swgallery.core.config import GalleryConfig


class TestGalleryConfig:
    """Test GalleryConfig defaults, environment loading and validation."""

    def test_defaults(self, temp_dir):
        config = GalleryConfig(data_dir=temp_dir / "data")
        assert config.base_path == "/sw"
        assert config.cache_name == "image-cache-v1"
        assert config.webp_quality == 90
        assert config.cache_control == "public, max-age=31536000"

    def test_creates_data_dir(self, temp_dir):
        data_dir = temp_dir / "nested" / "data"
        GalleryConfig(data_dir=data_dir)
        assert data_dir.is_dir()

    def test_database_path(self, temp_dir):
        config = GalleryConfig(data_dir=temp_dir, database_name="g.db")
        assert config.database_path == temp_dir / "g.db"

    @pytest.mark.parametrize("raw, expected", [("sw", "/sw"), ("/sw/", "/sw"), ("/a/b", "/a/b")])
    def test_base_path_is_normalized(self, temp_dir, raw, expected):
        assert GalleryConfig(data_dir=temp_dir, base_path=raw).base_path == expected

    def test_env_prefix(self, temp_dir, monkeypatch):
        monkeypatch.setenv("SWGALLERY_CACHE_NAME", "image-cache-v9")
        monkeypatch.setenv("SWGALLERY_WEBP_QUALITY", "70")
        config = GalleryConfig(data_dir=temp_dir)
        assert config.cache_name == "image-cache-v9"
        assert config.webp_quality == 70

    @pytest.mark.parametrize("quality", [0, 101])
    def test_webp_quality_bounds(self, temp_dir, quality):
        with pytest.raises(ValidationError):
            GalleryConfig(data_dir=temp_dir, webp_quality=quality)

    def test_empty_cache_name_rejected(self, temp_dir):
        with pytest.raises(ValidationError):
            GalleryConfig(data_dir=temp_dir, cache_name="")
