"""Configuration management for the swgallery offline image gallery.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the SWGALLERY_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (SWGALLERY_* prefix)
2. .env file in the project root
3. Default values defined in GalleryConfig

Example .env file:
    SWGALLERY_DATA_DIR=data
    SWGALLERY_CACHE_NAME=image-cache-v2
    SWGALLERY_WEBP_QUALITY=85

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
:func:`swgallery.api.main.create_app` falls back to it when no explicit
configuration is passed.

Cache Versioning
----------------
``cache_name`` is the version token of the response cache.  Bumping it (for
example from ``image-cache-v1`` to ``image-cache-v2``) makes every previously
cached response unreachable without touching stored images.  Rows cached
under older tokens are purged on the next application startup.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GalleryConfig(BaseSettings):
    """Main configuration for the swgallery request handler.

    Attributes
    ----------
    Storage:
        data_dir : Path
            Directory holding the SQLite database
        database_name : str
            File name of the SQLite database inside ``data_dir``
        sqlite_timeout : float
            Seconds a connection waits on a locked database before failing

    Routing:
        base_path : str
            Path prefix under which all gallery routes live

    Response cache:
        cache_name : str
            Version token of the response cache namespace
        cache_control : str
            ``Cache-Control`` header attached to served images

    Normalization:
        webp_quality : int
            WebP encoder quality for converted uploads (1-100)

    Server:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Port for uvicorn
        log_level : str
            Root logging level used by ``main()``
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SWGALLERY_",
        case_sensitive=False,
    )

    # Storage
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the gallery database",
    )
    database_name: str = Field(
        default="gallery.sqlite3",
        description="SQLite database file name inside data_dir",
    )
    sqlite_timeout: float = Field(
        default=5.0,
        description="Seconds to wait on a locked database",
        gt=0,
    )

    # Routing
    base_path: str = Field(
        default="/sw",
        description="Path prefix for all gallery routes",
    )

    # Response cache
    cache_name: str = Field(
        default="image-cache-v1",
        description="Version token of the response cache",
        min_length=1,
    )
    cache_control: str = Field(
        default="public, max-age=31536000",
        description="Cache-Control header for served images",
    )

    # Normalization
    webp_quality: int = Field(
        default=90,
        description="WebP quality for converted PNG/JPEG uploads",
        ge=1,
        le=100,
    )

    # Server
    server_host: str = Field(default="127.0.0.1")
    server_port: int = Field(default=8787, ge=1024, le=65535)
    log_level: str = Field(default="INFO")

    def __init__(self, **kwargs):
        """Initialize configuration and create the data directory."""
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        # A trailing slash would produce "//" when routes are joined.
        self.base_path = "/" + self.base_path.strip("/")

    @property
    def database_path(self) -> Path:
        """Absolute location of the SQLite database file."""
        return self.data_dir / self.database_name


# Global configuration instance, loaded from SWGALLERY_* variables and .env.
config = GalleryConfig()
