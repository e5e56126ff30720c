"""Unified settings for robyn-upload-api."""

import tomllib
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

KIB = 1024
MIB = 1024 * KIB


def read_pyproject(pyproject_path: Path) -> dict:
    """Read pyproject.toml into a dict."""
    with pyproject_path.open("rb") as file_handle:
        return tomllib.load(file_handle)


def get_version(base_dir: Path) -> str:
    """Get version from git tags or fallback to package metadata."""
    try:
        import git

        repo = git.Repo(base_dir, search_parent_directories=True)
        latest_tag = max(repo.tags, key=lambda t: t.commit.committed_datetime, default=None)
        return str(latest_tag) if latest_tag else "0.0.0"
    except Exception:
        try:
            import importlib.metadata

            return importlib.metadata.version("robyn-upload-api")
        except Exception:
            return "0.0.0"


class UploadConfig(BaseModel):
    """Immutable upload policy handed to every pipeline component."""

    model_config = ConfigDict(frozen=True)

    uploads_path: Path
    max_file_size: int = Field(default=3 * MIB, gt=0)
    max_request_size: int = Field(default=20 * MIB, gt=0)
    chunk_size: int = Field(default=64 * KIB, gt=0)
    allowed_content_types: tuple[str, ...] = ("image/*",)


class Settings(BaseSettings):
    """Unified settings for robyn-upload-api service."""

    DEBUG: bool = True
    ENVIRONMENT: Literal["DEV", "PROD"] = "DEV"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # ClassVar to prevent Pydantic from trying to load from env
    BASE_DIR: ClassVar[Path] = Path(__file__).parent.parent.parent
    PROJECT: ClassVar[dict] = read_pyproject(BASE_DIR / "pyproject.toml")
    API_NAME: ClassVar[str] = PROJECT.get("project", {}).get("name", "robyn-upload-api")
    API_DESCRIPTION: ClassVar[str] = PROJECT.get("project", {}).get("description", "Multipart upload service")
    API_VERSION: ClassVar[str] = get_version(BASE_DIR)

    # Server
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3000

    # Uploads
    UPLOADS_PATH: Path = BASE_DIR / "uploads"
    MAX_FILE_SIZE: int = 3 * MIB
    MAX_REQUEST_SIZE: int = 20 * MIB
    STREAM_CHUNK_SIZE: int = 64 * KIB
    ALLOWED_CONTENT_TYPES: list[str] = ["image/*"]

    @property
    def api_url(self) -> str:
        return f"http://{self.API_HOST}:{self.API_PORT}"

    def upload_config(self) -> UploadConfig:
        """Snapshot the upload policy as an immutable value."""
        return UploadConfig(
            uploads_path=self.UPLOADS_PATH,
            max_file_size=self.MAX_FILE_SIZE,
            max_request_size=self.MAX_REQUEST_SIZE,
            chunk_size=self.STREAM_CHUNK_SIZE,
            allowed_content_types=tuple(self.ALLOWED_CONTENT_TYPES),
        )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()  # type: ignore
