"""Unified settings for portfolio-server."""

import importlib.metadata
import tomllib
from pathlib import Path
from typing import ClassVar, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


def read_pyproject(pyproject_path: Path) -> dict:
    """Read pyproject.toml into a dict, empty when not shipped alongside the package."""
    if not pyproject_path.is_file():
        return {}
    with pyproject_path.open("rb") as file_handle:
        return tomllib.load(file_handle)


def get_version(project: dict) -> str:
    """Get version from installed package metadata or fallback to pyproject."""
    try:
        return importlib.metadata.version("portfolio-server")
    except importlib.metadata.PackageNotFoundError:
        return project.get("project", {}).get("version", "0.0.0")


class Settings(BaseSettings):
    """Unified settings for portfolio-server."""

    DEBUG: bool = True
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # ClassVar to prevent Pydantic from trying to load from env
    BASE_DIR: ClassVar[Path] = Path(__file__).parent.parent.parent
    PROJECT: ClassVar[dict] = read_pyproject(BASE_DIR / "pyproject.toml")
    APP_NAME: ClassVar[str] = PROJECT.get("project", {}).get("name", "portfolio-server")
    APP_VERSION: ClassVar[str] = get_version(PROJECT)

    # Server
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8080
    SERVER_BACKLOG: int = 10

    # Paths, relative to the working directory unless absolute
    STATIC_DIR: Path = Path("static")
    UPLOAD_DIR: Path = Path("uploads")

    # Request limits
    MAX_LINE_LENGTH: int = 8192
    MAX_HEADER_COUNT: int = 100
    MAX_BODY_BYTES: int = 64 * 1024 * 1024
    RECV_CHUNK_SIZE: int = 8192

    @property
    def server_url(self) -> str:
        return f"http://{self.SERVER_HOST}:{self.SERVER_PORT}"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()  # type: ignore
