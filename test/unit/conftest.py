"""Test fixtures for portfolio-server unit tests."""

import asyncio
from dataclasses import dataclass
from pathlib import Path

import pytest

from portfolio.core.settings import settings as st
from portfolio.models.core import HttpRequest

BOUNDARY = "----PortfolioBoundary7MA4YWxkTrZu0gW"


# -----------------------------------------------------------------------------
# Stream helpers
# -----------------------------------------------------------------------------


def stream_from(data: bytes, limit: int = 2**16) -> asyncio.StreamReader:
    """StreamReader already holding ``data`` followed by EOF."""
    reader = asyncio.StreamReader(limit=limit)
    reader.feed_data(data)
    reader.feed_eof()
    return reader


def multipart_body(filename: str, content: bytes, boundary: str = BOUNDARY) -> bytes:
    """Single file part the way a browser form submits it."""
    return (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="file"; filename="{filename}"\r\n'
        "Content-Type: application/octet-stream\r\n"
        "\r\n"
    ).encode() + content + f"\r\n--{boundary}--\r\n".encode()


# -----------------------------------------------------------------------------
# Helper fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def stream():
    """Factory for pre-filled StreamReaders; call it inside a running loop."""
    return stream_from


@pytest.fixture
def multipart():
    """Factory for single-file multipart bodies using BOUNDARY."""
    return multipart_body


@pytest.fixture
def boundary() -> str:
    return BOUNDARY


# -----------------------------------------------------------------------------
# Site directories
# -----------------------------------------------------------------------------


@dataclass
class Site:
    """Static root and upload directory wired into settings for one test."""

    static: Path
    uploads: Path


@pytest.fixture
def site(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Site:
    """Point settings at fresh static/ and uploads/ directories."""
    static = tmp_path / "static"
    uploads = tmp_path / "uploads"
    static.mkdir()
    uploads.mkdir()
    monkeypatch.setattr(st, "STATIC_DIR", static)
    monkeypatch.setattr(st, "UPLOAD_DIR", uploads)
    return Site(static=static, uploads=uploads)


# -----------------------------------------------------------------------------
# Request factory
# -----------------------------------------------------------------------------


@pytest.fixture
def make_request():
    """Factory fixture to create requests with an optional body stream."""

    def _make(
        method: str = "GET",
        path: str = "/",
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> HttpRequest:
        stream = stream_from(body) if body is not None else None
        return HttpRequest(method=method, path=path, headers=headers or {}, stream=stream)

    return _make

