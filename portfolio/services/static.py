"""Static file resolution, MIME lookup and file responses.

URL paths are percent-decoded before lookup, so a file whose literal name holds
a valid escape (``a%41.txt``) is reachable only as ``/a%2541.txt``. Raw ``..``
is rejected earlier by the traversal middleware; decoded escapes such as
``%2e%2e`` are caught here by the canonical containment check.
"""

import asyncio
from http import HTTPStatus
from pathlib import Path
from types import MappingProxyType
from urllib.parse import unquote

from portfolio.core.errors import BadRequest, IOFailure, NotFound
from portfolio.models.core import ContentType, Response

UPLOADS_PREFIX = "/uploads/"
INDEX_FILE = "index.html"

# Exact, case-sensitive extension match
MIME_TYPES = MappingProxyType({
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".ogg": "audio/ogg",
    ".json": "application/json",
    ".txt": "text/plain",
    ".pdf": "application/pdf",
})


def content_type_for(path: Path) -> str:
    return MIME_TYPES.get(path.suffix, ContentType.OCTET_STREAM)


def normalize_url_path(raw_path: str) -> str:
    """Drop query string and fragment, then percent-decode."""
    path = raw_path.partition("?")[0].partition("#")[0]
    return unquote(path)


def contained(candidate: Path, root: Path) -> bool:
    """True when the canonical candidate stays inside the canonical root."""
    return candidate.resolve().is_relative_to(root.resolve())


def resolve_request_path(raw_path: str, static_root: Path, upload_dir: Path) -> Path:
    """Map a URL path to a file under the static root, falling back to the upload directory.

    Raises NotFound when neither location has the file and BadRequest when the
    canonical path escapes its root.
    """
    url_path = normalize_url_path(raw_path)
    if url_path == "/":
        return static_root / INDEX_FILE

    candidate = static_root / url_path.lstrip("/")
    if candidate.exists():
        if not contained(candidate, static_root):
            raise BadRequest("Invalid path")
        return candidate

    if url_path.startswith(UPLOADS_PREFIX):
        candidate = upload_dir / url_path.removeprefix(UPLOADS_PREFIX)
        if candidate.exists():
            if not contained(candidate, upload_dir):
                raise BadRequest("Invalid path")
            return candidate

    raise NotFound()


def read_file(path: Path) -> bytes:
    """Read a whole file; unreadable or empty files are both IOFailure."""
    try:
        data = path.read_bytes()
    except OSError as ex:
        raise IOFailure() from ex
    if not data:
        raise IOFailure()
    return data


async def serve_file(path: Path) -> Response:
    body = await asyncio.to_thread(read_file, path)
    return Response(HTTPStatus.OK, content_type_for(path), body)
