"""Upload directory: filename sanitization, saving and listing."""

import asyncio
import html
import re
from pathlib import Path
from urllib.parse import quote

from portfolio.core.errors import BadRequest, IOFailure
from portfolio.models.core import UploadFile

PATH_SEPARATORS_RE = re.compile(r"[/\\]")

UPLOAD_SUCCESS_PAGE = """
<html>
<head>
    <title>Upload Success</title>
    <meta http-equiv="refresh" content="2;url=/" />
    <style>
    body {background:#000;color:#0f0;font-family:monospace;text-align:center;padding:50px;}
    </style>
</head>
<body>
<h1>Uploaded Successfully!</h1>
<p>Redirecting back to portfolio...</p>
</body>
</html>"""


def sanitize_filename(filename: str) -> str:
    """Keep only the base name: everything after the last ``/`` or ``\\``. NUL bytes are rejected."""
    name = PATH_SEPARATORS_RE.split(filename)[-1]
    if name in ("", ".", "..") or "\x00" in name:
        raise BadRequest("Invalid filename")
    return name


def write_upload(upload: UploadFile, directory: Path) -> Path:
    target = directory / sanitize_filename(upload.filename)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        target.write_bytes(upload.content)
    except OSError as ex:
        raise IOFailure("Error saving file") from ex
    return target


async def save_upload(upload: UploadFile, directory: Path) -> Path:
    """Write the upload into ``directory``, overwriting any file of the same name."""
    return await asyncio.to_thread(write_upload, upload, directory)


def list_uploads(directory: Path) -> list[str]:
    """Names of every entry in the upload directory, sorted; empty when it does not exist."""
    if not directory.is_dir():
        return []
    return sorted(entry.name for entry in directory.iterdir())


def render_listing(names: list[str]) -> str:
    items = "".join(
        f"<li><a href='/uploads/{quote(name)}'>{html.escape(name)}</a></li>" for name in names
    )
    return f"<html><body><h1>Uploaded Files</h1><ul>{items}</ul></body></html>"
