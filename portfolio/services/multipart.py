"""Single-part multipart/form-data extraction.

Only the first part carrying a ``filename="..."`` is understood; other fields,
nested parts and quoted boundaries are out of scope.
"""

import re

from portfolio.core.errors import BadRequest, PayloadMalformed
from portfolio.models.core import UploadFile

BOUNDARY_RE = re.compile(r"boundary=([^\s;]+)")
FILENAME_RE = re.compile(rb'filename="([^"]+)"')
HEADER_SEPARATOR = b"\r\n\r\n"
LINE_ENDING_SIZE = 2


def extract_boundary(content_type: str) -> str:
    match = BOUNDARY_RE.search(content_type)
    if match is None:
        raise BadRequest("Boundary missing in Content-Type")
    return match.group(1)


def parse_multipart(body: bytes, boundary: str) -> UploadFile:
    """Extract the filename and content of the first file part in ``body``."""
    delimiter = b"--" + boundary.encode("latin-1")

    start = body.find(delimiter)
    if start == -1:
        raise PayloadMalformed()
    headers_start = start + len(delimiter) + LINE_ENDING_SIZE

    headers_end = body.find(HEADER_SEPARATOR, headers_start)
    if headers_end == -1:
        raise PayloadMalformed()
    part_headers = body[headers_start:headers_end]

    match = FILENAME_RE.search(part_headers)
    if match is None:
        raise PayloadMalformed()
    filename = match.group(1).decode("utf-8", errors="replace")

    content_start = headers_end + len(HEADER_SEPARATOR)
    content_end = body.find(delimiter, content_start)
    if content_end == -1:
        raise PayloadMalformed()

    return UploadFile(filename, body[content_start:max(content_start, content_end - LINE_ENDING_SIZE)])
