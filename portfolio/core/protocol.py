"""Line-based HTTP/1.1 request reading and response writing over asyncio streams."""

import asyncio

from portfolio.core.errors import BadRequest, ConnectionClosed, RequestTooLarge
from portfolio.core.settings import settings as st
from portfolio.models.core import HttpRequest, Response

HEADER_ENCODING = "iso-8859-1"


async def read_line(reader: asyncio.StreamReader) -> str:
    """Read one line ending in ``\\n`` or ``\\r\\n`` and return it without the terminator.

    The line length bound is the stream's own ``limit``.
    """
    try:
        raw = await reader.readuntil(b"\n")
    except asyncio.IncompleteReadError as ex:
        raise ConnectionClosed("connection closed mid-line") from ex
    except asyncio.LimitOverrunError as ex:
        raise RequestTooLarge("Request line or header too long") from ex
    except ConnectionError as ex:
        raise ConnectionClosed(str(ex)) from ex
    return raw[:-1].removesuffix(b"\r").decode(HEADER_ENCODING)


def parse_header_line(line: str) -> tuple[str, str] | None:
    """Split ``Key: value`` on the first colon; ``None`` for lines without one."""
    key, sep, value = line.partition(":")
    if not sep:
        return None
    return key, value.lstrip(" \t")


async def read_headers(reader: asyncio.StreamReader, max_headers: int) -> dict[str, str]:
    headers: dict[str, str] = {}
    count = 0
    while True:
        try:
            line = await read_line(reader)
        except ConnectionClosed:
            # EOF inside the header block ends it
            break
        if not line:
            break
        parsed = parse_header_line(line)
        if parsed is None:
            continue
        count += 1
        if count > max_headers:
            raise RequestTooLarge(f"More than {max_headers} headers")
        key, value = parsed
        headers[key] = value
    return headers


async def read_request(reader: asyncio.StreamReader, max_headers: int | None = None) -> HttpRequest:
    """Read the request line and header block; the body stays unread on ``reader``."""
    request_line = await read_line(reader)
    parts = request_line.split()
    if len(parts) < 3:
        raise BadRequest("Malformed request line")
    method, path, version = parts[:3]

    headers = await read_headers(reader, st.MAX_HEADER_COUNT if max_headers is None else max_headers)
    return HttpRequest(method=method, path=path, version=version, headers=headers, stream=reader)


async def write_response(writer: asyncio.StreamWriter, response: Response) -> None:
    """Send the whole response in one write; short writes are not retried."""
    writer.write(response.to_bytes())
    await writer.drain()
