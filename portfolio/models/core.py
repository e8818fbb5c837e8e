"""Core models for request/response handling."""

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from http import HTTPStatus


class HttpMethod(StrEnum):
    """Methods the router knows how to dispatch."""

    GET = "GET"
    POST = "POST"


class ContentType(StrEnum):
    """Content types produced by the server itself."""

    HTML = "text/html"
    TEXT = "text/plain"
    OCTET_STREAM = "application/octet-stream"


@dataclass
class HttpRequest:
    """Request line and headers of one connection, plus the stream holding its body."""

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: dict[str, str] = field(default_factory=dict)
    stream: asyncio.StreamReader | None = field(default=None, repr=False)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup; an exact-case key wins over other spellings."""
        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    async def read_body(self, length: int, chunk_size: int = 8192) -> bytes:
        """Read up to ``length`` body bytes, stopping early if the peer closes."""
        if self.stream is None or length <= 0:
            return b""
        body = bytearray()
        while len(body) < length:
            chunk = await self.stream.read(min(chunk_size, length - len(body)))
            if not chunk:
                break
            body.extend(chunk)
        return bytes(body)


class Response:
    """Status, content type and body, serialized with ``Connection: close``."""

    __slots__ = ("status_code", "content_type", "body")

    def __init__(self, status_code: int, content_type: str, body: bytes | str = b"") -> None:
        self.status_code = status_code
        self.content_type = content_type
        self.body = body.encode() if isinstance(body, str) else body

    def __repr__(self) -> str:
        return f"Response({self.status_code}, {self.content_type!r}, {len(self.body)} bytes)"

    @classmethod
    def text(cls, status_code: int, message: str) -> "Response":
        return cls(status_code, ContentType.TEXT, message)

    @classmethod
    def html(cls, body: str, status_code: int = HTTPStatus.OK) -> "Response":
        return cls(status_code, ContentType.HTML, body)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": str(self.content_type),
            "Content-Length": str(len(self.body)),
            "Connection": "close",
        }

    def to_bytes(self) -> bytes:
        """Serialize to HTTP/1.1 wire format."""
        status = HTTPStatus(self.status_code)
        lines = [f"HTTP/1.1 {status.value} {status.phrase}"]
        lines.extend(f"{name}: {value}" for name, value in self.headers.items())
        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("latin-1") + self.body


class UploadFile:
    """Container for the single file extracted from a multipart/form-data body."""

    __slots__ = ("filename", "content")

    def __init__(self, filename: str, content: bytes = b"") -> None:
        self.filename = filename
        self.content = content

    def __bool__(self) -> bool:
        return bool(self.filename)

    def __len__(self) -> int:
        return len(self.content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {len(self.content)} bytes)"
