"""Tests for request reading and response writing."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from portfolio.core.errors import BadRequest, ConnectionClosed, RequestTooLarge
from portfolio.core.protocol import parse_header_line, read_line, read_request, write_response
from portfolio.models.core import Response


# -----------------------------------------------------------------------------
# read_line Tests
# -----------------------------------------------------------------------------


class TestReadLine:
    """Tests for read_line."""

    async def test_crlf_terminator_stripped(self, stream) -> None:
        """Verify CRLF line endings are removed."""
        assert await read_line(stream(b"GET / HTTP/1.1\r\nrest")) == "GET / HTTP/1.1"

    async def test_bare_lf_terminator_stripped(self, stream) -> None:
        """Verify bare LF line endings are accepted."""
        assert await read_line(stream(b"GET / HTTP/1.1\nrest")) == "GET / HTTP/1.1"

    async def test_empty_line(self, stream) -> None:
        """Verify a lone terminator yields an empty string."""
        assert await read_line(stream(b"\r\n")) == ""

    async def test_eof_before_terminator_raises(self, stream) -> None:
        """Verify EOF mid-line is reported as ConnectionClosed."""
        with pytest.raises(ConnectionClosed):
            await read_line(stream(b"GET / HTT"))

    async def test_line_over_limit_raises(self, stream) -> None:
        """Verify lines longer than the stream limit raise RequestTooLarge."""
        with pytest.raises(RequestTooLarge):
            await read_line(stream(b"X" * 200 + b"\r\n", limit=64))


# -----------------------------------------------------------------------------
# parse_header_line Tests
# -----------------------------------------------------------------------------


class TestParseHeaderLine:
    """Tests for parse_header_line."""

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("Host: example.com", ("Host", "example.com")),
            ("Host:example.com", ("Host", "example.com")),
            ("X-Pad: \t value ", ("X-Pad", "value ")),
            ("Location: http://x:8080/a", ("Location", "http://x:8080/a")),
            ("Empty:", ("Empty", "")),
        ],
    )
    def test_split_on_first_colon(self, line: str, expected: tuple[str, str]) -> None:
        """Verify key/value split and leading whitespace trimming."""
        assert parse_header_line(line) == expected

    def test_no_colon_returns_none(self) -> None:
        """Verify malformed lines are reported as None."""
        assert parse_header_line("not a header") is None


# -----------------------------------------------------------------------------
# read_request Tests
# -----------------------------------------------------------------------------


class TestReadRequest:
    """Tests for read_request."""

    async def test_request_line_and_headers(self, stream) -> None:
        """Verify method, path, version and headers are parsed."""
        request = await read_request(stream(b"GET /a.css HTTP/1.1\r\nHost: x\r\nAccept: */*\r\n\r\n"))

        assert request.method == "GET"
        assert request.path == "/a.css"
        assert request.version == "HTTP/1.1"
        assert request.headers == {"Host": "x", "Accept": "*/*"}

    async def test_mixed_line_endings(self, stream) -> None:
        """Verify LF and CRLF may be mixed within one request."""
        request = await read_request(stream(b"GET / HTTP/1.1\nHost: x\r\nA: b\n\n"))
        assert request.headers == {"Host": "x", "A": "b"}

    async def test_duplicate_header_last_wins(self, stream) -> None:
        """Verify the last occurrence of a duplicate key is kept."""
        request = await read_request(stream(b"GET / HTTP/1.1\r\nX-A: 1\r\nX-A: 2\r\n\r\n"))
        assert request.headers == {"X-A": "2"}

    async def test_header_key_case_preserved(self, stream) -> None:
        """Verify keys keep the case they were received with."""
        request = await read_request(stream(b"GET / HTTP/1.1\r\ncontent-TYPE: a\r\n\r\n"))
        assert list(request.headers) == ["content-TYPE"]

    async def test_malformed_header_skipped(self, stream) -> None:
        """Verify header lines without a colon are ignored."""
        request = await read_request(stream(b"GET / HTTP/1.1\r\ngarbage\r\nHost: x\r\n\r\n"))
        assert request.headers == {"Host": "x"}

    async def test_body_left_on_stream(self, stream) -> None:
        """Verify the body is not consumed by header parsing."""
        request = await read_request(stream(b"POST /upload HTTP/1.1\r\nContent-Length: 4\r\n\r\nbody"))
        assert await request.read_body(4) == b"body"

    async def test_eof_before_request_line_raises(self, stream) -> None:
        """Verify an empty connection raises ConnectionClosed."""
        with pytest.raises(ConnectionClosed):
            await read_request(stream(b""))

    async def test_eof_inside_headers_ends_block(self, stream) -> None:
        """Verify EOF while reading headers keeps the headers read so far."""
        request = await read_request(stream(b"GET / HTTP/1.1\r\nHost: x\r\nPartial"))
        assert request.headers == {"Host": "x"}

    @pytest.mark.parametrize("line", [b"\r\n", b"GET\r\n", b"GET /\r\n"])
    async def test_short_request_line_raises(self, stream, line: bytes) -> None:
        """Verify request lines with fewer than three tokens are rejected."""
        with pytest.raises(BadRequest):
            await read_request(stream(line + b"\r\n"))

    async def test_too_many_headers_raises(self, stream) -> None:
        """Verify the header count bound."""
        raw = b"GET / HTTP/1.1\r\n" + b"".join(b"X-%d: v\r\n" % i for i in range(5)) + b"\r\n"
        with pytest.raises(RequestTooLarge):
            await read_request(stream(raw), max_headers=4)

    async def test_zero_header_limit_is_honoured(self, stream) -> None:
        """Verify an explicit limit of 0 is not replaced by the configured default."""
        with pytest.raises(RequestTooLarge):
            await read_request(stream(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n"), max_headers=0)


# -----------------------------------------------------------------------------
# write_response Tests
# -----------------------------------------------------------------------------


class TestWriteResponse:
    """Tests for write_response."""

    async def test_single_write_then_drain(self) -> None:
        """Verify the full serialized response is written once and drained."""
        writer = MagicMock()
        writer.drain = AsyncMock()
        response = Response.text(404, "File not found")

        await write_response(writer, response)

        writer.write.assert_called_once_with(response.to_bytes())
        writer.drain.assert_awaited_once()
