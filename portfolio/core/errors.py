"""Error taxonomy shared by the reader, services and router."""

from http import HTTPStatus


class ServerSetupError(Exception):
    """Listening socket could not be created, bound or put in listen mode."""


class ConnectionClosed(Exception):
    """Peer went away before a complete request line was read."""


class HttpError(Exception):
    """Client-visible failure carrying the status and plain-text body to answer with."""

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class BadRequest(HttpError):
    status = HTTPStatus.BAD_REQUEST
    message = "Bad Request"


class PayloadMalformed(BadRequest):
    message = "Failed to parse form-data"


class NotFound(HttpError):
    status = HTTPStatus.NOT_FOUND
    message = "File not found"


class MethodNotAllowed(HttpError):
    status = HTTPStatus.METHOD_NOT_ALLOWED
    message = "Method Not Allowed"


class LengthRequired(HttpError):
    status = HTTPStatus.LENGTH_REQUIRED
    message = "Content-Length required"


class PayloadTooLarge(HttpError):
    status = HTTPStatus.REQUEST_ENTITY_TOO_LARGE
    message = "Payload Too Large"


class RequestTooLarge(HttpError):
    status = HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE
    message = "Request Header Fields Too Large"


class IOFailure(HttpError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    message = "Error reading file"
