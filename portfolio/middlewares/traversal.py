"""Directory-traversal guard for GET requests."""

from http import HTTPStatus

from portfolio.core.logger import LogIcon, logger
from portfolio.middlewares.base import BaseMiddleware
from portfolio.models.core import HttpMethod, HttpRequest, Response


class TraversalGuardMiddleware(BaseMiddleware):
    """Rejects GET paths containing ``..`` with 400 before any filesystem access.

    Literal substring check on the raw path: encoded sequences, absolute paths and
    symlinks are not caught here. The static resolver re-checks the canonical path.
    """

    def before(self, request: HttpRequest) -> HttpRequest | Response:
        if request.method == HttpMethod.GET and ".." in request.path:
            logger.warning("Traversal attempt blocked", icon=LogIcon.FORBIDDEN, path=request.path)
            return Response.text(HTTPStatus.BAD_REQUEST, "Invalid path")
        return request

    def after(self, response: Response) -> Response:
        return response
