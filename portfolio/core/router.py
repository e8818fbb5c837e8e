"""Router with exact-path routes, per-method fallbacks, middlewares and response handling."""

from collections.abc import Awaitable, Callable
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from portfolio.core.errors import HttpError, MethodNotAllowed
from portfolio.core.logger import LogIcon, logger
from portfolio.models.core import ContentType, HttpMethod, HttpRequest, Response

if TYPE_CHECKING:
    from portfolio.middlewares.base import BaseMiddleware

Handler = Callable[[HttpRequest], Awaitable[Any]]


def parse_response(result: Any) -> Response:
    """Convert handler result to Response."""
    match result:
        case Response():
            return result
        case str():
            return Response(HTTPStatus.OK, ContentType.HTML, result)
        case bytes() | bytearray():
            return Response(HTTPStatus.OK, ContentType.OCTET_STREAM, bytes(result))
        case _:
            return Response(HTTPStatus.OK, ContentType.TEXT, str(result))


def error_response(error: HttpError) -> Response:
    """Plain-text response for an HttpError."""
    return Response.text(error.status, error.message)


class Router:
    """Dispatches requests on (method, path) with a fallback handler per method."""

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], Handler] = {}
        self._fallbacks: dict[str, Handler] = {}
        self._middlewares: list["BaseMiddleware"] = []

    @property
    def routes(self) -> frozenset[tuple[str, str]]:
        return frozenset(self._routes)

    @property
    def middlewares(self) -> list["BaseMiddleware"]:
        return self._middlewares

    def route(self, method: HttpMethod, endpoint: str | None = None) -> Callable[[Handler], Handler]:
        """Register a handler for an exact path, or the method's fallback when ``endpoint`` is None."""

        def handler_decorator(handler: Handler) -> Handler:
            if endpoint is None:
                self._fallbacks[method] = handler
            else:
                self._routes[(method, endpoint)] = handler
            return handler

        return handler_decorator

    def get(self, endpoint: str | None = None) -> Callable[[Handler], Handler]:
        return self.route(HttpMethod.GET, endpoint)

    def post(self, endpoint: str | None = None) -> Callable[[Handler], Handler]:
        return self.route(HttpMethod.POST, endpoint)

    def include_router(self, router: "Router") -> "Router":
        """Merge another router's routes and fallbacks. Returns self for chaining."""
        self._routes.update(router._routes)
        self._fallbacks.update(router._fallbacks)
        return self

    def add_middleware(self, middleware: "BaseMiddleware") -> None:
        self._middlewares.append(middleware)

    def resolve(self, method: str, path: str) -> Handler | None:
        """Exact route first, then the method's fallback."""
        return self._routes.get((method, path)) or self._fallbacks.get(method)

    def _applies(self, middleware: "BaseMiddleware", request: HttpRequest) -> bool:
        return not middleware.endpoints or request.path in middleware.endpoints

    async def dispatch(self, request: HttpRequest) -> Response:
        """Run before-middlewares, the matching handler, then after-middlewares."""
        active = [m for m in self._middlewares if self._applies(m, request)]

        response: Response | None = None
        for middleware in active:
            if middleware.has_before():
                result = middleware.before(request)
                if isinstance(result, Response):
                    response = result
                    break
                request = result

        if response is None:
            response = await self._call_handler(request)

        for middleware in active:
            if middleware.has_after():
                response = middleware.after(response)
        return response

    async def _call_handler(self, request: HttpRequest) -> Response:
        try:
            handler = self.resolve(request.method, request.path)
            if handler is None:
                raise MethodNotAllowed()
            return parse_response(await handler(request))
        except HttpError as ex:
            logger.info(
                "Request rejected",
                icon=LogIcon.FORBIDDEN,
                method=request.method,
                path=request.path,
                status=int(ex.status),
                reason=ex.message,
            )
            return error_response(ex)
