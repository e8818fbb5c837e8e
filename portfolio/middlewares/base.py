"""Before/after hooks wrapped around route dispatch."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from portfolio.core.logger import LogIcon, logger
from portfolio.core.router import Router
from portfolio.models.core import HttpRequest, Response


def _is_hook(method) -> bool:
    return not getattr(method, "__isabstractmethod__", False)


class BaseMiddleware(ABC):
    """
    Hook pair run by the router around each matching request.

    ``before`` may return the (possibly rewritten) request to continue, or a
    ``Response`` to answer immediately without calling the handler. ``after``
    receives every response produced for the request. A subclass must provide
    at least one of the two. ``endpoints`` limits the middleware to exact
    request paths; empty means every path.
    """

    endpoints: frozenset[str] = frozenset()

    def __init__(self, endpoints: Iterable[str] | None = None) -> None:
        if endpoints:
            self.endpoints = frozenset(endpoints)

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if not (_is_hook(cls.before) or _is_hook(cls.after)):
            raise TypeError(f"{cls.__name__} must implement at least one of before/after")

    @abstractmethod
    def before(self, request: HttpRequest) -> HttpRequest | Response:
        return request

    @abstractmethod
    def after(self, response: Response) -> Response:
        return response

    @classmethod
    def has_before(cls) -> bool:
        return _is_hook(cls.before)

    @classmethod
    def has_after(cls) -> bool:
        return _is_hook(cls.after)


class MiddlewareHandler:
    """Attaches middlewares to a router in registration order."""

    def __init__(self, router: Router) -> None:
        self._router = router

    def register(self, middleware: BaseMiddleware) -> "MiddlewareHandler":
        self._router.add_middleware(middleware)
        logger.info(
            "Middleware registered",
            icon=LogIcon.ADAPTER,
            middleware=type(middleware).__name__,
            endpoints=sorted(middleware.endpoints) or "*",
        )
        return self
