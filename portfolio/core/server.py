"""TCP listener running one supervised asyncio task per connection."""

import asyncio
import itertools
import signal
from contextlib import suppress
from enum import StrEnum
from http import HTTPStatus
from typing import Any

import structlog

from portfolio.core.errors import ConnectionClosed, HttpError, ServerSetupError
from portfolio.core.lifespan import Lifespan, State
from portfolio.core.logger import LogIcon, logger
from portfolio.core.protocol import read_request, write_response
from portfolio.core.router import Router, error_response
from portfolio.core.settings import settings as st
from portfolio.models.core import Response

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ServerState(StrEnum):
    """Lifecycle of the listener."""

    CREATED = "created"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


def format_peer(peer: Any) -> str:
    if isinstance(peer, tuple) and len(peer) >= 2:
        return f"{peer[0]}:{peer[1]}"
    return str(peer)


class Server:
    """Accepts connections and hands each to its own task; owns shutdown."""

    def __init__(
        self,
        router: Router,
        lifespan: Lifespan | None = None,
        host: str | None = None,
        port: int | None = None,
        backlog: int | None = None,
    ) -> None:
        self._router = router
        self._lifespan = lifespan
        self.host = host if host is not None else st.SERVER_HOST
        self.port = port if port is not None else st.SERVER_PORT
        self.backlog = backlog if backlog is not None else st.SERVER_BACKLOG
        self.status = ServerState.CREATED
        self._server: asyncio.Server | None = None
        self._connections: set[asyncio.Task] = set()
        self._connection_ids = itertools.count(1)
        self._shutdown = asyncio.Event()
        self._previous_exception_handler = None

    @property
    def state(self) -> State | None:
        return self._lifespan.state if self._lifespan else None

    @property
    def active_connections(self) -> int:
        return len(self._connections)

    async def start(self) -> None:
        """Bind, listen and begin accepting. Raises ServerSetupError on failure."""
        self.status = ServerState.STARTING
        loop = asyncio.get_running_loop()
        try:
            self._server = await asyncio.start_server(
                self._handle_connection,
                self.host,
                self.port,
                backlog=self.backlog,
                limit=st.MAX_LINE_LENGTH,
                reuse_address=True,
            )
        except OSError as ex:
            self.status = ServerState.STOPPED
            raise ServerSetupError(f"Cannot listen on {self.host}:{self.port}: {ex}") from ex

        self.port = self._server.sockets[0].getsockname()[1]
        self._previous_exception_handler = loop.get_exception_handler()
        loop.set_exception_handler(self._on_loop_error)
        self.status = ServerState.RUNNING
        logger.info("Listening", icon=LogIcon.NETWORK, host=self.host, port=self.port, backlog=self.backlog)

    async def serve(self) -> None:
        """Run lifespan startup, accept until SIGINT/SIGTERM, then shut down cleanly."""
        if self._lifespan:
            await self._lifespan.startup()
        loop = asyncio.get_running_loop()
        try:
            await self.start()
            for sig in SHUTDOWN_SIGNALS:
                loop.add_signal_handler(sig, self.request_shutdown)
            await self._shutdown.wait()
        finally:
            for sig in SHUTDOWN_SIGNALS:
                loop.remove_signal_handler(sig)
            await self.stop()
            if self._lifespan:
                await self._lifespan.shutdown()

    def request_shutdown(self) -> None:
        logger.info("Shutdown requested", icon=LogIcon.STOP)
        self._shutdown.set()

    async def stop(self) -> None:
        """Close the listening socket and cancel in-flight connections."""
        if self.status in (ServerState.STOPPING, ServerState.STOPPED):
            return
        self.status = ServerState.STOPPING

        if self._server is not None:
            self._server.close()

        pending = list(self._connections)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        if self._server is not None:
            await self._server.wait_closed()
            asyncio.get_running_loop().set_exception_handler(self._previous_exception_handler)
            self._server = None

        self.status = ServerState.STOPPED
        logger.info("Server stopped", icon=LogIcon.COMPLETE, cancelled=len(pending))

    def _on_loop_error(self, loop: asyncio.AbstractEventLoop, context: dict) -> None:
        """Accept failures and other loop-level errors are logged; the accept loop keeps going."""
        exception = context.get("exception")
        logger.error(
            context.get("message", "Event loop error"),
            icon=LogIcon.ERROR,
            error=repr(exception) if exception else None,
        )

    async def _handle_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._connections.add(task)
        structlog.contextvars.bind_contextvars(
            connection=next(self._connection_ids),
            peer=format_peer(writer.get_extra_info("peername")),
        )
        try:
            response = await self._process(reader)
            if response is not None:
                await write_response(writer, response)
        except ConnectionError as ex:
            logger.warning("Connection dropped", icon=LogIcon.WARNING, error=str(ex))
        except asyncio.CancelledError:
            logger.debug("Connection cancelled by shutdown", icon=LogIcon.STOP)
        finally:
            if task is not None:
                self._connections.discard(task)
            writer.close()
            with suppress(ConnectionError):
                await writer.wait_closed()

    async def _process(self, reader: asyncio.StreamReader) -> Response | None:
        """Read one request and produce its response; ``None`` when the peer left first."""
        try:
            request = await read_request(reader)
        except ConnectionClosed:
            logger.debug("Connection closed before request line", icon=LogIcon.NETWORK)
            return None
        except HttpError as ex:
            logger.info("Malformed request", icon=LogIcon.FORBIDDEN, status=int(ex.status), reason=ex.message)
            return error_response(ex)

        try:
            response = await self._router.dispatch(request)
        except ConnectionError:
            raise
        except Exception:
            logger.exception("Handler failed", icon=LogIcon.ERROR, method=request.method, path=request.path)
            response = Response.text(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error")

        logger.info(
            "Request handled",
            icon=LogIcon.ROUTER,
            method=request.method,
            path=request.path,
            status=response.status_code,
            size=len(response.body),
        )
        return response
