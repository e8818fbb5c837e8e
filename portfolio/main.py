"""portfolio-server - static files, single-file uploads and an upload listing over raw HTTP/1.1."""

import asyncio
import sys

from portfolio.api.static import router as static_router
from portfolio.api.uploads import router as uploads_router
from portfolio.core.errors import ServerSetupError
from portfolio.core.lifespan import Lifespan
from portfolio.core.logger import LogIcon, logger
from portfolio.core.router import Router
from portfolio.core.server import Server
from portfolio.core.settings import settings as st
from portfolio.events.directories import StaticRootEvent, UploadDirectoryEvent
from portfolio.middlewares.base import MiddlewareHandler
from portfolio.middlewares.traversal import TraversalGuardMiddleware

router = Router()

# Lifespan events
lifespan = Lifespan()
lifespan.register(UploadDirectoryEvent).register(StaticRootEvent)

# Middlewares
middlewares = MiddlewareHandler(router)
middlewares.register(TraversalGuardMiddleware())

# Routers
router.include_router(uploads_router)
router.include_router(static_router)


def create_server(**kwargs) -> Server:
    return Server(router, lifespan, **kwargs)


def main() -> None:
    logger.info("🚀 STARTING %s | URL=%s | VERSION=%s", st.APP_NAME, st.server_url, st.APP_VERSION)
    try:
        asyncio.run(create_server().serve())
    except ServerSetupError as ex:
        logger.critical("Server setup failed", icon=LogIcon.CRITICAL, error=str(ex))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted", icon=LogIcon.STOP)


if __name__ == "__main__":
    main()
