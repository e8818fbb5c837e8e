"""Static site endpoints."""

import asyncio

from portfolio.core.logger import LogIcon, logger
from portfolio.core.router import Router
from portfolio.core.settings import settings as st
from portfolio.models.core import HttpRequest, Response
from portfolio.services.static import INDEX_FILE, resolve_request_path, serve_file

router = Router()


@router.get("/")
async def index(request: HttpRequest) -> Response:
    return await serve_file(st.STATIC_DIR / INDEX_FILE)


@router.get()
async def static_file(request: HttpRequest) -> Response:
    path = await asyncio.to_thread(resolve_request_path, request.path, st.STATIC_DIR, st.UPLOAD_DIR)
    logger.debug("Serving file", icon=LogIcon.DOWNLOAD, file=str(path))
    return await serve_file(path)
