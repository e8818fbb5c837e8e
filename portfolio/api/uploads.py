"""Upload and upload-listing endpoints."""

import asyncio

from portfolio.core.errors import BadRequest, LengthRequired, PayloadTooLarge
from portfolio.core.logger import LogIcon, logger
from portfolio.core.router import Router
from portfolio.core.settings import settings as st
from portfolio.models.core import HttpRequest, Response
from portfolio.services.multipart import extract_boundary, parse_multipart
from portfolio.services.uploads import UPLOAD_SUCCESS_PAGE, list_uploads, render_listing, save_upload

router = Router()


def parse_content_length(value: str) -> int:
    try:
        length = int(value.strip())
    except ValueError:
        raise BadRequest("Invalid Content-Length") from None
    if length < 0:
        raise BadRequest("Invalid Content-Length")
    if length > st.MAX_BODY_BYTES:
        raise PayloadTooLarge()
    return length


@router.get("/uploads")
async def uploads_listing(request: HttpRequest) -> str:
    names = await asyncio.to_thread(list_uploads, st.UPLOAD_DIR)
    return render_listing(names)


@router.post("/upload")
async def upload(request: HttpRequest) -> Response:
    """Store the single file of a multipart/form-data body in the upload directory."""
    raw_length = request.header("Content-Length")
    if raw_length is None:
        raise LengthRequired()
    length = parse_content_length(raw_length)

    content_type = request.header("Content-Type")
    if content_type is None:
        raise BadRequest("Content-Type required")
    boundary = extract_boundary(content_type)

    body = await request.read_body(length, st.RECV_CHUNK_SIZE)
    if len(body) < length:
        logger.warning("Body shorter than Content-Length", icon=LogIcon.WARNING, expected=length, received=len(body))

    upload_file = parse_multipart(body, boundary)
    target = await save_upload(upload_file, st.UPLOAD_DIR)
    logger.info("Upload stored", icon=LogIcon.UPLOAD, file=target.name, size=len(upload_file))
    return Response.html(UPLOAD_SUCCESS_PAGE)
