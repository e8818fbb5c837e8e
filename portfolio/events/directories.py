"""Filesystem lifespan events for the static root and the upload directory."""

from pathlib import Path

from portfolio.core.lifespan import BaseEvent
from portfolio.core.logger import LogIcon, logger
from portfolio.core.settings import settings as st


class UploadDirectoryEvent(BaseEvent[Path]):
    """Creates the upload directory if absent."""

    name = "upload_dir"

    async def startup(self) -> Path:
        st.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
        return st.UPLOAD_DIR


class StaticRootEvent(BaseEvent[Path]):
    """Checks the static root; every static GET answers 404 while it is missing."""

    name = "static_root"

    async def startup(self) -> Path:
        if not st.STATIC_DIR.is_dir():
            logger.warning("Static root missing", icon=LogIcon.WARNING, path=str(st.STATIC_DIR))
        elif not (st.STATIC_DIR / "index.html").is_file():
            logger.warning("Static root has no index.html", icon=LogIcon.WARNING, path=str(st.STATIC_DIR))
        return st.STATIC_DIR
