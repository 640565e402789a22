"""FastAPI + Jinja2 web app for PaperShelf."""

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from papershelf import __version__
from papershelf.config import Settings
from papershelf.database.repository import PaperRepository
from papershelf.errors import NotFoundError, ValidationError
from papershelf.gui.routers import actions, api, pages
from papershelf.gui.state import AppState, templates
from papershelf.services.paper_service import PaperService
from papershelf.services.upload_service import PdfStorage

logger = logging.getLogger(__name__)


def _wants_json(request: Request) -> bool:
    return "application/json" in request.headers.get("accept", "")


async def _not_found(request: Request, exc: NotFoundError):
    if _wants_json(request):
        return JSONResponse({"error": str(exc)}, status_code=404)
    return templates.TemplateResponse(
        request, "error.html", {"message": str(exc)}, status_code=404
    )


async def _invalid(request: Request, exc: ValidationError):
    if _wants_json(request):
        return JSONResponse({"error": exc.message}, status_code=400)
    return HTMLResponse(exc.message, status_code=400)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the web app around one repository / service instance.

    Args:
        settings: Application settings (``Settings.load()`` if omitted)

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings.load()
    repo = PaperRepository(settings.db_path, settings.classification_mode)
    service = PaperService(
        repo,
        mode=settings.classification_mode,
        empty_query=settings.empty_query,
        uncategorized_label=settings.uncategorized_label,
    )
    storage = PdfStorage(settings.upload_dir)

    app = FastAPI(title="PaperShelf", version=__version__)
    app.state.papershelf = AppState(settings=settings, service=service, storage=storage)

    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(ValidationError, _invalid)

    base_dir = os.path.dirname(__file__)
    app.mount("/static", StaticFiles(directory=os.path.join(base_dir, "static")), name="static")
    app.mount("/uploads", StaticFiles(directory=str(settings.upload_dir)), name="uploads")

    app.include_router(pages.router)
    app.include_router(api.router)
    app.include_router(actions.router)

    logger.info(
        "PaperShelf %s: db=%s mode=%s",
        __version__,
        settings.db_path,
        settings.classification_mode,
    )
    return app
