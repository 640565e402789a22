"""Per-app service container, request dependencies and templates."""

import os
from dataclasses import dataclass
from datetime import datetime

from fastapi import Request
from fastapi.templating import Jinja2Templates

from papershelf.config import Settings
from papershelf.services.paper_service import PaperService
from papershelf.services.upload_service import PdfStorage


# ============================================================================
# Service Container
# ============================================================================


@dataclass
class AppState:
    """Services built once by ``create_app`` and stored on ``app.state``."""

    settings: Settings
    service: PaperService
    storage: PdfStorage


def get_state(request: Request) -> AppState:
    """FastAPI dependency: the AppState of the serving application."""
    return request.app.state.papershelf


# ============================================================================
# Templates & Filters
# ============================================================================

base_dir = os.path.dirname(__file__)
templates = Jinja2Templates(directory=os.path.join(base_dir, "templates"))


def format_date(date_str: str) -> str:
    """Format date string to 'Feb 11, 2026' style."""
    if not date_str:
        return ""
    try:
        dt = datetime.fromisoformat(date_str.replace("Z", "+00:00").split("+")[0])
        return dt.strftime("%b %d, %Y")
    except ValueError:
        return date_str[:10]


templates.env.filters["format_date"] = format_date
