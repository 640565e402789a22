"""Action routes: importance flag."""

from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from papershelf.gui.helpers import parse_bool
from papershelf.gui.state import AppState, get_state

router = APIRouter()


@router.post("/paper/{paper_id}/importance")
async def set_importance(
    request: Request,
    paper_id: int,
    important: Optional[str] = Form(None),
    app_state: AppState = Depends(get_state),
) -> Response:
    """Set the importance flag, or toggle it when ``important`` is absent.

    Fetch callers (``Accept: application/json``) get the new value as
    JSON; plain form posts are redirected back.
    """
    value = parse_bool(important)
    if value is None:
        value = app_state.service.toggle_importance(paper_id)
    else:
        app_state.service.set_importance(paper_id, value)

    if "application/json" in request.headers.get("accept", ""):
        return JSONResponse({"id": paper_id, "importance": value})
    return RedirectResponse(
        url=request.headers.get("referer") or f"/paper/{paper_id}",
        status_code=303,
    )
