"""JSON endpoints used by the page scripts (tag autocomplete, subcategory dropdown)."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from papershelf.gui.state import AppState, get_state

router = APIRouter()


@router.get("/search/tags")
async def search_tags(
    q: str = Query("", description="Tag search text"),
    app_state: AppState = Depends(get_state),
):
    """Tag autocomplete. A blank query follows the configured empty-query policy."""
    return JSONResponse(app_state.service.search_tags(q))


@router.get("/subcategories/{category}")
async def subcategories(category: str, app_state: AppState = Depends(get_state)):
    """Distinct subcategories seen under *category* (legacy mode)."""
    return JSONResponse(app_state.service.subcategories(category))


@router.get("/api/tags")
async def tag_index(app_state: AppState = Depends(get_state)):
    """Tag universe with the id of the newest paper per tag."""
    index = app_state.service.tag_index()
    return JSONResponse({
        "tags": index.universe,
        "latest": {tag: paper.id for tag, paper in index.latest_by_tag.items()},
    })
