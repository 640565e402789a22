"""HTML pages: overview, tag / category listings, paper detail, add / edit forms."""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from papershelf.errors import ValidationError
from papershelf.gui.helpers import store_upload, submission_from_form
from papershelf.gui.state import AppState, get_state, templates
from papershelf.models.paper import Paper, Submission

router = APIRouter()


# ============================================================================
# Listings
# ============================================================================


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, app_state: AppState = Depends(get_state)):
    """Overview grouped by tag (or by category in legacy mode)."""
    service = app_state.service
    ctx: dict = {"legacy": app_state.settings.is_legacy}
    if app_state.settings.is_legacy:
        categories, latest = service.category_overview()
        ctx.update(groups=categories, latest=latest)
    else:
        tag_index = service.tag_index()
        ctx.update(groups=tag_index.universe, latest=tag_index.latest_by_tag)
    ctx["papers"] = service.list_papers()
    return templates.TemplateResponse(request, "index.html", ctx)


@router.get("/tag/{tag}", response_class=HTMLResponse)
async def tag_page(request: Request, tag: str, app_state: AppState = Depends(get_state)):
    """All papers carrying one tag, newest first."""
    papers = app_state.service.list_papers(tag)
    return templates.TemplateResponse(
        request,
        "tag.html",
        {"tag": tag, "papers": papers},
    )


@router.get("/category/{category}", response_class=HTMLResponse)
async def category_page(request: Request, category: str, app_state: AppState = Depends(get_state)):
    """Papers of one category grouped by subcategory (legacy mode)."""
    grouped = app_state.service.category_groups(category)
    return templates.TemplateResponse(
        request,
        "category.html",
        {"category": category, "grouped": grouped},
    )


@router.get("/paper/{paper_id}", response_class=HTMLResponse)
async def paper_detail(request: Request, paper_id: int, app_state: AppState = Depends(get_state)):
    paper = app_state.service.get(paper_id)
    return templates.TemplateResponse(
        request,
        "detail.html",
        {"paper": paper},
    )


# ============================================================================
# Add / Edit
# ============================================================================


def _form_response(
    request: Request,
    app_state: AppState,
    paper: Optional[Paper],
    action: str,
    error: Optional[str] = None,
    status_code: int = 200,
) -> HTMLResponse:
    """Render the shared add/edit form with dropdown choices."""
    service = app_state.service
    ctx: dict = {
        "paper": paper,
        "action": action,
        "error": error,
        "legacy": app_state.settings.is_legacy,
    }
    if app_state.settings.is_legacy:
        categories, _latest = service.category_overview()
        ctx.update(categories=categories, subcategories_map=service.subcategories_map())
    else:
        ctx["all_tags"] = service.tag_index().universe
    return templates.TemplateResponse(request, "form.html", ctx, status_code=status_code)


def _echo(submission: Submission, error: ValidationError) -> Paper:
    """Paper-shaped view of a rejected submission, for re-rendering."""
    return Paper(
        title=submission.title,
        summary=submission.summary,
        link=submission.link,
        pdf_path=submission.pdf_path,
        **error.classification,
    )


@router.get("/add", response_class=HTMLResponse)
async def add_form(request: Request, app_state: AppState = Depends(get_state)):
    return _form_response(request, app_state, None, "/add")


@router.post("/add", response_class=HTMLResponse)
async def add_paper(request: Request, app_state: AppState = Depends(get_state)):
    """Create a paper; a rejected submission re-renders the form with 400."""
    form = await request.form()
    submission = Submission(title=str(form.get("title") or ""))
    pdf_path = None
    try:
        pdf_path = store_upload(form, app_state.storage)
        submission = submission_from_form(form, pdf_path)
        app_state.service.submit(submission)
    except ValidationError as e:
        if pdf_path:
            app_state.storage.discard(pdf_path)
            submission = submission_from_form(form, None)
        return _form_response(
            request, app_state, _echo(submission, e), "/add", e.message, status_code=400
        )
    return RedirectResponse(url="/", status_code=303)


@router.get("/edit/{paper_id}", response_class=HTMLResponse)
async def edit_form(request: Request, paper_id: int, app_state: AppState = Depends(get_state)):
    paper = app_state.service.get(paper_id)
    return _form_response(request, app_state, paper, f"/edit/{paper_id}")


@router.post("/edit/{paper_id}", response_class=HTMLResponse)
async def edit_paper(request: Request, paper_id: int, app_state: AppState = Depends(get_state)):
    """Replace a paper's fields; keeps the current PDF unless a new one is uploaded."""
    app_state.service.get(paper_id)
    form = await request.form()
    submission = Submission(title=str(form.get("title") or ""))
    action = f"/edit/{paper_id}"
    pdf_path = None
    try:
        pdf_path = store_upload(form, app_state.storage)
        submission = submission_from_form(form, pdf_path)
        app_state.service.edit(paper_id, submission)
    except ValidationError as e:
        if pdf_path:
            app_state.storage.discard(pdf_path)
            submission = submission_from_form(form, None)
        paper = _echo(submission, e)
        paper.id = paper_id
        return _form_response(request, app_state, paper, action, e.message, status_code=400)
    return RedirectResponse(url=f"/paper/{paper_id}", status_code=303)
