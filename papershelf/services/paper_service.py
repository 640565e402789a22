"""Paper submission, editing and view-model service.

Sits between the boundary (web routes, CLI) and the repository: raw
form fields go through the classification normalizer, are validated,
and only then written.  Index and search results are recomputed from
the full collection on every call.
"""

import logging
from typing import Optional

from papershelf.classification.index import (
    build_category_index,
    build_tag_index,
    category_universe,
    distinct_subcategories,
    latest_by_category,
    papers_with_tag,
    subcategories_by_category,
)
from papershelf.classification.normalizer import (
    MODE_LEGACY,
    MODE_TAGS,
    MODES,
    normalize_category,
    normalize_tags,
)
from papershelf.classification.search import EMPTY_QUERY_NONE, autocomplete
from papershelf.database.repository import PaperRepository
from papershelf.errors import NotFoundError, ValidationError
from papershelf.models.paper import Paper, Submission, TagIndex

logger = logging.getLogger(__name__)

MISSING_SOURCE_MESSAGE = "Provide a link or a PDF file"
MISSING_TITLE_MESSAGE = "Title is required"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class PaperService:
    """Classification-aware operations over a :class:`PaperRepository`."""

    def __init__(
        self,
        repo: PaperRepository,
        mode: str = MODE_TAGS,
        empty_query: str = EMPTY_QUERY_NONE,
        uncategorized_label: str = "未分類",
    ):
        """Initialize service.

        Args:
            repo: Storage collaborator
            mode: ``"tags"`` or ``"legacy"``; fixes which precedence
                policy submissions use
            empty_query: Autocomplete policy for a blank query
            uncategorized_label: Group label for papers without a
                subcategory (legacy mode)
        """
        if mode not in MODES:
            raise ValueError(f"Unknown classification mode: {mode!r}")
        self.repo = repo
        self.mode = mode
        self.empty_query = empty_query
        self.uncategorized_label = uncategorized_label

    # ── Submission ────────────────────────────────────────────────────

    def classify(self, submission: Submission) -> dict[str, Optional[str]]:
        """Normalize the classification fields of *submission*.

        Returns:
            ``{"tags": ...}`` in tags mode, ``{"category": ...,
            "subcategory": ...}`` in legacy mode
        """
        if self.mode == MODE_LEGACY:
            category, subcategory = normalize_category(
                submission.category,
                submission.new_category,
                submission.subcategory,
                submission.new_subcategory,
            )
            return {"category": category, "subcategory": subcategory}
        return {"tags": normalize_tags(submission.selected_tags, submission.new_tags)}

    def prepare(self, submission: Submission) -> Paper:
        """Normalize and validate a submission into an unsaved Paper.

        Normalization always runs first so a rejected submission still
        reports the classification it would have stored.

        Raises:
            ValidationError: title missing, or neither link nor PDF given
        """
        classification = self.classify(submission)
        paper = Paper(
            title=_clean(submission.title) or "",
            summary=_clean(submission.summary),
            link=_clean(submission.link),
            pdf_path=_clean(submission.pdf_path),
            **classification,
        )
        if not paper.title:
            logger.info("Rejected submission: no title")
            raise ValidationError(MISSING_TITLE_MESSAGE, classification)
        if not paper.link and not paper.pdf_path:
            logger.info("Rejected submission %r: no link or PDF", paper.title)
            raise ValidationError(MISSING_SOURCE_MESSAGE, classification)
        return paper

    def submit(self, submission: Submission) -> Paper:
        """Create a paper from raw form fields.

        Returns:
            The stored Paper (re-read, with id and timestamp)
        """
        paper = self.prepare(submission)
        paper_id = self.repo.insert(paper)
        logger.info("Added paper %s: %s", paper_id, paper.title)
        return self.repo.find_by_id(paper_id) or paper

    def edit(self, paper_id: int, submission: Submission) -> Paper:
        """Replace a paper's fields (importance is kept).

        Raises:
            NotFoundError: no paper with *paper_id*
            ValidationError: see :meth:`prepare`
        """
        if self.repo.find_by_id(paper_id) is None:
            raise NotFoundError(paper_id)
        paper = self.prepare(submission)
        if not self.repo.update(paper_id, paper):
            raise NotFoundError(paper_id)
        logger.info("Updated paper %s", paper_id)
        return self.repo.find_by_id(paper_id) or paper

    # ── Importance ────────────────────────────────────────────────────

    def set_importance(self, paper_id: int, important: bool) -> None:
        if not self.repo.set_importance(paper_id, important):
            raise NotFoundError(paper_id)
        logger.info("Paper %s importance -> %s", paper_id, important)

    def toggle_importance(self, paper_id: int) -> bool:
        """Flip the importance flag.

        Returns:
            The new value
        """
        paper = self.get(paper_id)
        self.set_importance(paper_id, not paper.importance)
        return not paper.importance

    # ── Reads ─────────────────────────────────────────────────────────

    def get(self, paper_id: int) -> Paper:
        paper = self.repo.find_by_id(paper_id)
        if paper is None:
            raise NotFoundError(paper_id)
        return paper

    def list_papers(self, tag: Optional[str] = None) -> list[Paper]:
        """All papers newest first, optionally only those carrying *tag*."""
        papers = self.repo.list_all()
        if tag is not None:
            return papers_with_tag(papers, tag)
        return sorted(papers, key=lambda p: p.recency_key, reverse=True)

    def tag_index(self) -> TagIndex:
        return build_tag_index(self.repo.list_all())

    def search_tags(self, query: str) -> list[str]:
        """Autocomplete suggestions using the configured empty-query policy."""
        return autocomplete(self.tag_index().universe, query, self.empty_query)

    # ── Legacy category views ─────────────────────────────────────────

    def category_overview(self) -> tuple[list[str], dict[str, Paper]]:
        """Return ``(categories, latest paper per category)``."""
        papers = self.repo.list_all()
        return category_universe(papers), latest_by_category(papers)

    def category_groups(self, category: str) -> dict[str, list[Paper]]:
        return build_category_index(self.repo.list_all(), category, self.uncategorized_label)

    def subcategories(self, category: str) -> list[str]:
        return distinct_subcategories(self.repo.list_all(), category)

    def subcategories_map(self) -> dict[str, list[str]]:
        return subcategories_by_category(self.repo.list_all())
