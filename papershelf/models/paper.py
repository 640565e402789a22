"""Paper data model."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from papershelf.classification.codec import decode_tags

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_created_at(value: Optional[str]) -> datetime:
    """Parse a stored creation timestamp into an aware datetime.

    Accepts ISO 8601 (as written by the repository) and SQLite's
    ``CURRENT_TIMESTAMP`` format.  Naive values are taken as UTC;
    missing or unreadable values sort as the oldest possible time.
    """
    if not value:
        return _OLDEST
    try:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return _OLDEST
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class Paper:
    """A cataloged paper or bookmark.

    ``tags`` holds the raw stored column value (JSON text, comma text or
    None); use :attr:`tag_list` for the decoded tags.  ``category`` and
    ``subcategory`` are only populated for databases in legacy mode.
    """

    title: str
    summary: Optional[str] = None
    link: Optional[str] = None
    pdf_path: Optional[str] = None
    tags: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    importance: bool = False

    # Database fields (set after persistence)
    id: Optional[int] = None
    created_at: Optional[str] = None

    @property
    def tag_list(self) -> list[str]:
        return decode_tags(self.tags)

    @property
    def recency_key(self) -> tuple[datetime, int]:
        """Sort key for "most recently created": timestamp, then id."""
        return (parse_created_at(self.created_at), self.id or 0)


@dataclass
class Submission:
    """Raw add/edit form fields, before normalization.

    ``selected_tags`` / ``category`` / ``subcategory`` may arrive as a
    scalar, a list, or not at all.
    """

    title: str = ""
    summary: Optional[str] = None
    link: Optional[str] = None
    pdf_path: Optional[str] = None
    selected_tags: Any = None
    new_tags: Optional[str] = None
    category: Any = None
    new_category: Optional[str] = None
    subcategory: Any = None
    new_subcategory: Optional[str] = None


@dataclass
class TagIndex:
    """Tag universe plus the newest paper for each tag."""

    universe: list[str] = field(default_factory=list)
    latest_by_tag: dict[str, Paper] = field(default_factory=dict)
