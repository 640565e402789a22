"""View-ready groupings derived from the full paper collection.

Nothing here is cached: every function is handed the current papers and
recomputes from scratch.  "Latest" always means the greatest
``Paper.recency_key`` (creation time, then id), so papers that share a
timestamp resolve to the one with the highest id.
"""

from typing import Iterable, Optional, Sequence

from papershelf.models.paper import Paper, TagIndex


def tag_universe(papers: Iterable[Paper]) -> list[str]:
    """Distinct tags across *papers*, in first-seen order."""
    seen: dict[str, None] = {}
    for paper in papers:
        for tag in paper.tag_list:
            seen.setdefault(tag, None)
    return list(seen)


def _newer(candidate: Paper, current: Optional[Paper]) -> bool:
    return current is None or candidate.recency_key > current.recency_key


def build_tag_index(papers: Sequence[Paper]) -> TagIndex:
    """Build the tag universe and the newest paper carrying each tag.

    Args:
        papers: Full paper collection (raw ``tags`` column values)

    Returns:
        TagIndex with ``universe`` in first-seen order
    """
    latest: dict[str, Paper] = {}
    for paper in papers:
        for tag in paper.tag_list:
            if _newer(paper, latest.get(tag)):
                latest[tag] = paper
    return TagIndex(universe=tag_universe(papers), latest_by_tag=latest)


def papers_with_tag(papers: Iterable[Paper], tag: str) -> list[Paper]:
    """Papers carrying *tag* (exact match), newest first."""
    matched = [p for p in papers if tag in p.tag_list]
    matched.sort(key=lambda p: p.recency_key, reverse=True)
    return matched


# ---------------------------------------------------------------------------
# Legacy category / subcategory scheme
# ---------------------------------------------------------------------------

def category_universe(papers: Iterable[Paper]) -> list[str]:
    """Distinct non-empty categories, in first-seen order."""
    seen: dict[str, None] = {}
    for paper in papers:
        if paper.category:
            seen.setdefault(paper.category, None)
    return list(seen)


def latest_by_category(papers: Iterable[Paper]) -> dict[str, Paper]:
    latest: dict[str, Paper] = {}
    for paper in papers:
        if paper.category and _newer(paper, latest.get(paper.category)):
            latest[paper.category] = paper
    return latest


def build_category_index(
    papers: Iterable[Paper],
    category: str,
    uncategorized_label: str,
) -> dict[str, list[Paper]]:
    """Group the papers of one category by subcategory.

    Papers without a subcategory go under *uncategorized_label*.  Group
    and member order follow the input order.
    """
    grouped: dict[str, list[Paper]] = {}
    for paper in papers:
        if paper.category != category:
            continue
        label = paper.subcategory or uncategorized_label
        grouped.setdefault(label, []).append(paper)
    return grouped


def distinct_subcategories(papers: Iterable[Paper], category: str) -> list[str]:
    """Distinct non-empty subcategories seen under *category*."""
    seen: dict[str, None] = {}
    for paper in papers:
        if paper.category == category and paper.subcategory:
            seen.setdefault(paper.subcategory, None)
    return list(seen)


def subcategories_by_category(papers: Iterable[Paper]) -> dict[str, list[str]]:
    """Map every category to its distinct subcategories (for edit forms)."""
    mapping: dict[str, dict[str, None]] = {}
    for paper in papers:
        subs = mapping.setdefault(paper.category or "", {})
        if paper.subcategory:
            subs.setdefault(paper.subcategory, None)
    return {cat: list(subs) for cat, subs in mapping.items()}
