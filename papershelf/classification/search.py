"""Tag autocomplete matching."""

from typing import Iterable

EMPTY_QUERY_NONE = "none"
EMPTY_QUERY_ALL = "all"
EMPTY_QUERY_POLICIES = (EMPTY_QUERY_NONE, EMPTY_QUERY_ALL)


def search_tags(universe: Iterable[str], query: str) -> list[str]:
    """Case-insensitive substring match of *query* against every tag.

    The match is on the whole tag string, so ``"ml"`` does not match
    ``"Machine Learning"``.  Order follows *universe*.  An empty query
    matches everything.
    """
    needle = (query or "").casefold()
    return [tag for tag in universe if needle in tag.casefold()]


def autocomplete(universe: Iterable[str], query: str, empty_query: str = EMPTY_QUERY_NONE) -> list[str]:
    """Boundary wrapper around :func:`search_tags`.

    Args:
        universe: Tag universe
        query: Raw user input (stripped here)
        empty_query: ``"none"`` returns no suggestions for a blank query,
            ``"all"`` returns the whole universe

    Returns:
        Matching tags
    """
    if empty_query not in EMPTY_QUERY_POLICIES:
        raise ValueError(f"Unknown empty-query policy: {empty_query!r}")
    query = (query or "").strip()
    if not query and empty_query == EMPTY_QUERY_NONE:
        return []
    return search_tags(universe, query)
