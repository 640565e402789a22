"""Turn raw form fields into the classification value that gets stored.

Two modes exist and are never mixed:

* ``tags``   – dropdown selections and free-text tags are *merged*
* ``legacy`` – one category + one subcategory; free text *replaces*
  the dropdown selection
"""

from typing import Any, Iterable, Optional

from papershelf.classification.codec import TAG_SEPARATOR, dedupe, encode_tags, split_tags

MODE_TAGS = "tags"
MODE_LEGACY = "legacy"
MODES = (MODE_TAGS, MODE_LEGACY)


def as_list(value: Any) -> list[str]:
    """Coerce a form value (absent, scalar or sequence) to a list of strings.

    Blank entries are dropped and the rest are stripped.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        items: Iterable[Any] = value
    else:
        items = [value]
    result = []
    for item in items:
        if item is None:
            continue
        text = str(item).strip()
        if text:
            result.append(text)
    return result


def merge_tags(selected: Any, free_text: Optional[str]) -> list[str]:
    """Union of dropdown selections and comma-separated free-text tags.

    Selections come first, then new tags in the order typed, skipping
    any already present.

    >>> merge_tags(["ml"], "ml, cv")
    ['ml', 'cv']
    """
    tags = as_list(selected)
    if free_text and free_text.strip():
        tags.extend(split_tags(free_text))
    return dedupe(tags)


def normalize_tags(selected: Any, free_text: Optional[str]) -> Optional[str]:
    """Return the stored tag value for a submission (tags mode)."""
    return encode_tags(merge_tags(selected, free_text))


def resolve_override(selected: Any, override: Optional[str]) -> Optional[str]:
    """Single-valued field: non-blank free text wins, else the selection.

    >>> resolve_override("vision", " nlp ")
    'nlp'
    >>> resolve_override("vision", "  ")
    'vision'
    """
    if override and override.strip():
        return override.strip()
    values = as_list(selected)
    return values[0] if values else None


def normalize_category(
    category: Any,
    new_category: Optional[str],
    subcategory: Any,
    new_subcategory: Optional[str],
) -> tuple[Optional[str], Optional[str]]:
    """Return ``(category, subcategory)`` for a submission (legacy mode)."""
    return (
        resolve_override(category, new_category),
        resolve_override(subcategory, new_subcategory),
    )


def legacy_tags_value(category: Optional[str], subcategory: Optional[str]) -> Optional[str]:
    """Comma-joined ``category,subcategory`` with empty parts omitted.

    This is the intermediate value written by the category → tags
    migration, before the canonicalize pass turns it into JSON.
    """
    parts = [p for p in (category, subcategory) if p]
    return TAG_SEPARATOR.join(parts) or None
