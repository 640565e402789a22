"""Tag codec: stored tag column <-> ordered list of tag strings.

The ``tags`` column has held three shapes over the life of the database:

* ``NULL``                 – no classification
* ``"ml, nlp"``            – legacy comma-separated string
* ``'["ml", "nlp"]'``      – canonical JSON array
* ``'"ml"'``                – a bare JSON string, read as one tag

Old rows are never rewritten eagerly, so :func:`decode_tags` must accept
all of them.  Decoders are tried in the order listed in ``DECODERS``; the
first one that returns a list wins.
"""

import json
import logging
from typing import Any, Callable, Iterable, Optional

logger = logging.getLogger(__name__)

TAG_SEPARATOR = ","


def split_tags(text: Optional[str]) -> list[str]:
    """Split comma-separated text into trimmed, non-empty parts.

    >>> split_tags("ml, nlp ,, cv")
    ['ml', 'nlp', 'cv']
    """
    if not text:
        return []
    return [part.strip() for part in text.split(TAG_SEPARATOR) if part.strip()]


def dedupe(tags: Iterable[str]) -> list[str]:
    """Drop empty strings and repeats, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for tag in tags:
        if tag and tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def _decode_structured(raw: str) -> Optional[list[str]]:
    """JSON array decoder. Returns None when *raw* is not a JSON array."""
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(value, list):
        return None
    return [str(item) for item in value if item is not None]


def _decode_string_scalar(raw: str) -> Optional[list[str]]:
    """A bare JSON string such as ``'"ml"'`` is one tag."""
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(value, str):
        return None
    value = value.strip()
    return [value] if value else []


def _decode_delimited(raw: str) -> Optional[list[str]]:
    """Legacy comma-separated decoder. Always succeeds."""
    return split_tags(raw)


DECODERS: tuple[Callable[[str], Optional[list[str]]], ...] = (
    _decode_structured,
    _decode_string_scalar,
    _decode_delimited,
)


def decode_tags(raw: Any) -> list[str]:
    """Decode a stored tag value into an ordered, de-duplicated list.

    Never raises: anything unreadable degrades to ``[]``.

    Args:
        raw: Column value (``None``, JSON text, comma text, or an
            already-decoded list/tuple)

    Returns:
        List of tag strings
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return dedupe(str(item) for item in raw if item is not None)
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Undecodable tag bytes %r, treating as empty", raw)
            return []
    if not isinstance(raw, str):
        logger.debug("Unsupported tag value %r, treating as empty", raw)
        return []

    for decoder in DECODERS:
        tags = decoder(raw)
        if tags is not None:
            return dedupe(tags)
    return []


def encode_tags(tags: Iterable[str]) -> Optional[str]:
    """Encode tags into the canonical stored form.

    Returns:
        JSON array text, or ``None`` when there are no tags (keeps the
        column uniform with rows that were never tagged)
    """
    unique = dedupe(tags)
    if not unique:
        return None
    return json.dumps(unique, ensure_ascii=False)


def is_canonical(raw: Optional[str]) -> bool:
    """Return True if *raw* is already stored as a JSON array."""
    if raw is None:
        return False
    return _decode_structured(raw) is not None
