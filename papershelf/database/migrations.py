"""One-way schema migrations for the papers table.

1. :func:`migrate_category_to_tags`: replace ``category`` /
   ``subcategory`` with a ``tags`` column holding ``"category,subcategory"``.
2. :func:`canonicalize_tags`: rewrite comma-separated ``tags`` values as
   JSON arrays.

Both are idempotent and safe to re-run.  Step 1 runs in a single
transaction: a failure rolls everything back and raises
:class:`~papershelf.errors.MigrationFailure`.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from papershelf.classification.codec import decode_tags, encode_tags, is_canonical
from papershelf.classification.normalizer import legacy_tags_value
from papershelf.database.repository import OLD_CREATED_COLUMN, TAGS_SCHEMA, table_columns
from papershelf.errors import MigrationFailure

logger = logging.getLogger(__name__)

LEGACY_COLUMNS = ("category", "subcategory")


@dataclass
class MigrationReport:
    """Outcome of :func:`migrate_category_to_tags`."""

    skipped: bool = False
    tags_column_added: bool = False
    converted: list[tuple[int, Optional[str]]] = field(default_factory=list)


@dataclass
class CanonicalizeReport:
    """Outcome of :func:`canonicalize_tags`."""

    converted: list[tuple[int, str, Optional[str]]] = field(default_factory=list)
    already_canonical: int = 0


def _connect(db_path: Path) -> sqlite3.Connection:
    # Autocommit mode; transactions are opened explicitly with BEGIN.
    conn = sqlite3.connect(db_path, isolation_level=None)
    conn.row_factory = sqlite3.Row
    return conn


def _rebuild_without_legacy_columns(conn: sqlite3.Connection, old_columns: list[str]) -> None:
    """Recreate ``papers`` in the tags shape, copying every shared column."""
    conn.execute(TAGS_SCHEMA.replace("IF NOT EXISTS papers", "papers_new"))
    new_columns = table_columns(conn, "papers_new")

    targets = [c for c in new_columns if c in old_columns]
    if "created_at" not in old_columns and OLD_CREATED_COLUMN in old_columns:
        targets.append("created_at")

    sources = []
    for column in targets:
        source = column
        if column == "created_at" and column not in old_columns:
            source = OLD_CREATED_COLUMN
        # NOT NULL in the new shape
        if column == "created_at":
            source = f"COALESCE({source}, CURRENT_TIMESTAMP)"
        elif column == "importance":
            source = f"COALESCE({source}, 0)"
        sources.append(source)

    conn.execute(
        f"INSERT INTO papers_new ({', '.join(targets)}) "
        f"SELECT {', '.join(sources)} FROM papers"
    )
    conn.execute("DROP TABLE papers")
    conn.execute("ALTER TABLE papers_new RENAME TO papers")


def migrate_category_to_tags(db_path: Path) -> MigrationReport:
    """Move category/subcategory classification into a ``tags`` column.

    Steps: detect legacy columns (no-op if absent) → add ``tags`` if
    missing → write ``"category,subcategory"`` per row → rebuild the
    table without the legacy columns.  Id, timestamps, importance and
    all other fields are preserved.

    Args:
        db_path: Path to SQLite database file

    Returns:
        MigrationReport describing what was done

    Raises:
        MigrationFailure: if any step fails (the database is unchanged)
    """
    report = MigrationReport()
    conn = _connect(db_path)
    try:
        columns = table_columns(conn)
        logger.info("papers columns: %s", ", ".join(columns) or "(no table)")

        if not any(c in columns for c in LEGACY_COLUMNS):
            logger.info("No category/subcategory columns found; skipping")
            report.skipped = True
            return report

        step = "begin"
        try:
            conn.execute("BEGIN")

            step = "add tags column"
            if "tags" not in columns:
                conn.execute("ALTER TABLE papers ADD COLUMN tags TEXT")
                report.tags_column_added = True
                logger.info("Added tags column")

            step = "convert rows"
            selected = ", ".join(["id", *[c for c in LEGACY_COLUMNS if c in columns]])
            for row in conn.execute(f"SELECT {selected} FROM papers ORDER BY id").fetchall():
                keys = row.keys()
                value = legacy_tags_value(
                    row["category"] if "category" in keys else None,
                    row["subcategory"] if "subcategory" in keys else None,
                )
                conn.execute("UPDATE papers SET tags = ? WHERE id = ?", (value, row["id"]))
                report.converted.append((row["id"], value))
                logger.info("ID %s: %s", row["id"], value)

            step = "rebuild table"
            _rebuild_without_legacy_columns(conn, table_columns(conn))

            conn.execute("COMMIT")
        except sqlite3.Error as e:
            conn.execute("ROLLBACK")
            logger.error("Migration rolled back during %s: %s", step, e)
            raise MigrationFailure(step, e) from e

        logger.info("Migrated %d papers to tags", len(report.converted))
        return report
    finally:
        conn.close()


def canonicalize_tags(db_path: Path) -> CanonicalizeReport:
    """Rewrite comma-separated ``tags`` values as JSON arrays.

    Values that already parse as a JSON array are left alone and counted
    in ``already_canonical``.  Values that split to nothing become NULL.

    Args:
        db_path: Path to SQLite database file

    Returns:
        CanonicalizeReport with per-row conversions
    """
    report = CanonicalizeReport()
    conn = _connect(db_path)
    try:
        if "tags" not in table_columns(conn):
            logger.info("No tags column found; nothing to canonicalize")
            return report

        rows = conn.execute(
            "SELECT id, tags FROM papers WHERE tags IS NOT NULL ORDER BY id"
        ).fetchall()
        logger.info("Checking %d tagged papers", len(rows))

        conn.execute("BEGIN")
        try:
            for row in rows:
                raw = row["tags"]
                if is_canonical(raw):
                    report.already_canonical += 1
                    continue
                value = encode_tags(decode_tags(raw))
                conn.execute("UPDATE papers SET tags = ? WHERE id = ?", (value, row["id"]))
                report.converted.append((row["id"], raw, value))
                logger.info("ID %s: %s -> %s", row["id"], raw, value)
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            conn.execute("ROLLBACK")
            raise MigrationFailure("canonicalize tags", e) from e

        logger.info(
            "Converted %d papers, %d already canonical",
            len(report.converted),
            report.already_canonical,
        )
        return report
    finally:
        conn.close()
