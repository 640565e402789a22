"""Paper repository for database operations."""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from papershelf.classification.normalizer import MODE_LEGACY, MODE_TAGS, MODES
from papershelf.models.paper import Paper

logger = logging.getLogger(__name__)

TAGS_SCHEMA = """
    CREATE TABLE IF NOT EXISTS papers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        summary TEXT,
        link TEXT,
        pdf_path TEXT,
        tags TEXT,
        importance INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    );
"""

LEGACY_SCHEMA = """
    CREATE TABLE IF NOT EXISTS papers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        summary TEXT,
        link TEXT,
        pdf_path TEXT,
        category TEXT,
        subcategory TEXT,
        importance INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    );
"""

# Paper attributes that map 1:1 onto columns; only those present in the
# table are read or written.
FIELD_COLUMNS = (
    "title",
    "summary",
    "link",
    "pdf_path",
    "tags",
    "category",
    "subcategory",
    "importance",
)

# Timestamp column name used by databases created before the rename.
OLD_CREATED_COLUMN = "create_at"


def table_columns(conn: sqlite3.Connection, table: str = "papers") -> list[str]:
    """Return column names of *table* (empty if the table does not exist)."""
    return [row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()]


class PaperRepository:
    """Repository for paper CRUD operations using SQLite.

    Reads tolerate both the legacy (category/subcategory) and the tags
    table shapes; writes only touch columns that exist.
    """

    def __init__(self, db_path: Path, mode: str = MODE_TAGS):
        """Initialize repository with database path.

        Args:
            db_path: Path to SQLite database file
            mode: ``"tags"`` or ``"legacy"``; selects the schema created
                for a fresh database
        """
        if mode not in MODES:
            raise ValueError(f"Unknown classification mode: {mode!r}")
        self.db_path = db_path
        self.mode = mode
        self._init_db()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connection() as conn:
            cursor = conn.cursor()
            existed = bool(table_columns(conn))
            cursor.execute(LEGACY_SCHEMA if self.mode == MODE_LEGACY else TAGS_SCHEMA)
            if not existed:
                logger.info("Created papers table (%s schema) in %s", self.mode, self.db_path)

            # Databases from before the importance flag existed
            columns = table_columns(conn)
            if "importance" not in columns:
                cursor.execute("ALTER TABLE papers ADD COLUMN importance INTEGER NOT NULL DEFAULT 0")
                logger.info("Added importance column to papers")
            conn.commit()

        if self.mode == MODE_TAGS and "tags" not in columns:
            logger.warning(
                "papers table in %s has no tags column; run `papershelf migrate`",
                self.db_path,
            )

    def columns(self) -> list[str]:
        with self._connection() as conn:
            return table_columns(conn)

    @staticmethod
    def _row_to_paper(row: sqlite3.Row) -> Paper:
        keys = row.keys()

        def get(name: str):
            return row[name] if name in keys else None

        return Paper(
            title=row["title"],
            summary=get("summary"),
            link=get("link"),
            pdf_path=get("pdf_path"),
            tags=get("tags"),
            category=get("category"),
            subcategory=get("subcategory"),
            importance=bool(get("importance") or 0),
            id=row["id"],
            created_at=get("created_at") or get(OLD_CREATED_COLUMN),
        )

    @staticmethod
    def _created_column(columns: list[str]) -> Optional[str]:
        """Timestamp column of this table (``create_at`` in category-era databases)."""
        for name in ("created_at", OLD_CREATED_COLUMN):
            if name in columns:
                return name
        return None

    def _writable(self, conn: sqlite3.Connection, paper: Paper) -> dict[str, object]:
        present = set(table_columns(conn))
        values: dict[str, object] = {}
        for name in FIELD_COLUMNS:
            if name in present:
                value = getattr(paper, name)
                values[name] = int(value) if name == "importance" else value
        return values

    def list_all(self) -> list[Paper]:
        """Return every paper, oldest first (by id).

        Returns:
            List of Paper objects
        """
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM papers ORDER BY id ASC").fetchall()
        return [self._row_to_paper(row) for row in rows]

    def find_by_id(self, paper_id: int) -> Optional[Paper]:
        """Find a single paper by ID.

        Args:
            paper_id: Paper ID to find

        Returns:
            Paper object if found, None otherwise
        """
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM papers WHERE id = ?", (paper_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_paper(row)

    def insert(self, paper: Paper) -> int:
        """Insert a new paper.

        ``created_at`` is taken from *paper* when set, otherwise the
        current UTC time.

        Args:
            paper: Paper to insert (``id`` is ignored)

        Returns:
            The new paper ID
        """
        created_at = paper.created_at or datetime.now(timezone.utc).isoformat()
        with self._connection() as conn:
            values = self._writable(conn, paper)
            created_column = self._created_column(table_columns(conn))
            if created_column:
                values[created_column] = created_at
            names = ", ".join(values)
            placeholders = ", ".join(["?"] * len(values))
            cursor = conn.execute(
                f"INSERT INTO papers ({names}) VALUES ({placeholders})",
                tuple(values.values()),
            )
            conn.commit()
            new_id = cursor.lastrowid
        logger.debug("Inserted paper %s (%r)", new_id, paper.title)
        return new_id

    def update(self, paper_id: int, paper: Paper) -> bool:
        """Replace title, summary, link, pdf path and classification.

        ``importance`` and ``created_at`` are left untouched.

        Args:
            paper_id: Paper ID to update
            paper: New field values

        Returns:
            True if the paper existed and was updated, False otherwise
        """
        with self._connection() as conn:
            values = self._writable(conn, paper)
            values.pop("importance", None)
            assignments = ", ".join(f"{name} = ?" for name in values)
            cursor = conn.execute(
                f"UPDATE papers SET {assignments} WHERE id = ?",
                (*values.values(), paper_id),
            )
            conn.commit()
            updated = cursor.rowcount > 0
        logger.debug("Update paper %s: %s", paper_id, "ok" if updated else "not found")
        return updated

    def set_importance(self, paper_id: int, important: bool) -> bool:
        """Set the importance flag of one paper.

        Returns:
            True if the paper exists, False otherwise
        """
        with self._connection() as conn:
            cursor = conn.execute(
                "UPDATE papers SET importance = ? WHERE id = ?",
                (int(important), paper_id),
            )
            conn.commit()
            return cursor.rowcount > 0
