import sqlite3
from pathlib import Path

import pytest

from papershelf.config import Settings
from papershelf.database.repository import PaperRepository
from papershelf.models.paper import Paper
from papershelf.services.paper_service import PaperService


@pytest.fixture(autouse=True)
def _reset_settings():
    """Settings is a process-wide singleton; start every test clean."""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture()
def db_path(tmp_path) -> Path:
    return tmp_path / "papers.db"


@pytest.fixture()
def repo(db_path) -> PaperRepository:
    return PaperRepository(db_path)


@pytest.fixture()
def legacy_repo(db_path) -> PaperRepository:
    return PaperRepository(db_path, mode="legacy")


@pytest.fixture()
def service(repo) -> PaperService:
    return PaperService(repo)


@pytest.fixture()
def legacy_service(legacy_repo) -> PaperService:
    return PaperService(legacy_repo, mode="legacy", uncategorized_label="未分類")


@pytest.fixture()
def make_paper():
    """Build an in-memory Paper with sensible defaults."""
    def _make(paper_id, tags=None, created_at="2024-01-01T00:00:00+00:00", **kwargs):
        kwargs.setdefault("title", f"Paper {paper_id}")
        kwargs.setdefault("link", f"https://example.org/{paper_id}")
        return Paper(id=paper_id, tags=tags, created_at=created_at, **kwargs)
    return _make


@pytest.fixture()
def old_schema_db(db_path) -> Path:
    """A database in the shape the category-era app left behind."""
    conn = sqlite3.connect(db_path)
    conn.executescript(
        """
        CREATE TABLE papers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            summary TEXT,
            link TEXT,
            pdf_path TEXT,
            category TEXT,
            subcategory TEXT,
            importance INTEGER DEFAULT 0,
            create_at DATETIME DEFAULT CURRENT_TIMESTAMP
        );
        INSERT INTO papers (title, link, category, subcategory, importance, create_at)
            VALUES ('Attention', 'https://a', 'NLP', 'Transformers', 1, '2023-05-01 10:00:00');
        INSERT INTO papers (title, pdf_path, category, subcategory, create_at)
            VALUES ('ResNet', 'resnet.pdf', 'CV', NULL, '2023-06-01 10:00:00');
        INSERT INTO papers (title, link, category, subcategory, create_at)
            VALUES ('Untitled idea', 'https://c', NULL, NULL, '2023-07-01 10:00:00');
        """
    )
    conn.commit()
    conn.close()
    return db_path
