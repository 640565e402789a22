from pathlib import Path

import pytest

from papershelf.config import Settings, save_settings


def test_defaults_without_settings_file(tmp_path):
    settings = Settings.load(tmp_path)
    assert settings.db_path == tmp_path / "papers.db"
    assert settings.upload_dir == tmp_path / "uploads"
    assert settings.classification_mode == "tags"
    assert settings.empty_query == "none"
    assert settings.port == 5001
    assert not settings.is_legacy


def test_load_is_singleton(tmp_path):
    assert Settings.load(tmp_path) is Settings.load(tmp_path / "elsewhere")


def test_reads_yaml(tmp_path):
    meta = tmp_path / ".metadata"
    meta.mkdir()
    (meta / "settings.yaml").write_text(
        "db_path: data/shelf.db\n"
        "classification_mode: legacy\n"
        "empty_query: all\n"
        "port: 8080\n"
        "uncategorized_label: Misc\n",
        encoding="utf-8",
    )
    settings = Settings.load(tmp_path)
    assert settings.db_path == tmp_path / "data" / "shelf.db"
    assert settings.is_legacy
    assert settings.empty_query == "all"
    assert settings.port == 8080
    assert settings.uncategorized_label == "Misc"


def test_malformed_yaml_falls_back_to_defaults(tmp_path):
    meta = tmp_path / ".metadata"
    meta.mkdir()
    (meta / "settings.yaml").write_text("db_path: [unclosed\n", encoding="utf-8")
    assert Settings.load(tmp_path).db_path == tmp_path / "papers.db"


def test_invalid_mode_rejected(tmp_path):
    meta = tmp_path / ".metadata"
    meta.mkdir()
    (meta / "settings.yaml").write_text("classification_mode: folders\n", encoding="utf-8")
    with pytest.raises(ValueError):
        Settings.load(tmp_path)


def test_update_validates(tmp_path):
    settings = Settings.load(tmp_path)
    settings.update(empty_query="all")
    assert settings.empty_query == "all"
    with pytest.raises(ValueError):
        settings.update(empty_query="maybe")
    with pytest.raises(AttributeError):
        settings.update(colour="blue")


def test_save_then_reload(tmp_path):
    settings = Settings.load(tmp_path)
    settings.update(classification_mode="legacy", uncategorized_label="未分類")
    path = save_settings(settings)
    assert path == tmp_path / ".metadata" / "settings.yaml"

    reloaded = Settings.reload(tmp_path)
    assert reloaded is not settings
    assert reloaded.classification_mode == "legacy"
    assert reloaded.uncategorized_label == "未分類"
    assert reloaded.db_path == Path(settings.db_path)
