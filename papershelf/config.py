"""Configuration management.

``Settings`` is a **metaclass-based singleton**: the first call to
``Settings.load()`` creates the instance; every later call returns
the same object.  Use ``update()`` to change values at runtime, or
``reload()`` to re-read everything from disk.

User-editable configuration lives in ``.metadata/settings.yaml``::

    db_path: papers.db
    upload_dir: uploads
    host: 127.0.0.1
    port: 5001
    classification_mode: tags     # or "legacy" (category/subcategory)
    empty_query: none             # autocomplete on blank input: none | all
    uncategorized_label: 未分類

Relative paths are resolved against the project root.  Missing keys fall
back to the defaults above.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from papershelf.classification.normalizer import MODE_TAGS, MODES
from papershelf.classification.search import EMPTY_QUERY_NONE, EMPTY_QUERY_POLICIES

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.yaml"


# ---------------------------------------------------------------------------
# Singleton metaclass
# ---------------------------------------------------------------------------

class _SettingsMeta(type):
    """Metaclass that enforces a process-wide singleton for *Settings*.

    * First ``Settings(...)`` creates and caches the instance.
    * Later ``Settings(...)`` calls return the cached instance (args ignored).
    """

    _instances: dict[type, Any] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


# ---------------------------------------------------------------------------
# Settings dataclass (singleton)
# ---------------------------------------------------------------------------

@dataclass
class Settings(metaclass=_SettingsMeta):
    """Application settings (singleton, runtime-mutable).

    Usage::

        settings = Settings.load()          # first call → create
        settings = Settings.load()          # later → same object
        settings.update(db_path=Path(...))  # runtime change
        settings = Settings.reload()        # re-read from disk
    """

    db_path: Path = Path("papers.db")
    upload_dir: Path = Path("uploads")
    metadata_dir: Path = Path(".metadata")
    host: str = "127.0.0.1"
    port: int = 5001
    classification_mode: str = MODE_TAGS
    empty_query: str = EMPTY_QUERY_NONE
    uncategorized_label: str = "未分類"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValueError for out-of-range choice fields."""
        if self.classification_mode not in MODES:
            raise ValueError(
                f"classification_mode must be one of {MODES}, got {self.classification_mode!r}"
            )
        if self.empty_query not in EMPTY_QUERY_POLICIES:
            raise ValueError(
                f"empty_query must be one of {EMPTY_QUERY_POLICIES}, got {self.empty_query!r}"
            )

    @property
    def is_legacy(self) -> bool:
        return self.classification_mode != MODE_TAGS

    # ── Runtime helpers ───────────────────────────────────────────────

    def update(self, **kwargs: Any) -> None:
        """Mutate settings fields at runtime.

        >>> Settings.load().update(db_path=Path("/tmp/test.db"))
        """
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no field '{key}'")
            setattr(self, key, value)
        self.validate()

    # ── Factory / lifecycle ───────────────────────────────────────────

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Load or return the singleton Settings instance.

        On first call the singleton is created; subsequent calls return
        the cached instance.  Pass *base_dir* to override the project
        root (defaults to the repository root one level above ``papershelf/``).
        """
        if cls in _SettingsMeta._instances:
            return _SettingsMeta._instances[cls]  # type: ignore[return-value]

        if base_dir is None:
            base_dir = Path(__file__).resolve().parent.parent

        metadata_dir = base_dir / ".metadata"
        data = _load_yaml(metadata_dir / SETTINGS_FILE)

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning("Ignoring unknown settings: %s", ", ".join(sorted(unknown)))

        return cls(
            db_path=base_dir / data.get("db_path", "papers.db"),
            upload_dir=base_dir / data.get("upload_dir", "uploads"),
            metadata_dir=metadata_dir,
            host=str(data.get("host", "127.0.0.1")),
            port=int(data.get("port", 5001)),
            classification_mode=str(data.get("classification_mode", MODE_TAGS)),
            empty_query=str(data.get("empty_query", EMPTY_QUERY_NONE)),
            uncategorized_label=str(data.get("uncategorized_label", "未分類")),
        )

    @classmethod
    def reload(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Discard the current singleton and re-load from disk."""
        cls.reset()
        return cls.load(base_dir)

    @classmethod
    def reset(cls) -> None:
        """Discard the singleton so the next ``load()`` re-creates it."""
        _SettingsMeta._instances.pop(cls, None)


# ---------------------------------------------------------------------------
# YAML loaders
# ---------------------------------------------------------------------------

def _load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML mapping; a missing or malformed file yields ``{}``."""
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        return {}
    # explicit nulls fall back to defaults
    return {k: v for k, v in data.items() if v is not None}


def save_settings(settings: Settings) -> Path:
    """Persist *settings* to ``settings.yaml`` under its metadata directory."""
    settings.metadata_dir.mkdir(parents=True, exist_ok=True)
    path = settings.metadata_dir / SETTINGS_FILE
    data = {
        "db_path": str(settings.db_path),
        "upload_dir": str(settings.upload_dir),
        "host": settings.host,
        "port": settings.port,
        "classification_mode": settings.classification_mode,
        "empty_query": settings.empty_query,
        "uncategorized_label": settings.uncategorized_label,
    }
    with open(path, "w", encoding="utf-8") as f:
        f.write("# papershelf settings\n")
        yaml.dump(
            data,
            f,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )
    return path
