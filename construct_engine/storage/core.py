"""Storage initialization, path helpers, and the key-value record store."""

import json
import re
import unicodedata
from pathlib import Path
from typing import Any

_data_dir: Path | None = None
_presets_dir: Path | None = None


def slugify(title: str) -> str:
    """Convert a title or record key to a filesystem-safe slug.

    "Session State: 42" → "session-state-42"
    """
    text = unicodedata.normalize("NFKD", title)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = re.sub(r"['\"]", "", text)  # strip apostrophes/quotes before hyphenation
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = text.strip("-")
    return text or "untitled"


def init_storage(data_dir: Path, presets_dir: Path | None = None) -> None:
    global _data_dir, _presets_dir

    _data_dir = data_dir
    _data_dir.mkdir(parents=True, exist_ok=True)
    records_dir().mkdir(exist_ok=True)
    if presets_dir is None:
        # Default: repo_root/presets
        presets_dir = Path(__file__).parent.parent.parent / "presets"
    _presets_dir = presets_dir


def data_dir() -> Path:
    assert _data_dir is not None, "Call init_storage() before using storage"
    return _data_dir


def presets_dir() -> Path:
    assert _presets_dir is not None, "Call init_storage() before using storage"
    return _presets_dir


def records_dir() -> Path:
    return data_dir() / "records"


def _record_path(key: str) -> Path:
    return records_dir() / f"{slugify(key)}.json"


# ── Key-value records ────────────────────────────────────


def save(key: str, value: Any) -> None:
    """Persist a JSON-serialisable value under key, replacing any previous one.

    Keys are slugified into file names, so keys with the same slug
    ("Session A", "session-a") share one record.
    """
    _record_path(key).write_text(json.dumps(value, indent=2))


def load(key: str) -> Any | None:
    """Return the value stored under key, or None if absent."""
    path = _record_path(key)
    if not path.is_file():
        return None
    return json.loads(path.read_text())


def remove(key: str) -> bool:
    """Delete the record under key. Returns False if it did not exist."""
    path = _record_path(key)
    if not path.is_file():
        return False
    path.unlink()
    return True
