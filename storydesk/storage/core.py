"""Storage initialization, path helpers, JSON list I/O, and slug utilities."""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

_data_dir: Path | None = None


def slugify(title: str) -> str:
    """Convert a title or name to a URL-safe slug.

    "My First Chapter!" → "my-first-chapter"

    Similar titles can collide ("Part 1" / "Part 1!"); callers get no warning.
    """
    text = title.lower()
    text = re.sub(r"\s+", "-", text)
    return re.sub(r"[^a-z0-9-]", "", text)


def count_words(text: str) -> int:
    """Number of whitespace-delimited tokens in text."""
    return len(text.split())


def now() -> datetime:
    return datetime.now(timezone.utc)


def init_storage(data_dir: Path) -> None:
    global _data_dir
    _data_dir = data_dir
    _data_dir.mkdir(parents=True, exist_ok=True)
    local_dir().mkdir(exist_ok=True)


def data_dir() -> Path:
    assert _data_dir is not None, "Call init_storage() before using storage"
    return _data_dir


def local_dir() -> Path:
    return data_dir() / "local"


def _list_path(name: str) -> Path:
    return local_dir() / f"{name}.json"


def read_list(name: str) -> list[dict[str, Any]]:
    """Load one entity list (e.g. "chapters"). Returns [] if missing."""
    path = _list_path(name)
    if not path.is_file():
        return []
    return json.loads(path.read_text())


def write_list(name: str, items: list[dict[str, Any]]) -> None:
    _list_path(name).write_text(json.dumps(items, indent=2))
