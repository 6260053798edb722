"""File I/O and path utilities."""

import json
import logging
import re
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def ensure_directory(path: str | Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_json(path: str | Path) -> Any:
    """Load a JSON file and return its contents."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"JSON file not found: {path}")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def save_json(data: Any, path: str | Path, indent: int = 2) -> None:
    """Save data to a JSON file."""
    path = Path(path)
    ensure_directory(path.parent)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)


def sanitize_name(name: str) -> str:
    """Make a display name safe for use as a file or folder name.

    Every character outside [A-Za-z0-9_-] becomes '-'.
    """
    return _UNSAFE_NAME_CHARS.sub("-", name)


def format_bytes(size: int) -> str:
    """Format a byte count for humans (e.g. '1.50 MB')."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def find_svg_files(directory: str | Path) -> list[Path]:
    """Recursively find all .svg files in a directory."""
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")
    files = sorted(directory.rglob("*.svg"))
    # Exclude temp/hidden files
    files = [f for f in files if not f.name.startswith(("~", "."))]
    return files
