"""Whole-file text I/O that keeps line endings exactly as they are on disk."""

from __future__ import annotations

from pathlib import Path


def read_text(path: str | Path) -> str:
    """Read *path* without newline translation."""
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path: str | Path, content: str) -> None:
    """Replace the contents of *path* with *content*, creating parent dirs."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
