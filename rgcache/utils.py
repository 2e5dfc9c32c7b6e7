"""Utility helpers for filesystem access and path handling."""

from __future__ import annotations

from pathlib import Path


def resolve_directory(path: Path | str) -> Path:
    """Resolve and validate a user supplied directory path."""
    dir_path = Path(path).expanduser().resolve()
    if not dir_path.exists():
        raise FileNotFoundError(f"Directory does not exist: {dir_path}")
    if not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    return dir_path


def effective_directory(path: Path | str | None) -> Path:
    """Return *path* when given, otherwise the process working directory."""
    if path is None:
        return Path.cwd()
    return Path(path)


def is_git_repo(path: Path | str | None = None) -> bool:
    """Return True if a `.git` entry exists directly under *path*.

    Worktrees and submodules keep a `.git` file instead of a directory; both count.
    """
    return (effective_directory(path) / ".git").exists()


def ensure_positive(value: int, name: str) -> int:
    """Validate that *value* is positive."""
    if value <= 0:
        raise ValueError(f"{name} must be greater than 0")
    return value


def format_size(size_bytes: int) -> str:
    """Return a short human readable size such as ``1.2 MB``."""
    value = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            if unit == "B":
                return f"{int(value)} {unit}"
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"  # pragma: no cover - loop always returns
