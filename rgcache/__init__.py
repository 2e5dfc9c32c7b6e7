"""rgcache package initialization."""

from __future__ import annotations

from .api import clear_cache, dyn_grep, forerunner, grep, set_data_dir
from .errors import RgcacheError
from .search import PreviewResult

__all__ = [
    "__version__",
    "PreviewResult",
    "RgcacheError",
    "clear_cache",
    "dyn_grep",
    "forerunner",
    "get_version",
    "grep",
    "set_data_dir",
]

__version__ = "0.3.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
