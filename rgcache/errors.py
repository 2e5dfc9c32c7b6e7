"""Exception types shared across rgcache."""

from __future__ import annotations


class RgcacheError(RuntimeError):
    """Raised when a search command cannot be composed or started."""
