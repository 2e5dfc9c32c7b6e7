"""Result envelope emitted by grep, dyn-grep and exec."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List


@dataclass(slots=True)
class PreviewResult:
    """Total match count plus a bounded preview of the matching lines.

    ``lines`` is None when the total is known but the content could not be read;
    consumers must treat a missing ``lines`` field as "not previewed".
    """

    total: int
    lines: List[str] | None = None
    using_cache: bool = False
    tempfile: Path | None = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"total": self.total}
        if self.lines is not None:
            payload["lines"] = list(self.lines)
        if self.tempfile is not None:
            payload["tempfile"] = str(self.tempfile)
        payload["using_cache"] = self.using_cache
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), ensure_ascii=False)
