"""Default line filter used by dyn-grep when no matcher is supplied."""

from __future__ import annotations

from typing import Callable, Iterable, Iterator

LineFilter = Callable[[str, Iterable[str]], Iterable[str]]


def smart_case_filter(query: str, lines: Iterable[str]) -> Iterator[str]:
    """Yield lines containing *query*, ignoring case unless it has uppercase letters."""

    if not query:
        yield from lines
        return
    if any(ch.isupper() for ch in query):
        for line in lines:
            if query in line:
                yield line
        return
    needle = query.lower()
    for line in lines:
        if needle in line.lower():
            yield line
