"""Line-pattern combinators.

A matcher is a plain function ``(lines, start, end) -> Match | None``. It holds
no cursor state: callers decide where scanning starts and what a miss means.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Match:
    values: dict[str, str]
    # capture name -> index of the line it was read from
    origins: dict[str, int]
    first: int
    last: int
    branch: int | None = None


Matcher = Callable[[Sequence[str], int, int], "Match | None"]


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def sequence(patterns: Sequence[str]) -> Matcher:
    """Each pattern must full-match a line, in order; unrelated lines in between are skipped."""

    compiled = tuple(compile_pattern(p) for p in patterns)
    if not compiled:
        raise ValueError("sequence() needs at least one pattern")

    def run(lines: Sequence[str], start: int, end: int) -> Match | None:
        values: dict[str, str] = {}
        origins: dict[str, int] = {}
        first: int | None = None
        idx = 0

        for line_no in range(max(start, 0), min(end, len(lines))):
            m = compiled[idx].fullmatch(lines[line_no])
            if not m:
                continue

            if first is None:
                first = line_no
            for key, value in m.groupdict().items():
                if value is not None:
                    values[key] = value
                    origins[key] = line_no

            idx += 1
            if idx == len(compiled):
                return Match(values=values, origins=origins, first=first, last=line_no)

        return None

    return run


def after_marker(marker: str, inner: Matcher) -> Matcher:
    """Locate a marker line (substring search) and run ``inner`` right after it.

    Every marker occurrence is tried in turn until ``inner`` succeeds.
    """

    compiled = compile_pattern(marker)

    def run(lines: Sequence[str], start: int, end: int) -> Match | None:
        for line_no in range(max(start, 0), min(end, len(lines))):
            if not compiled.search(lines[line_no]):
                continue
            found = inner(lines, line_no + 1, end)
            if found is not None:
                return dataclasses.replace(found, first=line_no)
        return None

    return run


def first_of(*matchers: Matcher) -> Matcher:
    """First alternative that matches wins; the result records its branch index."""

    def run(lines: Sequence[str], start: int, end: int) -> Match | None:
        for branch, matcher in enumerate(matchers):
            found = matcher(lines, start, end)
            if found is not None:
                return dataclasses.replace(found, branch=branch)
        return None

    return run
