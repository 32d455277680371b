from __future__ import annotations

import os
import re
from pathlib import Path


_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def fixtures_enabled() -> bool:
    return os.getenv("EXTRACTOR_SAVE_FIXTURES", "0") == "1"


def fixture_name(bank: str | None, filename: str | None) -> str:
    stem = Path(filename or "upload").stem
    stem = _UNSAFE_CHARS_RE.sub("_", stem).strip("_") or "upload"
    return f"{bank or 'unknown'}_{stem}.txt"


def write_text_fixture(*, filename: str, raw_text: str, base_dir: Path) -> Path:
    """Write raw_text fixture under tests/fixtures (always overwrites)."""

    fixture_path = base_dir / "tests" / "fixtures" / filename
    fixture_path.parent.mkdir(parents=True, exist_ok=True)
    fixture_path.write_text(raw_text, encoding="utf-8")
    return fixture_path
