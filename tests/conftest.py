from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure imports like `from extraction...` and `from portfolio_extractor...` work no matter how
# pytest is invoked (e.g. `pytest` vs `python -m pytest`) and regardless of the current directory.
_ROOT_DIR = Path(__file__).resolve().parents[1]
if str(_ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(_ROOT_DIR))

from extraction.effects import ExtractionEnv  # noqa: E402
from extraction.securities import SecurityCache  # noqa: E402


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def read_fixture_lines(name: str) -> tuple[str, ...]:
    raw = (FIXTURES_DIR / name).read_text(encoding="utf-8")
    return tuple(raw.splitlines())


@pytest.fixture
def resolver() -> SecurityCache:
    return SecurityCache()


@pytest.fixture
def env(resolver: SecurityCache) -> ExtractionEnv:
    return ExtractionEnv(resolver=resolver)
