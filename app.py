from __future__ import annotations

from portfolio_extractor.main import app, create_app  # noqa: F401

# Local run: uvicorn app:app --reload
