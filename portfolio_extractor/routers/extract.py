from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from fastapi import APIRouter, File, HTTPException, Query, Request, Response, UploadFile

from extraction.extractor import extract_document
from extraction.registry import RuleRegistry
from extraction.securities import SecurityCache

from portfolio_extractor.services.fixtures import fixture_name, fixtures_enabled, write_text_fixture
from portfolio_extractor.services.text_input import decode_upload, looks_like_text, text_debug_stats, text_to_lines


router = APIRouter()
logger = logging.getLogger("portfolio-extractor")

_TEXT_CONTENT_TYPES = ("text/plain",)


def _registry(request: Request) -> RuleRegistry:
    return request.app.state.registry


@router.get("/extractors")
def list_extractors(request: Request) -> list[dict[str, Any]]:
    return [
        {
            "name": extractor.name,
            "label": extractor.label,
            "identifiers": list(extractor.identifiers),
            "documentTypes": [t.name for t in extractor.document_types],
        }
        for extractor in _registry(request)
    ]


@router.get("/extractors/{name}")
def describe_extractor(name: str, request: Request) -> dict[str, Any]:
    extractor = _registry(request).get(name)
    if extractor is None:
        raise HTTPException(status_code=404, detail=f"Unknown extractor: {name}")
    return extractor.describe()


@router.post("/extract")
async def extract_statement(
    request: Request,
    response: Response,
    file: UploadFile = File(...),
    bank: str | None = Query(default=None),
) -> dict[str, Any]:
    """Receive the text rendering of a statement and return the extracted transactions."""

    response.headers["X-Parser-Version"] = os.getenv("VERSION", "dev")
    content_type = (file.content_type or "").split(";")[0].strip()
    if content_type not in _TEXT_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Invalid content-type. Expected text/plain")

    raw = await file.read()
    logger.info(
        "[extract] filename=%s content_type=%s bytes=%d bank=%s",
        file.filename,
        file.content_type,
        len(raw) if raw else 0,
        bank,
    )
    if not raw:
        raise HTTPException(status_code=400, detail="Empty file")
    if not looks_like_text(raw):
        raise HTTPException(status_code=400, detail="File does not look like plain text")

    registry = _registry(request)
    if bank is not None and registry.get(bank) is None:
        raise HTTPException(status_code=400, detail=f"Unknown bank: {bank}")

    raw_text = decode_upload(raw)
    lines = text_to_lines(raw_text)

    # One cache per upload: security ids are stable within a document only.
    result = extract_document(lines, registry, SecurityCache(), bank=bank)

    if fixtures_enabled():
        base_dir = Path(__file__).resolve().parents[2]
        path = write_text_fixture(
            filename=fixture_name(result.extractor, file.filename), raw_text=raw_text, base_dir=base_dir
        )
        logger.info("[extract] fixture written to %s", path)

    payload = result.to_dict()
    if not result.recognized:
        payload["reason"] = "UNSUPPORTED_LAYOUT"

    line_count, avg_chars, sample = text_debug_stats(lines)
    payload["filename"] = file.filename
    payload["meta"] = {
        "lineCount": line_count,
        "avgCharsPerLine": avg_chars,
        "sample": sample,
    }
    return payload
