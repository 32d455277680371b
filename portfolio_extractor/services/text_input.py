from __future__ import annotations

import re


_CID_TOKEN_RE = re.compile(r"\(cid:\d+\)")


def looks_like_text(data: bytes) -> bool:
    if not data:
        return False
    # PDFs and other binaries carry NUL bytes or the PDF header early on.
    head = data[:4096]
    if head.startswith(b"%PDF-"):
        return False
    return b"\x00" not in head


def decode_upload(data: bytes) -> str:
    """Decode an uploaded statement; exports from older tools are often cp1252."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("cp1252", errors="replace")


def clean_text(text: str) -> str:
    """Clean converted statement text without breaking line layout.

    - Removes (cid:N) tokens
    - Normalizes spaces/tabs inside lines
    - Preserves newlines
    """
    if not text:
        return ""

    text = text.replace("\u00a0", " ").replace("\xa0", " ")
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    # PDF glyph artifacts left by the converter
    text = _CID_TOKEN_RE.sub("", text)

    cleaned_lines: list[str] = []
    for line in text.split("\n"):
        line = re.sub(r"[ \t]+", " ", line)
        cleaned_lines.append(line.strip())

    return "\n".join(cleaned_lines)


def text_to_lines(text: str) -> tuple[str, ...]:
    """Cleaned text as the line sequence the extraction engine works on.

    Blank lines are kept so line indexes in failures point at the upload.
    """
    cleaned = clean_text(text)
    if not cleaned.strip():
        return ()
    return tuple(cleaned.rstrip("\n").split("\n"))


def text_debug_stats(lines: tuple[str, ...]) -> tuple[int, float, list[str]]:
    non_empty = [ln for ln in lines if ln.strip()]
    avg = (sum(len(ln) for ln in non_empty) / len(non_empty)) if non_empty else 0.0
    sample = list(lines[:20])
    return len(lines), float(avg), sample
