from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from extraction.banks.dkb import DKB
from extraction.context import Context
from extraction.documents import Block, classify, split_blocks
from extraction.effects import ExtractionEnv
from extraction.errors import (
    BlockMatchError,
    MissingAttributesError,
    SecurityResolutionError,
    ValueFormatError,
)
from extraction.items import item_to_dict, wrap
from extraction.model import TransactionItem
from extraction.registry import BankExtractor, RuleRegistry
from extraction.sections import run_sections
from extraction.securities import SecurityResolver
from extraction.taxes import TAX_AND_FEE_SECTIONS


logger = logging.getLogger("portfolio-extractor")


_BLOCK_ERRORS: dict[type[Exception], str] = {
    BlockMatchError: "section_not_found",
    MissingAttributesError: "missing_attributes",
    ValueFormatError: "invalid_value",
    SecurityResolutionError: "security_unresolved",
}


@dataclass(frozen=True)
class BlockFailure:
    block: str
    start: int
    end: int
    reason: str
    message: str
    line: int | None = None


@dataclass
class ExtractionResult:
    items: list[TransactionItem] = field(default_factory=list)
    failures: list[BlockFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    extractor: str | None = None
    document_type: str | None = None
    blocks: int = 0
    suppressed: int = 0

    @property
    def recognized(self) -> bool:
        return self.document_type is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "bank": self.extractor,
            "documentType": self.document_type,
            "recognized": self.recognized,
            "items": [item_to_dict(item) for item in self.items],
            "failures": [
                {
                    "block": f.block,
                    "start": f.start,
                    "end": f.end,
                    "reason": f.reason,
                    "message": f.message,
                    "line": f.line,
                }
                for f in self.failures
            ],
            "warnings": list(self.warnings),
            "debug": {
                "blockCount": self.blocks,
                "itemCount": len(self.items),
                "suppressedCount": self.suppressed,
            },
        }


def default_registry() -> RuleRegistry:
    return RuleRegistry([DKB])


def extract_block(
    lines: Sequence[str], block: Block, context: Context, env: ExtractionEnv
) -> TransactionItem | None:
    """Build one transaction from ``lines[block.start:block.end]``; may raise ExtractionError."""

    context.begin_block()
    draft = block.spec.template.new_draft()
    sections = block.spec.sections
    if block.spec.with_taxes_and_fees:
        sections = sections + TAX_AND_FEE_SECTIONS

    matched = run_sections(lines, block.start, block.end, sections, draft, context, env)
    logger.debug("[extract] block %r [%d, %d) matched %s", block.spec.name, block.start, block.end, matched)
    return wrap(draft)


def extract_with(
    extractor: BankExtractor, lines: Sequence[str], resolver: SecurityResolver
) -> ExtractionResult:
    lines = tuple(lines)
    result = ExtractionResult(extractor=extractor.name)

    document_type = classify("\n".join(lines), extractor.document_types)
    if document_type is None:
        logger.info("[extract] bank=%s document not recognized", extractor.name)
        result.warnings.append("unrecognized_document")
        return result

    result.document_type = document_type.name
    context = document_type.seed(lines)
    env = ExtractionEnv(resolver=resolver, codec=extractor.codec)

    blocks = split_blocks(lines, document_type.blocks)
    result.blocks = len(blocks)
    logger.debug("[extract] bank=%s type=%s blocks=%d", extractor.name, document_type.name, len(blocks))

    for block in blocks:
        try:
            item = extract_block(lines, block, context, env)
        except tuple(_BLOCK_ERRORS) as exc:
            reason = next(code for cls, code in _BLOCK_ERRORS.items() if isinstance(exc, cls))
            logger.warning(
                "[extract] bank=%s type=%s block %r [%d, %d) skipped: %s",
                extractor.name,
                document_type.name,
                block.spec.name,
                block.start,
                block.end,
                exc,
            )
            result.failures.append(
                BlockFailure(
                    block=block.spec.name,
                    start=block.start,
                    end=block.end,
                    reason=reason,
                    message=str(exc),
                    line=getattr(exc, "line", None),
                )
            )
            result.warnings.append("block_failed")
            continue

        if item is None:
            result.suppressed += 1
            continue
        result.items.append(item)

    return result


def extract_document(
    lines: Sequence[str],
    registry: RuleRegistry,
    resolver: SecurityResolver,
    bank: str | None = None,
) -> ExtractionResult:
    """Select the bank (explicitly or by identifier), classify and extract one document."""

    lines = tuple(lines)
    extractor = registry.get(bank) if bank else registry.select("\n".join(lines))
    if extractor is None:
        logger.info("[extract] no extractor for document (bank=%s)", bank)
        return ExtractionResult(warnings=["unknown_bank"])

    return extract_with(extractor, lines, resolver)
