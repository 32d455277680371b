from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from extraction.context import Context
from extraction.matching import compile_pattern
from extraction.model import TransactionTemplate
from extraction.sections import SectionSpec


@dataclass(frozen=True)
class ContextRule:
    """Document-level scan that seeds the context.

    Without ``flag`` every named group of every matching line is copied into
    the context (later lines overwrite earlier ones). With ``flag`` the key is
    set to "true" if any line matched and "false" otherwise.
    """

    pattern: str
    flag: str | None = None


@dataclass(frozen=True)
class BlockSpec:
    start: str
    template: TransactionTemplate
    sections: tuple[SectionSpec, ...]
    with_taxes_and_fees: bool = False
    name: str = ""


@dataclass(frozen=True)
class DocumentType:
    name: str
    pattern: str
    blocks: tuple[BlockSpec, ...]
    context_rules: tuple[ContextRule, ...] = ()

    def matches(self, text: str) -> bool:
        return compile_pattern(self.pattern).search(text) is not None

    def seed(self, lines: Sequence[str]) -> Context:
        """Run every context rule once over all lines and return the new document context."""

        context = Context()
        for rule in self.context_rules:
            compiled = compile_pattern(rule.pattern)
            hit = False
            for line in lines:
                m = compiled.fullmatch(line)
                if not m:
                    continue
                hit = True
                if rule.flag:
                    break
                for key, value in m.groupdict().items():
                    if value is not None:
                        context[key] = value
            if rule.flag:
                context[rule.flag] = "true" if hit else "false"
        return context


@dataclass(frozen=True)
class Block:
    start: int
    end: int
    spec: BlockSpec

    def __len__(self) -> int:
        return self.end - self.start


def classify(text: str, document_types: Sequence[DocumentType]) -> DocumentType | None:
    """First registered type whose pattern occurs in the whole text."""

    for document_type in document_types:
        if document_type.matches(text):
            return document_type
    return None


def split_blocks(lines: Sequence[str], specs: Sequence[BlockSpec]) -> list[Block]:
    """Single top-to-bottom pass over ``lines``.

    A line matching any start pattern opens a block (the first registered
    spec wins the line); every block runs up to the next start or the end of
    the document.
    """

    compiled = [(spec, compile_pattern(spec.start)) for spec in specs]
    starts: list[tuple[int, BlockSpec]] = []
    for line_no, line in enumerate(lines):
        for spec, pattern in compiled:
            if pattern.fullmatch(line):
                starts.append((line_no, spec))
                break

    blocks: list[Block] = []
    for idx, (line_no, spec) in enumerate(starts):
        end = starts[idx + 1][0] if idx + 1 < len(starts) else len(lines)
        blocks.append(Block(start=line_no, end=end, spec=spec))
    return blocks
