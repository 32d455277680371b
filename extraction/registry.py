from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from extraction.documents import DocumentType
from extraction.errors import RuleConfigurationError
from extraction.sections import describe
from extraction.values import GERMAN, ValueCodec


@dataclass(frozen=True)
class BankExtractor:
    """Rule table of one institution: identifiers plus ordered document types."""

    name: str
    label: str
    identifiers: tuple[str, ...]
    document_types: tuple[DocumentType, ...]
    codec: ValueCodec = GERMAN

    def accepts(self, text: str) -> bool:
        return any(identifier in text for identifier in self.identifiers)

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "identifiers": list(self.identifiers),
            "documentTypes": [describe(t) for t in self.document_types],
        }


class RuleRegistry:
    """Registered extractors, in registration order. Read-only once built."""

    def __init__(self, extractors: Iterable[BankExtractor] = ()) -> None:
        self._extractors: dict[str, BankExtractor] = {}
        for extractor in extractors:
            self.register(extractor)

    def register(self, extractor: BankExtractor) -> None:
        if extractor.name in self._extractors:
            raise RuleConfigurationError(f"Extractor {extractor.name!r} is already registered")
        if not extractor.identifiers:
            raise RuleConfigurationError(f"Extractor {extractor.name!r} has no identifiers")
        self._extractors[extractor.name] = extractor

    def get(self, name: str) -> BankExtractor | None:
        return self._extractors.get(name)

    def select(self, text: str) -> BankExtractor | None:
        for extractor in self._extractors.values():
            if extractor.accepts(text):
                return extractor
        return None

    def __iter__(self) -> Iterator[BankExtractor]:
        return iter(self._extractors.values())

    def __len__(self) -> int:
        return len(self._extractors)
