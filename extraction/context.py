from __future__ import annotations

from collections.abc import Iterator, MutableMapping


class Context(MutableMapping[str, str]):
    """Per-document key/value state shared between blocks.

    Plain item assignment writes to the document scope and survives until the
    document is done. ``put_block`` writes to a block scope that is dropped by
    ``begin_block``; block values shadow document values on read.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._document: dict[str, str] = dict(initial or {})
        self._block: dict[str, str] = {}

    def __getitem__(self, key: str) -> str:
        if key in self._block:
            return self._block[key]
        return self._document[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._document[key] = str(value)

    def __delitem__(self, key: str) -> None:
        found = False
        if key in self._block:
            del self._block[key]
            found = True
        if key in self._document:
            del self._document[key]
            found = True
        if not found:
            raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        yield from self._document
        for key in self._block:
            if key not in self._document:
                yield key

    def __len__(self) -> int:
        return len(self._document.keys() | self._block.keys())

    def __repr__(self) -> str:
        return f"Context(document={self._document!r}, block={self._block!r})"

    def put_block(self, key: str, value: str) -> None:
        self._block[key] = str(value)

    def begin_block(self) -> None:
        self._block.clear()

    def flag(self, key: str) -> bool:
        return self.get(key, "").lower() == "true"

    def snapshot(self) -> dict[str, str]:
        merged = dict(self._document)
        merged.update(self._block)
        return merged


# Well-known keys shared by the engine and the rule tables.
JOINT_ACCOUNT = "isJointAccount"
EXCHANGE_RATE = "exchangeRate"
WITHHOLDING_TAX_FOUND = "isHoldingTax"
