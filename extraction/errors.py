from __future__ import annotations


class ExtractionError(Exception):
    """Base class for everything the engine raises."""


class RuleConfigurationError(ExtractionError):
    pass


class BlockMatchError(ExtractionError):
    """A required section did not find its pattern sequence inside the block."""

    def __init__(self, section: str, start: int, end: int) -> None:
        super().__init__(f"Section {section!r} not found in lines [{start}, {end})")
        self.section = section
        self.start = start
        self.end = end


class ValueFormatError(ExtractionError, ValueError):
    def __init__(self, field: str, value: str | None, line: int | None = None, reason: str = "") -> None:
        where = f" at line {line}" if line is not None else ""
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid value {value!r} for {field!r}{where}{detail}")
        self.field = field
        self.value = value
        self.line = line


class MissingAttributesError(ExtractionError):
    def __init__(self, section: str, missing: list[str]) -> None:
        super().__init__(f"Section {section!r} is missing attributes: {', '.join(missing)}")
        self.section = section
        self.missing = missing


class SecurityResolutionError(ExtractionError):
    pass
