from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from extraction.context import Context
from extraction.effects import Effect, ExtractionEnv, ValueMap, apply_effect
from extraction.errors import BlockMatchError, MissingAttributesError, RuleConfigurationError
from extraction.matching import Match, Matcher, after_marker, first_of, sequence
from extraction.model import TransactionDraft


logger = logging.getLogger("portfolio-extractor")


@dataclass(frozen=True)
class Guard:
    """Run a section only when ``context[key] == value`` (or != when ``negate``)."""

    key: str
    value: str = "true"
    negate: bool = False

    def holds(self, context: Context) -> bool:
        equal = context.get(self.key, "").casefold() == self.value.casefold()
        return equal != self.negate


@dataclass(frozen=True)
class RequiredSection:
    patterns: tuple[str, ...]
    effects: tuple[Effect, ...] = ()
    attributes: tuple[str, ...] = ()
    when: Guard | None = None
    from_cursor: bool = False
    name: str = ""


@dataclass(frozen=True)
class OptionalSection:
    patterns: tuple[str, ...]
    effects: tuple[Effect, ...] = ()
    attributes: tuple[str, ...] = ()
    when: Guard | None = None
    from_cursor: bool = False
    name: str = ""


@dataclass(frozen=True)
class FindSection:
    """Patterns that only start matching after a fixed marker line."""

    marker: str
    patterns: tuple[str, ...]
    effects: tuple[Effect, ...] = ()
    attributes: tuple[str, ...] = ()
    required: bool = True
    when: Guard | None = None
    from_cursor: bool = False
    name: str = ""


@dataclass(frozen=True)
class Alternative:
    patterns: tuple[str, ...]
    effects: tuple[Effect, ...] = ()
    attributes: tuple[str, ...] = ()


@dataclass(frozen=True)
class OneOfSection:
    """Alternatives are tried in declared order; the first that matches is applied."""

    alternatives: tuple[Alternative, ...]
    required: bool = False
    when: Guard | None = None
    from_cursor: bool = False
    name: str = ""


SectionSpec = RequiredSection | OptionalSection | FindSection | OneOfSection


def section_label(section: SectionSpec) -> str:
    if section.name:
        return section.name
    if isinstance(section, OneOfSection):
        first = section.alternatives[0] if section.alternatives else None
        return "oneOf(" + ", ".join(first.attributes if first else ()) + ")"
    if section.attributes:
        return ", ".join(section.attributes)
    return section.patterns[0]


def is_required(section: SectionSpec) -> bool:
    if isinstance(section, RequiredSection):
        return True
    if isinstance(section, (FindSection, OneOfSection)):
        return section.required
    return False


def matcher_for(section: SectionSpec) -> Matcher:
    if isinstance(section, (RequiredSection, OptionalSection)):
        return sequence(section.patterns)
    if isinstance(section, FindSection):
        return after_marker(section.marker, sequence(section.patterns))
    if isinstance(section, OneOfSection):
        if not section.alternatives:
            raise RuleConfigurationError("oneOf section without alternatives")
        return first_of(*(sequence(alt.patterns) for alt in section.alternatives))
    raise RuleConfigurationError(f"Unknown section type: {type(section).__name__}")


def _effects_and_attributes(section: SectionSpec, found: Match) -> tuple[tuple[Effect, ...], tuple[str, ...]]:
    if isinstance(section, OneOfSection):
        alternative = section.alternatives[found.branch or 0]
        return alternative.effects, alternative.attributes
    return section.effects, section.attributes


def run_sections(
    lines: Sequence[str],
    start: int,
    end: int,
    sections: Sequence[SectionSpec],
    draft: TransactionDraft,
    context: Context,
    env: ExtractionEnv,
) -> list[str]:
    """Apply ``sections`` in order to ``lines[start:end]``; return the labels that matched.

    Sections scan from the block start, so different sections may read the
    same lines. ``from_cursor`` sections start after the previous match.
    """

    cursor = start
    matched: list[str] = []

    for section in sections:
        label = section_label(section)
        if section.when is not None and not section.when.holds(context):
            continue

        scan_from = cursor if section.from_cursor else start
        found = matcher_for(section)(lines, scan_from, end)
        if found is None:
            if is_required(section):
                raise BlockMatchError(label, scan_from, end)
            continue

        effects, attributes = _effects_and_attributes(section, found)
        values = ValueMap(context.snapshot(), found)

        missing = [a for a in attributes if a not in values]
        if missing:
            if is_required(section):
                raise MissingAttributesError(label, missing)
            logger.debug("[sections] skip %r, missing %s", label, missing)
            continue

        for effect in effects:
            apply_effect(effect, draft, values, context, env)

        cursor = found.last + 1
        matched.append(label)

    return matched


def describe(obj: Any) -> Any:
    """Render rule data (sections, effects, guards, enums) as JSON-compatible values."""

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        out: dict[str, Any] = {"kind": type(obj).__name__}
        for f in dataclasses.fields(obj):
            out[f.name] = describe(getattr(obj, f.name))
        return out
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [describe(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): describe(v) for k, v in obj.items()}
    return obj
