from __future__ import annotations

import pytest

from extraction.matching import after_marker, first_of, sequence


LINES = (
    "Header",
    "Amount 10,00 EUR",
    "unrelated",
    "Date 01.02.2021",
    "Marker",
    "Amount 20,00 CHF",
)


def test_sequence_allows_gaps_and_records_origins() -> None:
    match = sequence((r"Amount (?P<amount>[\.,\d]+) (?P<currency>\w{3})", r"Date (?P<date>[\d\.]+)"))(LINES, 0, len(LINES))

    assert match is not None
    assert match.values == {"amount": "10,00", "currency": "EUR", "date": "01.02.2021"}
    assert match.origins == {"amount": 1, "currency": 1, "date": 3}
    assert (match.first, match.last) == (1, 3)


def test_sequence_requires_full_line_match() -> None:
    assert sequence((r"Amount",))(LINES, 0, len(LINES)) is None
    assert sequence((r"Amount .*",))(LINES, 0, len(LINES)) is not None


def test_sequence_stays_inside_range() -> None:
    assert sequence((r"Date .*",))(LINES, 0, 3) is None
    match = sequence((r"Amount (?P<amount>.*) \w{3}",))(LINES, 2, len(LINES))
    assert match is not None
    assert match.values["amount"] == "20,00"


def test_sequence_needs_patterns() -> None:
    with pytest.raises(ValueError):
        sequence(())


def test_unmatched_optional_groups_are_dropped() -> None:
    match = sequence((r"Amount (?P<amount>[\.,\d]+)(?P<sign>[+-])? (?P<currency>\w{3})",))(LINES, 0, len(LINES))
    assert match is not None
    assert "sign" not in match.values


def test_after_marker_anchors_inner_matcher() -> None:
    found = after_marker("Marker", sequence((r"Amount (?P<amount>.*) (?P<currency>\w{3})",)))(LINES, 0, len(LINES))

    assert found is not None
    assert found.values["currency"] == "CHF"
    assert found.first == 4
    assert found.last == 5


def test_after_marker_without_marker_misses() -> None:
    assert after_marker("Nothing", sequence((r"Amount .*",)))(LINES, 0, len(LINES)) is None


def test_first_of_prefers_declared_order() -> None:
    matcher = first_of(
        sequence((r"Amount (?P<a>.*)",)),
        sequence((r"Header",)),
    )
    found = matcher(LINES, 0, len(LINES))
    assert found is not None
    assert found.branch == 0
    assert found.values == {"a": "10,00 EUR"}


def test_first_of_falls_through_to_later_alternative() -> None:
    matcher = first_of(
        sequence((r"Missing",)),
        sequence((r"Date (?P<date>.*)",)),
    )
    found = matcher(LINES, 0, len(LINES))
    assert found is not None
    assert found.branch == 1
    assert found.values == {"date": "01.02.2021"}

    assert first_of(sequence((r"Missing",)))(LINES, 0, len(LINES)) is None
