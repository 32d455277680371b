from __future__ import annotations

from portfolio_extractor.services.fixtures import fixture_name, fixtures_enabled, write_text_fixture
from portfolio_extractor.services.text_input import (
    clean_text,
    decode_upload,
    looks_like_text,
    text_debug_stats,
    text_to_lines,
)


def test_clean_text_keeps_layout() -> None:
    raw = "Ausmachender Betrag \t 27,72+ EUR\r\n(cid:3)Devisenkurs  EUR / CHF 1,1959\r\n\r\nEnde  "
    assert clean_text(raw) == "Ausmachender Betrag 27,72+ EUR\nDevisenkurs EUR / CHF 1,1959\n\nEnde"
    assert clean_text("") == ""


def test_text_to_lines_keeps_leading_and_inner_blank_lines() -> None:
    assert text_to_lines("\nDKB AG\n\nKontoauszug Nummer 001 / 2021\n\n") == (
        "",
        "DKB AG",
        "",
        "Kontoauszug Nummer 001 / 2021",
    )
    assert text_to_lines(" \n\t\n") == ()


def test_text_to_lines_indexes_match_upload() -> None:
    lines = text_to_lines("\n\nDKB AG\nx")
    assert lines == ("", "", "DKB AG", "x")
    assert lines.index("DKB AG") == 2


def test_decode_upload() -> None:
    assert decode_upload("Stück 100".encode("utf-8")) == "Stück 100"
    assert decode_upload(b"\xef\xbb\xbfDKB AG") == "DKB AG"
    assert decode_upload("Stück 100".encode("cp1252")) == "Stück 100"


def test_looks_like_text() -> None:
    assert looks_like_text(b"DKB AG\nDividendengutschrift\n")
    assert not looks_like_text(b"")
    assert not looks_like_text(b"%PDF-1.7\n")
    assert not looks_like_text(b"DKB\x00AG")


def test_text_debug_stats() -> None:
    count, avg, sample = text_debug_stats(("abcd", "", "ab"))
    assert count == 3
    assert avg == 3.0
    assert sample == ["abcd", "", "ab"]

    assert text_debug_stats(()) == (0, 0.0, [])


def test_fixture_name() -> None:
    assert fixture_name("dkb", "Dividende 2021.txt") == "dkb_Dividende_2021.txt"
    assert fixture_name(None, None) == "unknown_upload.txt"
    assert fixture_name("dkb", "../../etc/passwd") == "dkb_passwd.txt"


def test_fixtures_enabled(monkeypatch) -> None:
    monkeypatch.delenv("EXTRACTOR_SAVE_FIXTURES", raising=False)
    assert not fixtures_enabled()
    monkeypatch.setenv("EXTRACTOR_SAVE_FIXTURES", "1")
    assert fixtures_enabled()


def test_write_text_fixture_overwrites(tmp_path) -> None:
    path = write_text_fixture(filename="dkb_x.txt", raw_text="first", base_dir=tmp_path)
    write_text_fixture(filename="dkb_x.txt", raw_text="Stück 100", base_dir=tmp_path)

    assert path == tmp_path / "tests" / "fixtures" / "dkb_x.txt"
    assert path.read_text(encoding="utf-8") == "Stück 100"
