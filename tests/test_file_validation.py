"""
test_file_validation.py — Tests for file validation utilities.

Tests size limits, magic-byte detection against claimed extensions,
encoding detection, RTF flattening, and format labels.

Called by: pytest
Depends on: app/utils/file_validation.py
"""

import pytest

from app.utils.file_validation import (
    _get_extension,
    check_size,
    decode_text,
    detect_encoding,
    extract_text,
    format_labels,
    image_format,
    validate_image,
    validate_import_file,
)

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
PDF = b"%PDF-1.4\n%%EOF\n"


# ── check_size ─────────────────────────────────────────────────────


class TestCheckSize:
    def test_empty_file_rejected(self):
        assert check_size(b"", 1024) == "Empty file"

    def test_oversized_file_rejected(self):
        reason = check_size(b"x" * (2 * 1024 * 1024 + 10), 2 * 1024 * 1024)
        assert reason.startswith("File too large (2.0MB). Maximum size is 2MB.")

    def test_within_limit(self):
        assert check_size(b"abc", 1024) is None


# ── validate_import_file ───────────────────────────────────────────


class TestValidateImportFile:
    @pytest.mark.parametrize("name", ["roster.csv", "roster.TSV", "notes.txt", "data.json"])
    def test_text_formats_accepted(self, name):
        ok, ext = validate_import_file(b"First,Last\nSam,Pin\n", name)
        assert ok is True
        assert ext == _get_extension(name)

    def test_pdf_accepted(self):
        assert validate_import_file(PDF, "schedule.pdf") == (True, ".pdf")

    def test_fake_pdf_rejected(self):
        ok, reason = validate_import_file(b"not a pdf", "schedule.pdf")
        assert ok is False
        assert "not a PDF" in reason

    def test_binary_disguised_as_csv(self):
        ok, reason = validate_import_file(PNG, "roster.csv")
        assert ok is False
        assert "image/png" in reason

    def test_rtf_accepted(self):
        assert validate_import_file(rb"{\rtf1\ansi Hello}", "venues.rtf") == (True, ".rtf")

    def test_unsupported_extension(self):
        ok, reason = validate_import_file(b"x", "roster.xlsx")
        assert ok is False
        assert ".csv" in reason


# ── Images ─────────────────────────────────────────────────────────


class TestValidateImage:
    def test_png(self):
        assert validate_image(PNG, "flyer.PNG") == (True, "png")

    def test_unknown_extension_defaults_to_jpeg(self):
        assert validate_image(PNG, "flyer.heic") == (True, "jpeg")

    def test_pdf_is_not_an_image(self):
        ok, reason = validate_image(PDF, "flyer.png")
        assert ok is False
        assert "application/pdf" in reason

    def test_image_format_map(self):
        assert image_format("a.webp") == "webp"
        assert image_format("a.jpg") == "jpeg"


# ── Text decoding ──────────────────────────────────────────────────


class TestDecoding:
    def test_utf8_text(self):
        text = "Name,City\nCafé Arena,Fresno\nÉcole Gym,Montréal\n" * 5
        assert decode_text(text.encode("utf-8")) == text

    def test_explicit_encoding(self):
        assert decode_text("Café".encode("latin-1"), encoding="latin-1") == "Café"

    def test_detect_encoding_returns_string(self):
        assert isinstance(detect_encoding(b"plain ascii text"), str)

    def test_rtf_flattened(self):
        text = extract_text(rb"{\rtf1\ansi {\b Central Gym}\par Fresno}", "venues.rtf")
        assert "Central Gym" in text
        assert "\\par" not in text

    def test_csv_left_alone(self):
        assert extract_text(b"a,b\n1,2\n", "x.csv") == "a,b\n1,2\n"


# ── Labels & extensions ────────────────────────────────────────────


def test_format_labels():
    assert format_labels("roster.csv") == ("CSV (comma-separated values)", "CSV")
    assert format_labels("roster.tsv")[1] == "TSV"
    assert format_labels("notes.txt") == ("Plain text", "text")


def test_get_extension():
    assert _get_extension("Roster.CSV") == ".csv"
    assert _get_extension("archive.tar.gz") == ".gz"
    assert _get_extension("README") == ""
    assert _get_extension("") == ""
