"""
Tests for alignment record parsing and the distance formula.
"""

import math

import pytest

from treecut.errors import RecordFormatError
from treecut.records import (
    alignment_distance,
    parse_pair_labels,
    read_alignment_file,
    record_to_distance
)


def _closed_form(corelen, rmsd, len1, len2):
    coreval = (2 * corelen) / (len1 + len2)
    raw = -6.04979701 * (rmsd - coreval * corelen * 0.155 + 1.6018) + 1000
    return (1 / raw) * 100


def _record(pair, corelen, rmsd, len1, len2):
    return [pair, corelen, rmsd, "0", "0", "0", "0", len1, len2]


class TestParsePairLabels:
    """Test extraction of labels from the pair field."""

    def test_basic(self):
        """Test splitting the pair field and stripping the suffix."""
        assert parse_pair_labels("1abc.ent_2xyz00000") == ("1abc", "2xyz")

    def test_only_first_separator_splits(self):
        """Test that later '.ent_' occurrences stay in the second label."""
        assert parse_pair_labels("a.ent_b.ent_c12345") == ("a", "b.ent_c")

    def test_missing_separator(self):
        """Test that a field without '.ent_' is a format error."""
        with pytest.raises(RecordFormatError, match="Invalid alignment pair"):
            parse_pair_labels("1abc_2xyz00000")

    def test_short_second_label(self):
        """Test that a second piece shorter than the suffix is a format error."""
        with pytest.raises(RecordFormatError):
            parse_pair_labels("1abc.ent_2xy")

    def test_empty_second_label(self):
        """Test that a second piece of exactly the suffix length gives an empty label."""
        assert parse_pair_labels("1abc.ent_.pdb0") == ("1abc", "")


class TestAlignmentDistance:
    """Test the distance formula against literal records."""

    def test_close_pair(self):
        """Test a well-aligned pair just below the default threshold."""
        pair = record_to_distance(_record("1abc.ent_2xyz00000", "120", "1.5", "130", "140"))
        assert pair.label_a == "1abc"
        assert pair.label_b == "2xyz"
        assert pair.distance == pytest.approx(_closed_form(120, 1.5, 130, 140), rel=1e-12)
        assert pair.distance == pytest.approx(0.0924848, abs=1e-5)

    def test_distant_pair(self):
        """Test a weaker alignment just above the default threshold."""
        pair = record_to_distance(_record("d1abca_.ent_d2xyzb1.pdb0", "50", "3.0", "100", "100"))
        assert pair.distance == pytest.approx(_closed_form(50, 3.0, 100, 100), rel=1e-12)
        assert pair.distance == pytest.approx(0.1004416, abs=1e-5)

    def test_negative_raw_value(self):
        """Test that a huge RMSD drives the denominator negative."""
        pair = record_to_distance(["d1neg_.ent_d2neg_.pdb0", "10", "200", "0", "0", "0", "0", "10", "10"])
        assert (pair.label_a, pair.label_b) == ("d1neg_", "d2neg_")
        dist = pair.distance
        assert dist < 0
        assert dist == pytest.approx(_closed_form(10, 200, 10, 10), rel=1e-12)
        assert dist == pytest.approx(-0.4755727, abs=1e-4)

    def test_zero_lengths(self):
        """Test that zero sequence lengths follow IEEE division instead of raising."""
        assert alignment_distance(120, 1.5, 0, 0) == 0.0
        assert math.isnan(alignment_distance(0, 1.5, 0, 0))

    def test_labels_are_canonically_ordered(self):
        """Test that the lexicographically smaller label comes first."""
        pair = record_to_distance(_record("zeta.ent_alpha00000", "120", "1.5", "130", "140"))
        assert (pair.label_a, pair.label_b) == ("alpha", "zeta")

        swapped = record_to_distance(_record("alpha.ent_zeta00000", "120", "1.5", "130", "140"))
        assert swapped == pair

    def test_non_numeric_field(self):
        """Test that a non-numeric measurement is a format error."""
        with pytest.raises(RecordFormatError, match="Expected float"):
            record_to_distance(_record("1abc.ent_2xyz00000", "abc", "1.5", "130", "140"))

    def test_wrong_field_count(self):
        """Test that a record that is not 9 fields long is a format error."""
        with pytest.raises(RecordFormatError, match="Expected 9 fields"):
            record_to_distance(["1abc.ent_2xyz00000", "120", "1.5"])

    @pytest.mark.parametrize("value", ["1_000", "130 ", " 130", "13\t0"])
    def test_lenient_float_spellings_rejected(self, value):
        """Test that digit separators and embedded whitespace are not numbers."""
        with pytest.raises(RecordFormatError, match="Expected float"):
            record_to_distance(_record("1abc.ent_2xyz00000", "120", "1.5", value, "140"))


class TestReadAlignmentFile:
    """Test reading whole alignment summary files."""

    def test_skips_ragged_rows(self, tmp_path):
        """Test that rows without 9 fields are skipped."""
        path = tmp_path / "block_01.tsv"
        path.write_text(
            "Alignment summary\n"
            "pair\tcore\trmsd\n"
            "1abc.ent_2xyz00000\t120\t1.5\t0\t0\t0\t0\t130\t140\n"
            "\n"
            "d1abca_.ent_d2xyzb1.pdb0\t 50\t 3.0\tx\tx\tx\tx\t 100\t 100\n"
            "trailing\tjunk\n"
        )
        pairs = read_alignment_file(path)
        assert [(p.label_a, p.label_b) for p in pairs] == [
            ("1abc", "2xyz"),
            ("d1abca_", "d2xyzb1"),
        ]
        assert pairs[1].distance == pytest.approx(_closed_form(50, 3.0, 100, 100))

    def test_windows_line_endings(self, tmp_path):
        """Test that carriage returns do not leak into the last field."""
        path = tmp_path / "crlf.tsv"
        path.write_bytes(b"1abc.ent_2xyz00000\t120\t1.5\t0\t0\t0\t0\t130\t140\r\n")
        pairs = read_alignment_file(path)
        assert len(pairs) == 1
        assert (pairs[0].label_a, pairs[0].label_b) == ("1abc", "2xyz")
        assert pairs[0].distance == pytest.approx(_closed_form(120, 1.5, 130, 140))

    def test_error_reports_location(self, tmp_path):
        """Test that format errors name the file and line."""
        path = tmp_path / "bad.tsv"
        path.write_text(
            "1abc.ent_2xyz00000\t120\t1.5\t0\t0\t0\t0\t130\t140\n"
            "no-separator-here\t120\t1.5\t0\t0\t0\t0\t130\t140\n"
        )
        with pytest.raises(RecordFormatError) as exc_info:
            read_alignment_file(path)
        assert exc_info.value.path == str(path)
        assert exc_info.value.line == 2
        assert f"{path}:2" in str(exc_info.value)

    def test_missing_file(self, tmp_path):
        """Test that an unreadable file raises OSError."""
        with pytest.raises(OSError):
            read_alignment_file(tmp_path / "missing.tsv")

    def test_trailing_space_in_numeric_field(self, tmp_path):
        """Test that only leading whitespace is tolerated in numeric fields."""
        path = tmp_path / "padded.tsv"
        path.write_text("1abc.ent_2xyz00000\t120\t1.5\t0\t0\t0\t0\t130 \t140\n")
        with pytest.raises(RecordFormatError, match="Expected float") as exc_info:
            read_alignment_file(path)
        assert exc_info.value.line == 1

    def test_undecodable_bytes_outside_numeric_fields(self, tmp_path):
        """Test that non-UTF-8 bytes in headers and unused columns are tolerated."""
        path = tmp_path / "latin1.tsv"
        path.write_bytes(
            b"header \xe9t\xe9\n"
            b"1abc.ent_2xyz00000\t120\t1.5\t\xff\t0\t0\t0\t130\t140\n"
        )
        pairs = read_alignment_file(path)
        assert len(pairs) == 1
        assert (pairs[0].label_a, pairs[0].label_b) == ("1abc", "2xyz")
        assert pairs[0].distance == alignment_distance(120, 1.5, 130, 140)

    def test_undecodable_bytes_in_numeric_field(self, tmp_path):
        """Test that non-UTF-8 bytes in a measurement are a format error."""
        path = tmp_path / "latin1.tsv"
        path.write_bytes(b"1abc.ent_2xyz00000\t120\t1.5\t0\t0\t0\t0\t13\xff\t140\n")
        with pytest.raises(RecordFormatError, match="Expected float"):
            read_alignment_file(path)
