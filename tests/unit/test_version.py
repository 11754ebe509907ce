"""Tests for version parsing and ordering."""

import pytest

from pm.errors import InvalidVersionFormat
from pm.version import Version, is_decimal, parse_version


class TestParseVersion:
    """Test parsing of major.minor tokens."""

    @pytest.mark.parametrize("text", ["", "1", "-1", "abcde", "0.0", " 1 . 2 ", "1.-2", "+1.2", "1.2.3", "1.", ".1", "00.000"])
    def test_rejects_malformed(self, text):
        """Should reject tokens that are not two decimal integers."""
        with pytest.raises(InvalidVersionFormat) as exc_info:
            parse_version(text)
        assert repr(text) in str(exc_info.value)

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("0.1", Version(0, 1)),
            ("1.0", Version(1, 0)),
            ("001.0001", Version(1, 1)),
            ("1000.1000", Version(1000, 1000)),
        ],
    )
    def test_parses_valid(self, text, expected):
        """Should parse valid tokens, dropping leading zeros."""
        assert parse_version(text) == expected

    def test_round_trip_through_canonical_text(self):
        """Parsing the canonical text gives back the same version."""
        for text in ("0.1", "007.10", "12.0", "3.45"):
            version = parse_version(text)
            assert parse_version(str(version)) == version

    def test_canonical_text(self):
        """Should render without zero padding."""
        assert str(parse_version("001.0001")) == "1.1"

    def test_rejects_non_ascii_digits(self):
        """Should only accept ASCII digits."""
        with pytest.raises(InvalidVersionFormat):
            parse_version("١.2")


class TestVersion:
    """Test Version construction and ordering."""

    def test_zero_version_is_invalid(self):
        """0.0 is not a valid version."""
        with pytest.raises(InvalidVersionFormat):
            Version(0, 0)

    def test_negative_component_is_invalid(self):
        with pytest.raises(InvalidVersionFormat):
            Version(-1, 2)

    def test_ordering_compares_major_first(self):
        """Should order by major, then minor."""
        assert Version(1, 9) < Version(2, 0)
        assert Version(2, 1) > Version(2, 0)
        assert Version(1, 10) > Version(1, 9)
        assert sorted([Version(2, 0), Version(0, 1), Version(1, 5)]) == [
            Version(0, 1),
            Version(1, 5),
            Version(2, 0),
        ]

    def test_equal_versions_hash_alike(self):
        assert len({Version(1, 1), parse_version("01.01")}) == 1


def test_is_decimal():
    assert is_decimal("0123")
    assert not is_decimal("")
    assert not is_decimal("1a")
    assert not is_decimal(" 1")
