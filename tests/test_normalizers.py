"""
Unit tests for the postprocessor normalizers.

Tests cover:
- Unit-of-measure synonyms, default and idempotence
- D/M/Y date tokens to ISO
- Comma-decimal amounts and quantities
- Whitespace collapsing
"""

from decimal import Decimal

import pytest

from ddt_parser.postprocessor.normalizers import (
    AmountNormalizer,
    DateNormalizer,
    UnitNormalizer,
    collapse_whitespace,
)


@pytest.fixture
def unit_normalizer() -> UnitNormalizer:
    """Unit normalizer with the built-in and configured synonyms."""
    return UnitNormalizer()


class TestUnitNormalizer:
    """Tests for UnitNormalizer."""

    @pytest.mark.parametrize("raw, expected", [
        ("CASSE", "CS"),
        ("cassa", "CS"),
        ("busta", "BS"),
        (" Pezzi ", "PZ"),
        ("litri", "LT"),
        ("unità", "UN"),
        ("cartoni", "CT"),
    ])
    def test_synonyms(self, unit_normalizer: UnitNormalizer, raw: str, expected: str) -> None:
        """Test that free-text synonyms map to their two-letter code."""
        assert unit_normalizer.normalize(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, "   "])
    def test_empty_gives_default(self, unit_normalizer: UnitNormalizer, raw) -> None:
        """Test that an empty unit becomes PZ."""
        assert unit_normalizer.normalize(raw) == "PZ"

    def test_unknown_is_upper_cased(self, unit_normalizer: UnitNormalizer) -> None:
        """Test that unknown units pass through upper-cased."""
        assert unit_normalizer.normalize("kg") == "KG"
        assert unit_normalizer.normalize("vasc") == "VASC"

    @pytest.mark.parametrize("raw", ["CASSE", "busta", "", "kg", "Mazzi", "xyz", "COLLI"])
    def test_idempotent(self, unit_normalizer: UnitNormalizer, raw: str) -> None:
        """Test that normalizing twice equals normalizing once."""
        once = unit_normalizer.normalize(raw)
        assert unit_normalizer.normalize(once) == once

    def test_extra_synonyms(self) -> None:
        """Test that extra synonyms extend the table without breaking idempotence."""
        normalizer = UnitNormalizer(extra_synonyms={"vaschetta": "vs"})

        assert normalizer.normalize("VASCHETTA") == "VS"
        assert normalizer.normalize("VS") == "VS"

    def test_configured_synonyms(self, unit_normalizer: UnitNormalizer) -> None:
        """Test that singular forms come from configuration, not the built-in table."""
        assert unit_normalizer.normalize("pezzo") == "PZ"
        assert unit_normalizer.normalize("Litro") == "LT"
        assert UnitNormalizer(extra_synonyms={}).normalize("pezzo") == "PEZZO"


class TestDateNormalizer:
    """Tests for DateNormalizer."""

    @pytest.mark.parametrize("raw", ["09/12/2025", "09-12-2025", "09.12.2025", "09/12/25"])
    def test_separators_and_short_year(self, raw: str) -> None:
        """Test that every supported form of the same date gives one ISO date."""
        assert DateNormalizer().normalize(raw) == "2025-12-09"

    def test_zero_padding(self) -> None:
        """Test that day and month are zero padded."""
        assert DateNormalizer().normalize("9/1/2025") == "2025-01-09"

    @pytest.mark.parametrize("raw", ["", None, "12/2025", "2025"])
    def test_malformed_token(self, raw) -> None:
        """Test that tokens without three parts give None."""
        assert DateNormalizer().normalize(raw) is None


class TestAmountNormalizer:
    """Tests for AmountNormalizer."""

    @pytest.mark.parametrize("raw, expected", [
        ("8,50", Decimal("8.50")),
        ("€ 8,50", Decimal("8.50")),
        ("1.234,56", Decimal("1234.56")),
        ("8.50", Decimal("8.50")),
        ("EUR 27,56", Decimal("27.56")),
        ("2,345", Decimal("2.35")),
    ])
    def test_to_decimal(self, raw: str, expected: Decimal) -> None:
        """Test amount parsing and rounding to cents."""
        assert AmountNormalizer().to_decimal(raw) == expected

    @pytest.mark.parametrize("raw", ["", None, "abc", "€", "123456789012345678901234567890,00"])
    def test_not_a_number(self, raw) -> None:
        """Test that non-numeric or oversized text gives None."""
        assert AmountNormalizer().to_decimal(raw) is None

    def test_parse_quantity_keeps_precision(self) -> None:
        """Test that quantities are not rounded to cents."""
        normalizer = AmountNormalizer()

        assert normalizer.parse_quantity("1,5") == Decimal("1.5")
        assert normalizer.parse_quantity("0,125") == Decimal("0.125")
        assert normalizer.parse_quantity("12") == Decimal("12")


def test_collapse_whitespace() -> None:
    """Test that whitespace runs collapse and ends are trimmed."""
    assert collapse_whitespace("  BASILICO \t PAD\nIT.  ") == "BASILICO PAD IT."
    assert collapse_whitespace("") == ""
