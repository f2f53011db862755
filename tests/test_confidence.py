"""
Unit tests for confidence scoring.

Tests cover:
- Field points
- Consistency bonus between line totals and subtotal
- Blending with the OCR engine's confidence (half-up rounding, clamping)
"""

from decimal import Decimal

import pytest

from ddt_parser.extraction.confidence import ConfidenceScorer
from ddt_parser.extraction.document import LineItem, ParsedDocument


@pytest.fixture
def scorer() -> ConfidenceScorer:
    """Scorer with the default point table."""
    return ConfidenceScorer()


def _items_summing_to_25() -> tuple:
    return (
        LineItem(1, "V10", "MOZZARELLA", Decimal("2"), "KG", Decimal("5.00"), Decimal("10.00")),
        LineItem(2, "V11", "BASILICO", Decimal("1"), "MZ", Decimal("5.00"), Decimal("5.00")),
        LineItem(3, "V12", "POMODORO", Decimal("4"), "KG", Decimal("2.50"), Decimal("10.00")),
    )


def test_empty_document_scores_zero(scorer: ConfidenceScorer) -> None:
    """Test that a document with nothing recovered scores 0."""
    assert scorer.score(ParsedDocument()) == 0


def test_field_points(scorer: ConfidenceScorer) -> None:
    """Test the points awarded per recovered field."""
    assert scorer.score(ParsedDocument(document_number="12249")) == 18
    assert scorer.score(ParsedDocument(document_date="2025-12-09")) == 12
    assert scorer.score(ParsedDocument(supplier_name="ACME SRL")) == 15
    assert scorer.score(ParsedDocument(recipient_name="BETA SRL")) == 10
    assert scorer.score(ParsedDocument(destination_name="BETA PIZZERIA")) == 10
    assert scorer.score(ParsedDocument(grand_total=Decimal("1.00"))) == 10
    assert scorer.score(ParsedDocument(line_items=_items_summing_to_25())) == 20


def test_complete_document_is_capped(scorer: ConfidenceScorer, sample_document: ParsedDocument) -> None:
    """Test that a complete, consistent document scores the maximum."""
    assert scorer.score(sample_document) == 100


@pytest.mark.parametrize("subtotal, bonus", [
    ("25.00", 5),
    ("25.40", 5),
    ("26.80", 3),
    ("40.00", 0),
])
def test_consistency_bonus(scorer: ConfidenceScorer, subtotal: str, bonus: int) -> None:
    """Test the bonus for line totals adding up to the subtotal."""
    document = ParsedDocument(line_items=_items_summing_to_25(), subtotal=Decimal(subtotal))

    assert scorer.consistency_bonus(document) == bonus
    assert scorer.score(document) == 20 + bonus


def test_no_bonus_without_subtotal_or_items(scorer: ConfidenceScorer) -> None:
    """Test that the bonus needs both line items and a positive subtotal."""
    assert scorer.consistency_bonus(ParsedDocument(line_items=_items_summing_to_25())) == 0
    assert scorer.consistency_bonus(ParsedDocument(subtotal=Decimal("25.00"))) == 0


class TestBlend:
    """Tests for ConfidenceScorer.blend."""

    def test_without_optical(self, scorer: ConfidenceScorer) -> None:
        """Test that a missing optical confidence keeps the internal score."""
        assert scorer.blend(72) == 72
        assert scorer.blend(72, None) == 72

    def test_weighted_average(self, scorer: ConfidenceScorer) -> None:
        """Test the 70/30 blend of internal and optical confidence."""
        assert scorer.blend(72, 88) == 77
        assert scorer.blend(100, 80) == 94
        assert scorer.blend(0, 90) == 27

    def test_rounds_half_up(self, scorer: ConfidenceScorer) -> None:
        """Test that .5 results round up."""
        assert scorer.blend(75, 0) == 53
        assert scorer.blend(85, 0) == 60

    @pytest.mark.parametrize("optical, expected", [
        (150, 65),
        (-20, 35),
        (100.0, 65),
    ])
    def test_optical_is_clamped(self, scorer: ConfidenceScorer, optical, expected: int) -> None:
        """Test that optical confidence outside [0, 100] is clamped."""
        assert scorer.blend(50, optical) == expected

    def test_invalid_optical_ignored(self, scorer: ConfidenceScorer) -> None:
        """Test that a non-finite optical confidence is ignored."""
        assert scorer.blend(50, float("nan")) == 50
        assert scorer.blend(50, float("inf")) == 50

    @pytest.mark.parametrize("internal", [0, 37, 100])
    @pytest.mark.parametrize("optical", [None, -1000, 0, 55.5, 100, 1000])
    def test_bounds(self, scorer: ConfidenceScorer, internal: int, optical) -> None:
        """Test that the blended score stays within [0, 100]."""
        assert 0 <= scorer.blend(internal, optical) <= 100
