"""
Unit tests for document validation.

Tests cover:
- Date and tax ID validators
- Required fields
- Totals coherence warnings
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from ddt_parser.extraction.document import LineItem, ParsedDocument
from ddt_parser.postprocessor.validators import (
    DateValidator,
    DocumentValidator,
    TaxIdValidator,
    ValidationResult,
)


@pytest.fixture
def validator() -> DocumentValidator:
    """Document validator with default settings."""
    return DocumentValidator()


@pytest.fixture
def minimal_document() -> ParsedDocument:
    """Document holding only the required fields."""
    return ParsedDocument(document_number="12249", supplier_name="ACME SRL")


class TestDateValidator:
    """Tests for DateValidator."""

    def test_valid(self) -> None:
        """Test a valid ISO date."""
        assert DateValidator().validate("2025-12-09") == (True, "Valid date")

    @pytest.mark.parametrize("value", ["", "09/12/2025", "2025-02-31", "1999-01-01", "2025-13-01"])
    def test_invalid(self, value: str) -> None:
        """Test malformed, impossible and out-of-range dates."""
        is_valid, message = DateValidator().validate(value)

        assert is_valid is False
        assert message


class TestTaxIdValidator:
    """Tests for TaxIdValidator."""

    def test_valid(self) -> None:
        """Test an eleven-digit tax ID."""
        assert TaxIdValidator().validate("01234567890")[0] is True

    @pytest.mark.parametrize("value", ["", "123", "0123456789A", "012345678901"])
    def test_invalid(self, value: str) -> None:
        """Test tax IDs of the wrong length or with letters."""
        assert TaxIdValidator().validate(value)[0] is False


def test_minimal_document_is_valid(
    validator: DocumentValidator,
    minimal_document: ParsedDocument
) -> None:
    """Test that a document with the required fields has no warnings."""
    result = validator.validate(minimal_document)

    assert result.is_valid
    assert result.warnings == []


def test_missing_required_fields(validator: DocumentValidator) -> None:
    """Test that each missing required field is reported."""
    result = validator.validate(ParsedDocument())

    assert result.warnings == [
        "Missing required field: document_number",
        "Missing required field: supplier_name",
    ]


def test_invalid_optional_fields(
    validator: DocumentValidator,
    minimal_document: ParsedDocument
) -> None:
    """Test that present tax IDs and dates are checked."""
    document = replace(minimal_document, supplier_tax_id="123", document_date="2025-02-31")
    result = validator.validate(document)

    assert len(result.warnings) == 2
    assert result.warnings[0].startswith("supplier_tax_id:")
    assert result.warnings[1].startswith("document_date: Not a calendar date")
    assert result.field_results['supplier_tax_id'][0] is False


def test_grand_total_lower_than_subtotal(validator: DocumentValidator) -> None:
    """Test the grand total check."""
    document = ParsedDocument(
        document_number="1",
        supplier_name="ACME SRL",
        subtotal=Decimal("40.00"),
        grand_total=Decimal("30.00"),
    )

    assert validator.validate(document).warnings == [
        "Grand total (30.00) is lower than subtotal (40.00)"
    ]


@pytest.mark.parametrize("subtotal, warns", [
    ("8.50", False),
    ("8.90", False),
    ("9.00", True),
])
def test_line_totals_against_subtotal(validator: DocumentValidator, subtotal: str, warns: bool) -> None:
    """Test the line totals check and its tolerance."""
    document = ParsedDocument(
        document_number="1",
        supplier_name="ACME SRL",
        line_items=(LineItem(1, "V27", "BASILICO", Decimal("1"), "CS", Decimal("8.50"), Decimal("8.50")),),
        subtotal=Decimal(subtotal),
    )

    assert (not validator.validate(document).is_valid) is warns


def test_validation_result_to_dict() -> None:
    """Test the dictionary form of a validation result."""
    result = ValidationResult()
    result.add_field_result("supplier_tax_id", False, "bad")

    assert result.to_dict() == {
        'is_valid': False,
        'warnings': ["supplier_tax_id: bad"],
        'field_results': {'supplier_tax_id': (False, "bad")},
    }
