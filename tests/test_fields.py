"""
Unit tests for header field extraction.

Tests cover:
- Every header field of a complete delivery note
- Search regions (header window, recipient and destination blocks)
- Point of sale detection
- Recipient tax ID fallback and supplier exclusion
"""

import pytest

from ddt_parser.extraction.document import HEADER_FIELDS
from ddt_parser.extraction.fields import DocumentRegions, FieldExtractor, header_window


@pytest.fixture
def field_extractor() -> FieldExtractor:
    """Field extractor with the configured brand pattern."""
    return FieldExtractor()


def test_complete_header(field_extractor: FieldExtractor, sample_text: str) -> None:
    """Test extraction of every header field from a complete delivery note."""
    fields = field_extractor.extract(sample_text)

    assert fields == {
        'document_number': "12249",
        'document_date': "2025-12-09",
        'supplier_name': "QUELLI CHE LA FRUTTA SRL",
        'supplier_tax_id': "01234567890",
        'supplier_address': "Via Roma 12 - 80100 Napoli (NA)",
        'recipient_name': "FRADIAVOLO SRL",
        'recipient_tax_id': "09876543210",
        'destination_name': "FRADIAVOLO PIZZERIA",
        'destination_address': "Via Toledo 100 Napoli",
        'point_of_sale': "Via Toledo 100 Napoli",
        'transport_reason': "Vendita",
    }


def test_empty_text(field_extractor: FieldExtractor) -> None:
    """Test that empty text yields every field as an empty string."""
    fields = field_extractor.extract("")

    assert set(fields) == set(HEADER_FIELDS)
    assert all(value == "" for value in fields.values())


def test_document_number_and_date_labels(field_extractor: FieldExtractor) -> None:
    """Test the labelled document number and "del" date forms."""
    fields = field_extractor.extract("DDT n° 4521 del 3/2/24")

    assert fields['document_number'] == "4521"
    assert fields['document_date'] == "2024-02-03"


def test_date_fallback_to_first_full_date(field_extractor: FieldExtractor) -> None:
    """Test that an unlabelled four-digit-year date is still found."""
    fields = field_extractor.extract("Consegna prevista 15.03.2025 ore 10")

    assert fields['document_date'] == "2025-03-15"


class TestRegions:
    """Tests for search region computation."""

    def test_header_window_skips_blank_lines(self) -> None:
        """Test that the header window holds the first non-empty lines."""
        assert header_window("\n  ACME SRL \n\nVia Roma 1\nTel 081\n", 2) == "ACME SRL\nVia Roma 1"

    def test_supplier_outside_header_window(self, field_extractor: FieldExtractor) -> None:
        """Test that a company name past the header window is not the supplier."""
        text = "\n".join(f"riga {i}" for i in range(8)) + "\nACME SRL"

        assert field_extractor.extract(text)['supplier_name'] == ""

    def test_recipient_block_stops_at_tax_id(self, sample_text: str) -> None:
        """Test that the recipient block ends at the tax ID line."""
        regions = DocumentRegions.from_text(sample_text)

        assert "FRADIAVOLO SRL" in regions.recipient
        assert "09876543210" not in regions.recipient
        assert "09876543210" in regions.recipient_tail

    def test_block_marker_line_content(self) -> None:
        """Test that content on the marker line belongs to the block."""
        regions = DocumentRegions.from_text("Destinatario: ACME SRL\nC.F. 01234567890\n")

        assert regions.recipient.strip() == ": ACME SRL"

    def test_missing_markers(self) -> None:
        """Test that missing markers give empty blocks."""
        regions = DocumentRegions.from_text("ACME SRL\nVia Roma 1")

        assert regions.recipient == ""
        assert regions.recipient_tail == ""
        assert regions.destination == ""


class TestPointOfSale:
    """Tests for point of sale detection."""

    def test_not_set_without_brand(self, field_extractor: FieldExtractor) -> None:
        """Test that a destination of another operator is not a point of sale."""
        text = "Destinazione:\nRistorante Da Mario\nVia Chiaia 3 Napoli\nCodice Descrizione\n"
        fields = field_extractor.extract(text)

        assert fields['destination_name'] == "Ristorante Da Mario"
        assert fields['destination_address'] == "Via Chiaia 3 Napoli"
        assert fields['point_of_sale'] == ""

    def test_falls_back_to_destination_name(self, field_extractor: FieldExtractor) -> None:
        """Test that the destination name is used when no address is found."""
        text = "Destinazione: FRADIAVOLO CENTRO DIREZIONALE\nCodice Descrizione\n"

        assert field_extractor.extract(text)['point_of_sale'] == "FRADIAVOLO CENTRO DIREZIONALE"

    def test_custom_brand(self) -> None:
        """Test that the brand pattern is configurable."""
        extractor = FieldExtractor(brand_pattern=r"DA\s+MARIO")
        text = "Destinazione:\nRistorante Da Mario\nVia Chiaia 3 Napoli\nCodice Descrizione\n"

        assert extractor.extract(text)['point_of_sale'] == "Via Chiaia 3 Napoli"


class TestRecipientTaxId:
    """Tests for recipient tax ID lookup."""

    def test_fallback_to_whole_text(self, field_extractor: FieldExtractor) -> None:
        """Test that a tax ID anywhere in the text is used without a recipient marker."""
        text = "ACME SRL\nC.F./P.IVA: 01234567890\nnote varie\nCliente P.IVA 09876543210\n"
        fields = field_extractor.extract(text)

        assert fields['supplier_tax_id'] == "01234567890"
        assert fields['recipient_tax_id'] == "09876543210"

    def test_fallback_skips_supplier(self, field_extractor: FieldExtractor) -> None:
        """Test that the whole-text fallback never reports the supplier's tax ID."""
        text = "ACME SRL\nC.F./P.IVA: 01234567890\nnote varie\n"
        fields = field_extractor.extract(text)

        assert fields['supplier_tax_id'] == "01234567890"
        assert fields['recipient_tax_id'] == ""

    def test_recipient_block_taken_as_is(self, field_extractor: FieldExtractor) -> None:
        """Test a short note whose header window reaches the recipient's tax ID."""
        text = "ACME SRL\nDestinatario:\nBETA SRL\nC.F./P.IVA: 09876543210\n"
        fields = field_extractor.extract(text)

        assert fields['supplier_tax_id'] == "09876543210"
        assert fields['recipient_tax_id'] == "09876543210"
