"""
Document Field Extractors.

This module extracts the scalar header fields of a delivery note. Every
field trusts a different part of the document, so the search areas are
computed first (DocumentRegions) and each field's ordered rule list is
then run over its own area only:

    - whole text: document number, date, transport reason
    - header window: supplier name, tax ID and address
    - recipient block ("Destinatario" ...): recipient name and tax ID
    - destination block ("Destinazione" ...): destination name, address
      and point of sale
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern

from config import get_config
from ddt_parser.utils.logger import get_logger
from ddt_parser.postprocessor.normalizers import DateNormalizer, collapse_whitespace
from .document import HEADER_FIELDS
from .patterns import (
    DESTINATION_END,
    DESTINATION_START,
    DOCUMENT_DATE_RULES,
    DOCUMENT_NUMBER_RULES,
    PARTY_NAME_RULES,
    RECIPIENT_END,
    RECIPIENT_START,
    STREET_ADDRESS_RULES,
    SUPPLIER_ADDRESS_RULES,
    SUPPLIER_NAME_RULES,
    TAX_ID_RULES,
    TRANSPORT_REASON_RULES,
    first_match,
)

# Initialize module logger
logger = get_logger(__name__)

DEFAULT_HEADER_WINDOW_LINES = 8
DEFAULT_RECIPIENT_TAX_ID_WINDOW = 200
DEFAULT_BRAND_PATTERN = r'FRADIAVOLO|FRA\s*DIAVOLO'


def header_window(text: str, max_lines: int = DEFAULT_HEADER_WINDOW_LINES) -> str:
    """
    Return the first non-empty lines of text, stripped and newline joined.

    Example:
        >>> header_window("\\n  ACME SRL \\n\\nVia Roma 1\\n", 1)
        "ACME SRL"
    """
    lines = [line.strip() for line in text.split('\n')]
    return '\n'.join([line for line in lines if line][:max_lines])


def marked_block(text: str, start: Pattern, end: Pattern) -> str:
    """
    Return the text following a start marker up to the next end-marker line.

    The end marker is searched from the line after the start marker, so a
    marker line such as "Destinatario: ACME SRL" keeps its own content.

    Args:
        text: Full document text.
        start: Marker opening the block.
        end: Line-anchored marker closing the block.

    Returns:
        Block text, or an empty string when the start marker is absent.
    """
    start_match = start.search(text)
    if start_match is None:
        return ""

    content_start = start_match.end()
    line_end = text.find('\n', content_start)
    if line_end == -1:
        return text[content_start:]

    end_match = end.search(text, line_end + 1)
    content_end = end_match.start() if end_match else len(text)
    return text[content_start:content_end]


@dataclass(frozen=True)
class DocumentRegions:
    """
    Search areas of one document.

    Attributes:
        text: Full text
        header: First non-empty lines (supplier letterhead)
        recipient: Block after the "Destinatario" marker
        recipient_tail: Fixed-size window after the "Destinatario" marker
        destination: Block after the "Destinazione" marker
    """
    text: str
    header: str
    recipient: str
    recipient_tail: str
    destination: str

    @classmethod
    def from_text(
        cls,
        text: str,
        header_lines: int = DEFAULT_HEADER_WINDOW_LINES,
        tail_length: int = DEFAULT_RECIPIENT_TAX_ID_WINDOW
    ) -> 'DocumentRegions':
        """Compute all regions of text."""
        recipient_marker = RECIPIENT_START.search(text)
        recipient_tail = ""
        if recipient_marker is not None:
            recipient_tail = text[recipient_marker.end():recipient_marker.end() + tail_length]

        return cls(
            text=text,
            header=header_window(text, header_lines),
            recipient=marked_block(text, RECIPIENT_START, RECIPIENT_END),
            recipient_tail=recipient_tail,
            destination=marked_block(text, DESTINATION_START, DESTINATION_END),
        )


class FieldExtractor:
    """
    Extracts the scalar header fields of a delivery note.

    Attributes:
        header_lines: Size of the supplier header window
        tail_length: Size of the recipient tax-ID window
        brand_pattern: Operator brand searched in the destination block
        date_normalizer: DateNormalizer used as the date rule transform

    Example:
        >>> extractor = FieldExtractor()
        >>> fields = extractor.extract("Doc. di trasporto n. 12249 del 09/12/2025")
        >>> fields['document_number'], fields['document_date']
        ("12249", "2025-12-09")
    """

    def __init__(self, brand_pattern: Optional[str] = None) -> None:
        """
        Initialize the field extractor.

        Args:
            brand_pattern: Regex identifying the operator's own points of
                          sale. If None, uses config.
        """
        self.header_lines = int(get_config(
            "extraction.header_window_lines",
            DEFAULT_HEADER_WINDOW_LINES
        ))
        self.tail_length = int(get_config(
            "extraction.recipient_tax_id_window",
            DEFAULT_RECIPIENT_TAX_ID_WINDOW
        ))
        pattern = brand_pattern or get_config(
            "extraction.point_of_sale.brand_pattern",
            DEFAULT_BRAND_PATTERN
        )
        self.brand_pattern = re.compile(pattern, re.IGNORECASE)
        self.date_normalizer = DateNormalizer()

    def extract(self, text: str) -> Dict[str, str]:
        """
        Extract every header field from text.

        Args:
            text: Document text with '\\n' line endings.

        Returns:
            Dictionary holding every name of HEADER_FIELDS; unmatched
            fields are empty strings.
        """
        regions = DocumentRegions.from_text(text, self.header_lines, self.tail_length)
        fields = dict.fromkeys(HEADER_FIELDS, "")

        fields['document_number'] = self._run('document_number', DOCUMENT_NUMBER_RULES, text)
        fields['document_date'] = self._run(
            'document_date',
            DOCUMENT_DATE_RULES,
            text,
            transform=self.date_normalizer.normalize
        )
        fields['transport_reason'] = self._run(
            'transport_reason',
            TRANSPORT_REASON_RULES,
            text,
            transform=collapse_whitespace
        )

        # Supplier letterhead
        fields['supplier_name'] = self._run(
            'supplier_name', SUPPLIER_NAME_RULES, regions.header, transform=collapse_whitespace
        )
        fields['supplier_tax_id'] = self._run('supplier_tax_id', TAX_ID_RULES, regions.header)
        fields['supplier_address'] = self._run(
            'supplier_address',
            SUPPLIER_ADDRESS_RULES,
            regions.header,
            transform=collapse_whitespace
        )

        # Recipient
        fields['recipient_name'] = self._run(
            'recipient_name', PARTY_NAME_RULES, regions.recipient, transform=collapse_whitespace
        )
        fields['recipient_tax_id'] = self._recipient_tax_id(regions, fields['supplier_tax_id'])

        # Destination
        fields['destination_name'] = self._run(
            'destination_name',
            PARTY_NAME_RULES,
            regions.destination,
            transform=collapse_whitespace
        )
        fields['destination_address'] = self._run(
            'destination_address',
            STREET_ADDRESS_RULES,
            regions.destination,
            transform=collapse_whitespace
        )
        if regions.destination and self.brand_pattern.search(regions.destination):
            fields['point_of_sale'] = (
                fields['destination_address'] or fields['destination_name']
            )
            logger.debug(f"Point of sale detected: {fields['point_of_sale']!r}")

        return fields

    def _run(self, field_name: str, rules, area: str, transform=None) -> str:
        """Run one field's rule list over its search area."""
        value, rule = first_match(rules, area, transform)
        if rule is None:
            logger.debug(f"No match for {field_name}")
            return ""

        logger.debug(f"Extracted {field_name}: {value!r} (rule: {rule.name})")
        return value or ""

    def _recipient_tax_id(self, regions: DocumentRegions, supplier_tax_id: str) -> str:
        """
        Find the recipient tax ID.

        The first labelled tax ID after the "Destinatario" marker is taken as
        is. Without one, any labelled tax ID in the whole text is used except
        the supplier's.
        """
        for area, exclude in ((regions.recipient_tail, None), (regions.text, supplier_tax_id)):
            for rule in TAX_ID_RULES:
                for match in rule.pattern.finditer(area):
                    candidate = match.group(rule.group)
                    if candidate and candidate != exclude:
                        logger.debug(f"Extracted recipient_tax_id: {candidate!r}")
                        return candidate

        logger.debug("No match for recipient_tax_id")
        return ""
