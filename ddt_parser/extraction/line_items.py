"""
Line-Item Table Extractor.

This module locates the product table of a delivery note and turns each
of its rows into a LineItem.

Steps:
    1. Bound the table between a header marker ("Codice Descrizione")
       and a footer marker ("Tot. imponibile", "CONDIZIONI DI VENDITA")
    2. Skip short lines and column-header lines
    3. Match every remaining line against the ordered row patterns
    4. Keep rows with a plausible quantity, normalizing unit, description
       and product code
"""

from decimal import Decimal, InvalidOperation
from functools import partial
from typing import Callable, List, Optional, Tuple

from config import get_config
from ddt_parser.utils.helpers import quantize_amount
from ddt_parser.utils.logger import get_logger
from ddt_parser.postprocessor.normalizers import (
    AmountNormalizer,
    UnitNormalizer,
    collapse_whitespace,
)
from .document import LineItem, ZERO
from .patterns import ROW_PATTERNS, TABLE_FOOTER_MARKERS, TABLE_HEADER_MARKERS, TABLE_HEADER_WORDS

# Initialize module logger
logger = get_logger(__name__)

# Post-processing step applied to every extracted product code
CodeNormalizer = Callable[[str], str]

DEFAULT_MIN_LINE_LENGTH = 15
DEFAULT_MIN_QUANTITY = 0
DEFAULT_MAX_QUANTITY = 100000


def prefix_short_numeric_code(code: str, prefix: str = "V", max_length: int = 4) -> str:
    """
    Prepend a letter to short, purely numeric product codes.

    One supplier prints its "V27" style codes without the letter; the rule
    may misfire on other suppliers whose codes are genuinely numeric, so it
    is applied as a replaceable CodeNormalizer.

    Example:
        >>> prefix_short_numeric_code("27")
        "V27"
        >>> prefix_short_numeric_code("123456")
        "123456"
    """
    if code.isdigit() and len(code) <= max_length:
        return prefix + code
    return code


def keep_code(code: str) -> str:
    """CodeNormalizer that leaves codes untouched."""
    return code


def find_table_bounds(text: str) -> Tuple[int, int]:
    """
    Locate the product table inside the document text.

    Header and footer markers are tried in priority order; the footer is
    searched from the table start onward.

    Returns:
        Tuple of (start, end) offsets. Without markers the table spans the
        whole text.
    """
    start = 0
    for marker in TABLE_HEADER_MARKERS:
        match = marker.search(text)
        if match:
            start = match.start()
            break

    end = len(text)
    for marker in TABLE_FOOTER_MARKERS:
        match = marker.search(text, start)
        if match:
            end = match.start()
            break

    return start, end


class LineItemExtractor:
    """
    Extracts product rows from the table region of a delivery note.

    Attributes:
        code_normalizer: Callable applied to every product code
        min_line_length: Shorter lines are never rows
        min_quantity, max_quantity: Exclusive plausibility bounds

    Example:
        >>> extractor = LineItemExtractor()
        >>> items = extractor.extract("27 BASILICO PAD IT. 1 CS € 8,50 € 8,50")
        >>> items[0].code, items[0].line_total
        ("V27", Decimal('8.50'))
    """

    def __init__(
        self,
        code_normalizer: Optional[CodeNormalizer] = None,
        unit_normalizer: Optional[UnitNormalizer] = None
    ) -> None:
        """
        Initialize the line-item extractor.

        Args:
            code_normalizer: Product code post-processing. If None, the
                            configured short-code prefix rule is used.
            unit_normalizer: Unit normalizer. If None, a default one.
        """
        self.min_line_length = int(get_config(
            "extraction.line_items.min_line_length",
            DEFAULT_MIN_LINE_LENGTH
        ))
        self.min_quantity = Decimal(str(get_config(
            "extraction.line_items.min_quantity",
            DEFAULT_MIN_QUANTITY
        )))
        self.max_quantity = Decimal(str(get_config(
            "extraction.line_items.max_quantity",
            DEFAULT_MAX_QUANTITY
        )))

        self.code_normalizer = code_normalizer or self._configured_code_normalizer()
        self.unit_normalizer = unit_normalizer or UnitNormalizer()
        self.amount_normalizer = AmountNormalizer()

    @staticmethod
    def _configured_code_normalizer() -> CodeNormalizer:
        if not get_config("extraction.line_items.code_prefix.enabled", True):
            return keep_code

        return partial(
            prefix_short_numeric_code,
            prefix=get_config("extraction.line_items.code_prefix.prefix", "V"),
            max_length=int(get_config("extraction.line_items.code_prefix.max_length", 4))
        )

    def extract(self, text: str) -> Tuple[LineItem, ...]:
        """
        Extract all line items from text.

        Args:
            text: Document text with '\\n' line endings.

        Returns:
            Line items in order of appearance, numbered from 1.
        """
        start, end = find_table_bounds(text)
        logger.debug(f"Table bounds: {start}-{end} of {len(text)} characters")

        items: List[LineItem] = []
        for raw_line in text[start:end].split('\n'):
            line = raw_line.strip()
            if len(line) < self.min_line_length or TABLE_HEADER_WORDS.match(line):
                continue

            item = self._parse_row(line, len(items) + 1)
            if item is not None:
                items.append(item)

        return tuple(items)

    def _parse_row(self, line: str, line_number: int) -> Optional[LineItem]:
        """
        Parse a single table line.

        Only the first matching row pattern is used; a row it rejects is not
        retried with the remaining patterns.
        """
        for row_pattern in ROW_PATTERNS:
            match = row_pattern.pattern.match(line)
            if match is None:
                continue

            groups = match.groupdict()
            quantity = self.amount_normalizer.parse_quantity(groups['quantity'])
            if quantity is None or not self.min_quantity < quantity < self.max_quantity:
                logger.debug(f"Rejected row (quantity {groups['quantity']!r}): {line!r}")
                return None

            unit_price = self.amount_normalizer.to_decimal(groups.get('unit_price')) or ZERO
            line_total = self.amount_normalizer.to_decimal(groups.get('line_total'))
            if line_total is None:
                line_total = self._computed_total(quantity, unit_price)

            item = LineItem(
                line_number=line_number,
                code=self.code_normalizer(groups['code']),
                description=collapse_whitespace(groups['description']),
                quantity=quantity,
                unit=self.unit_normalizer.normalize(groups['unit']),
                unit_price=unit_price,
                line_total=line_total,
            )
            logger.debug(f"Row {line_number} ({row_pattern.name}): {item}")
            return item

        return None

    @staticmethod
    def _computed_total(quantity: Decimal, unit_price: Decimal) -> Decimal:
        """Quantity x unit price in cents, 0 without a price or when out of range."""
        if unit_price <= 0:
            return ZERO
        try:
            return quantize_amount(quantity * unit_price)
        except InvalidOperation:
            return ZERO
