"""
Document Totals Extractor.

Extracts the taxable subtotal, the tax amount and the grand total from
the whole document text. Each total has its own ordered rule list; a
total that no rule finds stays at 0.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict

from ddt_parser.utils.logger import get_logger
from ddt_parser.postprocessor.normalizers import AmountNormalizer
from .document import ZERO
from .patterns import GRAND_TOTAL_RULES, SUBTOTAL_RULES, TAX_RULES, first_match

# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class DocumentTotals:
    """Document-level amounts."""
    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    grand_total: Decimal = ZERO

    def to_dict(self) -> Dict[str, Decimal]:
        return {
            'subtotal': self.subtotal,
            'tax_amount': self.tax_amount,
            'grand_total': self.grand_total,
        }


class TotalsExtractor:
    """
    Extracts document totals.

    Example:
        >>> TotalsExtractor().extract("Tot. imponibile 25,00\\nTot. documento 30,50")
        DocumentTotals(subtotal=Decimal('25.00'), tax_amount=Decimal('0.00'),
                       grand_total=Decimal('30.50'))
    """

    RULES = {
        'subtotal': SUBTOTAL_RULES,
        'tax_amount': TAX_RULES,
        'grand_total': GRAND_TOTAL_RULES,
    }

    def __init__(self) -> None:
        self.amount_normalizer = AmountNormalizer()

    def extract(self, text: str) -> DocumentTotals:
        """
        Extract all totals from text.

        Args:
            text: Document text.

        Returns:
            DocumentTotals with 0 for every total that was not found.
        """
        amounts = {}
        for name, rules in self.RULES.items():
            amounts[name] = self._extract_amount(name, rules, text)
        return DocumentTotals(**amounts)

    def _extract_amount(self, name: str, rules, text: str) -> Decimal:
        value, rule = first_match(rules, text)
        if rule is None:
            logger.debug(f"No match for {name}")
            return ZERO

        amount = self.amount_normalizer.to_decimal(value)
        if amount is None:
            return ZERO

        logger.debug(f"Extracted {name}: {amount} (rule: {rule.name})")
        return amount
