"""
Data Normalizers Module.

This module provides normalization functions for:
    - Units of measure (free-text synonyms to two-letter codes)
    - Date tokens (D/M/Y to ISO)
    - Amounts and quantities (comma-decimal text to Decimal)
    - Text cleaning
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

from config import get_config
from ddt_parser.utils.helpers import quantize_amount
from ddt_parser.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim the ends."""
    if not text:
        return ""
    return ' '.join(text.split())


class UnitNormalizer:
    """
    Maps free-text unit-of-measure synonyms to canonical two-letter codes.

    Lookup is case-insensitive. Empty input yields the default code;
    unknown input is upper-cased and passed through, on the assumption
    that it already is a canonical or supplier-specific code. The mapping
    is idempotent: normalizing an output again returns it unchanged.

    Example:
        >>> normalizer = UnitNormalizer()
        >>> normalizer.normalize("CASSE")
        "CS"
        >>> normalizer.normalize("busta")
        "BS"
        >>> normalizer.normalize("")
        "PZ"
    """

    DEFAULT_UNIT = "PZ"

    SYNONYMS = {
        'PEZZI': 'PZ',
        'LITRI': 'LT',
        'CASSA': 'CS',
        'CASSE': 'CS',
        'BUSTA': 'BS',
        'BUSTE': 'BS',
        'MAZZO': 'MZ',
        'MAZZI': 'MZ',
        'GRAMMI': 'GR',
        'UNITA': 'UN',
        'SCATOLA': 'SC',
        'SCATOLE': 'SC',
        'CARTONE': 'CT',
        'CARTONI': 'CT',
        'COLLO': 'CL',
        'COLLI': 'CL',
    }

    def __init__(self, extra_synonyms: Optional[Dict[str, str]] = None) -> None:
        """
        Initialize the unit normalizer.

        Args:
            extra_synonyms: Additional synonym -> code pairs. Defaults to
                           postprocessing.units.synonyms from configuration.
        """
        self.default_unit = get_config("postprocessing.units.default", self.DEFAULT_UNIT)
        self.synonyms = dict(self.SYNONYMS)

        configured = extra_synonyms
        if configured is None:
            configured = get_config("postprocessing.units.synonyms", {})

        for synonym, code in configured.items():
            self.synonyms[str(synonym).strip().upper()] = str(code).strip().upper()

        # Canonical codes must map to themselves to keep normalize idempotent
        for code in set(self.synonyms.values()):
            self.synonyms.pop(code, None)

    def normalize(self, unit: Optional[str]) -> str:
        """
        Normalize a unit of measure.

        Args:
            unit: Raw unit text from the OCR row.

        Returns:
            Canonical unit code.
        """
        key = (unit or "").strip().upper()
        if not key:
            return self.default_unit
        return self.synonyms.get(key, key)


class DateNormalizer:
    """
    Rewrites day/month/year tokens to ISO format (YYYY-MM-DD).

    Separators may be '/', '-' or '.'. Day and month are zero padded and a
    two-digit year is expanded with the century prefix ("20" by default).

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("09/12/2025")
        "2025-12-09"
        >>> normalizer.normalize("9.12.25")
        "2025-12-09"
    """

    SEPARATORS = re.compile(r'[\-/.]')

    def __init__(self) -> None:
        self.century_prefix = str(get_config("postprocessing.date.century_prefix", "20"))

    def normalize(self, date_str: Optional[str]) -> Optional[str]:
        """
        Normalize a D/M/Y token.

        Args:
            date_str: Date token as captured from the text.

        Returns:
            ISO date string, or None when the token does not split into
            exactly three non-empty parts.
        """
        if not date_str:
            return None

        parts = self.SEPARATORS.split(date_str.strip())
        if len(parts) != 3 or not all(parts):
            logger.debug(f"Could not normalize date token: {date_str!r}")
            return None

        day, month, year = parts
        if len(year) == 2:
            year = self.century_prefix + year

        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


class AmountNormalizer:
    """
    Converts amount and quantity text to Decimal values.

    Italian documents write amounts with a comma as decimal separator and
    dots as thousands separators ("1.234,56"); dot-decimal values ("8.50")
    are accepted too.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.to_decimal("€ 1.234,56")
        Decimal('1234.56')
        >>> normalizer.parse_quantity("1,5")
        Decimal('1.5')
    """

    CURRENCY_SYMBOLS = ['€', '$', '£']
    CURRENCY_CODES = ['EUR', 'EURO']

    def _clean_amount_string(self, amount_str: str) -> str:
        """Remove currency markers and keep only digits, separators and sign."""
        for symbol in self.CURRENCY_SYMBOLS:
            amount_str = amount_str.replace(symbol, '')

        for code in self.CURRENCY_CODES:
            amount_str = re.sub(rf'\b{code}\b', '', amount_str, flags=re.IGNORECASE)

        return re.sub(r'[^\d,.\-]', '', amount_str)

    def _to_plain_decimal(self, text: Optional[str]) -> Optional[Decimal]:
        if not text:
            return None

        cleaned = self._clean_amount_string(text)
        if not cleaned:
            return None

        # Comma is the decimal separator: dots are thousands separators
        if ',' in cleaned:
            cleaned = cleaned.replace('.', '').replace(',', '.')

        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            logger.debug(f"Could not parse number: {text!r}")
            return None

        if not value.is_finite():
            return None
        return value

    def to_decimal(self, amount_str: Optional[str]) -> Optional[Decimal]:
        """
        Parse a monetary amount, rounded to cents.

        Args:
            amount_str: Amount text, e.g. "8,50" or "€ 1.234,56".

        Returns:
            Decimal amount or None if the text is not a number or has too
            many digits to round to cents.
        """
        value = self._to_plain_decimal(amount_str)
        if value is None:
            return None

        try:
            return quantize_amount(value)
        except InvalidOperation:
            logger.debug(f"Amount out of range: {amount_str!r}")
            return None

    def parse_quantity(self, quantity_str: Optional[str]) -> Optional[Decimal]:
        """
        Parse a quantity without rounding.

        Args:
            quantity_str: Quantity text, e.g. "1", "2,5".

        Returns:
            Decimal quantity or None if the text is not a number.
        """
        return self._to_plain_decimal(quantity_str)


_default_unit_normalizer: Optional[UnitNormalizer] = None


def normalize_unit(unit: Optional[str]) -> str:
    """Normalize a unit of measure with a shared default UnitNormalizer."""
    global _default_unit_normalizer
    if _default_unit_normalizer is None:
        _default_unit_normalizer = UnitNormalizer()
    return _default_unit_normalizer.normalize(unit)
