"""
Data Validators Module.

This module provides consistency checks for parsed delivery notes:
    - Required fields presence
    - Tax ID format
    - Calendar validity of dates
    - Totals coherence

Validation never changes a document; findings are reported as warnings
and the caller decides what to do with them.
"""

import re
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from dateutil import parser as date_parser

from config import get_config
from ddt_parser.utils.logger import get_logger
from ddt_parser.extraction.document import ParsedDocument

# Initialize module logger
logger = get_logger(__name__)


class ValidationResult:
    """
    Contains the result of validation checks.

    Attributes:
        warnings: List of warning messages
        field_results: Per-field validation results
    """

    def __init__(self) -> None:
        self.warnings: List[str] = []
        self.field_results: Dict[str, Tuple[bool, str]] = {}

    @property
    def is_valid(self) -> bool:
        """True when no check produced a warning."""
        return not self.warnings

    def add_warning(self, message: str) -> None:
        """Add a warning."""
        self.warnings.append(message)

    def add_field_result(self, field: str, is_valid: bool, message: str) -> None:
        """Add a field-level validation result; failures become warnings."""
        self.field_results[field] = (is_valid, message)
        if not is_valid:
            self.add_warning(f"{field}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'is_valid': self.is_valid,
            'warnings': self.warnings,
            'field_results': self.field_results
        }


class DateValidator:
    """
    Validates ISO dates produced by the date normalizer.

    A D/M/Y token such as "31/02/2025" normalizes to "2025-02-31", which is
    well formed but not a calendar date; this validator catches it.

    Example:
        >>> validator = DateValidator()
        >>> validator.validate("2025-12-09")
        (True, "Valid date")
        >>> validator.validate("2025-02-31")[0]
        False
    """

    ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

    MIN_YEAR = 2000
    MAX_YEAR = 2100

    def validate(self, date_str: str) -> Tuple[bool, str]:
        """
        Validate an ISO date string.

        Args:
            date_str: Date in YYYY-MM-DD format.

        Returns:
            Tuple of (is_valid, message).
        """
        if not date_str:
            return False, "Date is empty"

        if not self.ISO_DATE.match(date_str):
            return False, f"Invalid date format: {date_str}"

        try:
            parsed = date_parser.isoparse(date_str)
        except ValueError as e:
            return False, f"Not a calendar date: {date_str} ({e})"

        if not self.MIN_YEAR <= parsed.year <= self.MAX_YEAR:
            return False, f"Year {parsed.year} out of range"

        return True, "Valid date"


class TaxIdValidator:
    """
    Validates Italian tax IDs (P.IVA): a fixed number of digits.

    Example:
        >>> TaxIdValidator().validate("01234567890")
        (True, "Valid tax ID")
    """

    def __init__(self) -> None:
        self.length = int(get_config("postprocessing.validation.tax_id_length", 11))

    def validate(self, value: str) -> Tuple[bool, str]:
        if not value:
            return False, "Tax ID is empty"

        if not value.isdigit() or len(value) != self.length:
            return False, f"Tax ID must be {self.length} digits, got {value!r}"

        return True, "Valid tax ID"


class DocumentValidator:
    """
    Runs every consistency check over a ParsedDocument.

    Example:
        >>> validator = DocumentValidator()
        >>> result = validator.validate(document)
        >>> print(result.is_valid)
        >>> print(result.warnings)
    """

    TAX_ID_FIELDS = ('supplier_tax_id', 'recipient_tax_id')

    def __init__(self) -> None:
        """Initialize the document validator."""
        self.required_fields = get_config(
            "postprocessing.validation.required_fields",
            ["document_number", "supplier_name"]
        )
        self.totals_tolerance = Decimal(str(get_config(
            "postprocessing.validation.totals_tolerance",
            0.5
        )))

        self.date_validator = DateValidator()
        self.tax_id_validator = TaxIdValidator()

        logger.debug(f"DocumentValidator initialized (required: {self.required_fields})")

    def validate(self, document: ParsedDocument) -> ValidationResult:
        """
        Validate a parsed document.

        Args:
            document: Document to check.

        Returns:
            ValidationResult listing every finding.
        """
        result = ValidationResult()

        self._check_required_fields(document, result)

        # Optional fields are checked only when present
        for field in self.TAX_ID_FIELDS:
            value = getattr(document, field)
            if value:
                result.add_field_result(field, *self.tax_id_validator.validate(value))

        if document.document_date:
            result.add_field_result(
                'document_date',
                *self.date_validator.validate(document.document_date)
            )

        self._check_totals(document, result)

        return result

    def _check_required_fields(self, document: ParsedDocument, result: ValidationResult) -> None:
        for field in self.required_fields:
            value = getattr(document, field, None)
            if not value:
                result.add_warning(f"Missing required field: {field}")

    def _check_totals(self, document: ParsedDocument, result: ValidationResult) -> None:
        """Check grand total against subtotal and line totals against subtotal."""
        if document.subtotal > 0 and 0 < document.grand_total < document.subtotal:
            result.add_warning(
                f"Grand total ({document.grand_total}) is lower than "
                f"subtotal ({document.subtotal})"
            )

        if document.line_items and document.subtotal > 0:
            line_total = document.line_items_total
            if abs(line_total - document.subtotal) >= self.totals_tolerance:
                result.add_warning(
                    f"Line totals ({line_total}) do not match "
                    f"subtotal ({document.subtotal})"
                )
