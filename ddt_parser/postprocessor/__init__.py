"""
Post-Processing Module for the DDT Parser.

This module provides functionality for:
    - Unit, date and amount normalization
    - Document consistency validation
    - Manual corrections of parsed documents
"""

from .normalizers import (
    AmountNormalizer,
    DateNormalizer,
    UnitNormalizer,
    collapse_whitespace,
    normalize_unit,
)
from .validators import DateValidator, DocumentValidator, TaxIdValidator, ValidationResult
from .corrections import add_line_item, remove_line_item, update_field, update_line_item

__all__ = [
    'AmountNormalizer',
    'DateNormalizer',
    'UnitNormalizer',
    'collapse_whitespace',
    'normalize_unit',
    'DateValidator',
    'DocumentValidator',
    'TaxIdValidator',
    'ValidationResult',
    'add_line_item',
    'remove_line_item',
    'update_field',
    'update_line_item'
]
