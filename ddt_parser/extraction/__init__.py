"""
Extraction Module for the DDT Parser.

This module turns raw OCR text of a delivery note into a structured,
immutable ParsedDocument using ordered regular-expression rules.

Features:
    - Region-scoped header field extraction
    - Line-item table detection and row parsing
    - Document totals extraction
    - Structural confidence score, blended with OCR confidence
"""

from .document import LineItem, ParsedDocument
from .fields import DocumentRegions, FieldExtractor
from .line_items import LineItemExtractor, find_table_bounds, prefix_short_numeric_code
from .totals import DocumentTotals, TotalsExtractor
from .confidence import ConfidenceScorer
from .extractor import DDTExtractor, parse_ddt_text

__all__ = [
    'LineItem',
    'ParsedDocument',
    'DocumentRegions',
    'FieldExtractor',
    'LineItemExtractor',
    'find_table_bounds',
    'prefix_short_numeric_code',
    'DocumentTotals',
    'TotalsExtractor',
    'ConfidenceScorer',
    'DDTExtractor',
    'parse_ddt_text'
]
