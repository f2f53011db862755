"""
DDT Parser.

Turns the OCR text of a photographed Italian delivery note (DDT) into a
structured, immutable record: document number and date, supplier and
recipient, delivery destination, line items, totals and a reliability
score.

Usage:
    from ddt_parser import parse_ddt_text

    document = parse_ddt_text(ocr_text, optical_confidence=88)
    print(document.to_json())
"""

from .extraction import DDTExtractor, LineItem, ParsedDocument, parse_ddt_text

__version__ = "1.0.0"

__all__ = ['DDTExtractor', 'LineItem', 'ParsedDocument', 'parse_ddt_text', '__version__']
