"""
DDT Extractor Module.

This module provides the DDTExtractor class, the extraction engine that
turns the raw OCR text of a delivery note (DDT) into a ParsedDocument.

Approach:
    Ordered regular-expression rules per field, first match wins. The
    field, line-item and totals extractors run independently over the
    same text; the recovered structure is then scored and, when the OCR
    engine reported one, blended with its optical confidence.

The engine is stateless: extract() never raises for malformed text, has
no side effects besides logging, and returns the same record for the
same input.
"""

import time
from dataclasses import replace
from typing import Optional

from ddt_parser.utils.logger import get_logger
from ddt_parser.postprocessor.validators import DocumentValidator
from .confidence import ConfidenceScorer, Number
from .document import ParsedDocument
from .fields import FieldExtractor
from .line_items import CodeNormalizer, LineItemExtractor
from .totals import TotalsExtractor

# Initialize module logger
logger = get_logger(__name__)


class DDTExtractor:
    """
    Rule-based delivery note extractor.

    Attributes:
        field_extractor: Header field extraction
        line_item_extractor: Product table extraction
        totals_extractor: Document totals extraction
        scorer: Confidence scoring and blending
        validator: Consistency checks reported as warnings

    Example:
        >>> extractor = DDTExtractor()
        >>> document = extractor.extract(ocr_text, optical_confidence=88)
        >>> print(document.document_number)
        >>> print(document.confidence)
    """

    def __init__(self, code_normalizer: Optional[CodeNormalizer] = None) -> None:
        """
        Initialize the extractor.

        Args:
            code_normalizer: Product code post-processing for line items.
                            If None, uses the configured default.
        """
        self.field_extractor = FieldExtractor()
        self.line_item_extractor = LineItemExtractor(code_normalizer=code_normalizer)
        self.totals_extractor = TotalsExtractor()
        self.scorer = ConfidenceScorer()
        self.validator = DocumentValidator()

        logger.debug("DDTExtractor initialized")

    def extract(
        self,
        raw_text: Optional[str],
        optical_confidence: Optional[Number] = None
    ) -> ParsedDocument:
        """
        Extract a structured record from OCR text.

        Args:
            raw_text: Text returned by the OCR engine. None is treated as
                     empty text.
            optical_confidence: The OCR engine's mean confidence (0-100),
                               if it reported one.

        Returns:
            ParsedDocument with empty strings and zero totals for
            everything that was not found.

        Example:
            >>> document = extractor.extract("Doc. di trasporto n. 12249 del 09/12/2025")
            >>> document.document_number, document.document_date
            ("12249", "2025-12-09")
        """
        start_time = time.time()
        raw_text = raw_text or ""
        text = raw_text.replace('\r\n', '\n').replace('\r', '\n')

        fields = self.field_extractor.extract(text)
        line_items = self.line_item_extractor.extract(text)
        totals = self.totals_extractor.extract(text)

        document = ParsedDocument(
            line_items=line_items,
            raw_text=raw_text,
            **fields,
            **totals.to_dict()
        )

        internal_score = self.scorer.score(document)
        confidence = self.scorer.blend(internal_score, optical_confidence)
        validation = self.validator.validate(document)

        document = replace(
            document,
            confidence=confidence,
            warnings=tuple(validation.warnings)
        )

        logger.info(
            f"Extraction complete: {len(fields) - len(document.missing_fields)}/"
            f"{len(fields)} fields, {len(line_items)} line items, "
            f"confidence: {confidence} (internal {internal_score}), "
            f"time: {time.time() - start_time:.3f}s"
        )
        for warning in document.warnings:
            logger.debug(f"Validation warning: {warning}")

        return document


_default_extractor: Optional[DDTExtractor] = None


def parse_ddt_text(
    raw_text: Optional[str],
    optical_confidence: Optional[Number] = None
) -> ParsedDocument:
    """
    Parse delivery note text with a shared default DDTExtractor.

    Args:
        raw_text: OCR text.
        optical_confidence: Optional OCR mean confidence (0-100).

    Returns:
        ParsedDocument.
    """
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = DDTExtractor()
    return _default_extractor.extract(raw_text, optical_confidence)
