"""
Confidence Scorer Module.

Computes a 0-100 reliability score for an extraction from the fields
that were recovered, plus a bonus when the line items add up to the
extracted subtotal. When the OCR engine reports its own character
confidence, the two signals are blended.

The point table and the blend weights are heuristic constants; they are
kept here as named values and can be retuned from the confidence.*
configuration keys.
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Union

from config import get_config
from ddt_parser.utils.helpers import round_half_up
from ddt_parser.utils.logger import get_logger
from .document import AMOUNT_FIELDS, ParsedDocument

# Initialize module logger
logger = get_logger(__name__)

# Points per recovered field
DOCUMENT_NUMBER_POINTS = 18
DOCUMENT_DATE_POINTS = 12
SUPPLIER_NAME_POINTS = 15
RECIPIENT_NAME_POINTS = 10
DESTINATION_POINTS = 10
LINE_ITEMS_POINTS = 20
GRAND_TOTAL_POINTS = 10

DEFAULT_WEIGHTS = {
    'document_number': DOCUMENT_NUMBER_POINTS,
    'document_date': DOCUMENT_DATE_POINTS,
    'supplier_name': SUPPLIER_NAME_POINTS,
    'recipient_name': RECIPIENT_NAME_POINTS,
    'destination_name': DESTINATION_POINTS,
    'line_items': LINE_ITEMS_POINTS,
    'grand_total': GRAND_TOTAL_POINTS,
}

# Sum of line totals against the subtotal
EXACT_CONSISTENCY_TOLERANCE = Decimal("0.5")
EXACT_CONSISTENCY_BONUS = 5
NEAR_CONSISTENCY_TOLERANCE = Decimal("2.0")
NEAR_CONSISTENCY_BONUS = 3

MAX_SCORE = 100

# Blend with the OCR engine's own confidence
INTERNAL_WEIGHT = Decimal("0.7")
OPTICAL_WEIGHT = Decimal("0.3")

Number = Union[int, float, Decimal]


def _as_decimal(value: Number) -> Decimal:
    return Decimal(str(value))


class ConfidenceScorer:
    """
    Scores how much recognizable structure an extraction recovered.

    Attributes:
        weights: Field name -> points awarded when the field is present
        max_score: Upper bound of the score

    Example:
        >>> scorer = ConfidenceScorer()
        >>> internal = scorer.score(document)
        >>> scorer.blend(internal, optical_confidence=88)
    """

    def __init__(self) -> None:
        """Initialize the scorer from configuration."""
        self.weights: Dict[str, int] = dict(DEFAULT_WEIGHTS)
        self.weights.update(get_config("confidence.weights", {}))

        self.exact_tolerance = _as_decimal(get_config(
            "confidence.consistency.exact_tolerance", EXACT_CONSISTENCY_TOLERANCE
        ))
        self.exact_bonus = int(get_config(
            "confidence.consistency.exact_bonus", EXACT_CONSISTENCY_BONUS
        ))
        self.near_tolerance = _as_decimal(get_config(
            "confidence.consistency.near_tolerance", NEAR_CONSISTENCY_TOLERANCE
        ))
        self.near_bonus = int(get_config(
            "confidence.consistency.near_bonus", NEAR_CONSISTENCY_BONUS
        ))
        self.max_score = int(get_config("confidence.max_score", MAX_SCORE))
        self.internal_weight = _as_decimal(get_config(
            "confidence.blend.internal_weight", INTERNAL_WEIGHT
        ))
        self.optical_weight = _as_decimal(get_config(
            "confidence.blend.optical_weight", OPTICAL_WEIGHT
        ))

    def score(self, document: ParsedDocument) -> int:
        """
        Compute the internal structural score of a document.

        Args:
            document: Extraction result (its confidence is ignored).

        Returns:
            Integer score in [0, max_score].
        """
        score = 0
        for name, points in self.weights.items():
            if self._is_present(document, name):
                score += int(points)

        score += self.consistency_bonus(document)
        return max(0, min(score, self.max_score))

    def consistency_bonus(self, document: ParsedDocument) -> int:
        """
        Bonus for line items that add up to the extracted subtotal.

        Awarded only when there are line items and a positive subtotal.
        """
        if not document.line_items or document.subtotal <= 0:
            return 0

        difference = abs(document.line_items_total - document.subtotal)
        if difference < self.exact_tolerance:
            return self.exact_bonus
        if difference < self.near_tolerance:
            return self.near_bonus
        return 0

    def blend(self, internal_score: int, optical_confidence: Optional[Number] = None) -> int:
        """
        Blend the internal score with the OCR engine's confidence.

        Args:
            internal_score: Score from score().
            optical_confidence: OCR mean confidence in [0, 100]; values
                               outside the range are clamped.

        Returns:
            round(internal * 0.7 + optical * 0.3), rounding halves up, or
            the internal score when no optical confidence is given.
        """
        if optical_confidence is None:
            return internal_score

        try:
            optical = _as_decimal(optical_confidence)
        except InvalidOperation:
            optical = None

        if optical is None or not optical.is_finite():
            logger.warning(f"Ignoring invalid optical confidence: {optical_confidence!r}")
            return internal_score

        optical = min(max(optical, Decimal(0)), Decimal(100))
        blended = _as_decimal(internal_score) * self.internal_weight + optical * self.optical_weight
        return max(0, min(round_half_up(blended), self.max_score))

    @staticmethod
    def _is_present(document: ParsedDocument, name: str) -> bool:
        if name == 'line_items':
            return len(document.line_items) > 0
        if name in AMOUNT_FIELDS:
            return getattr(document, name) > 0
        return bool(getattr(document, name, ""))
