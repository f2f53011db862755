"""
Metrics Calculator Module.

This module scores parsed delivery notes against hand-labelled ground
truth, field by field.

Comparison rules:
    - Text fields: case and whitespace insensitive, with a Levenshtein
      ratio for partial matches
    - Dates: compared as ISO dates (D/M/Y ground truth is normalized)
    - Tax IDs: digits only, so "IT 01234567890" matches "01234567890"
    - Totals: numerically, within a tolerance
    - Line items: by count
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from ddt_parser.utils.logger import get_logger
from ddt_parser.extraction.document import AMOUNT_FIELDS, HEADER_FIELDS, ParsedDocument
from ddt_parser.postprocessor.normalizers import AmountNormalizer, DateNormalizer

# Initialize module logger
logger = get_logger(__name__)

LINE_ITEM_COUNT = 'line_item_count'


@dataclass
class FieldMetrics:
    """
    Counters for one field across all evaluated documents.

    Rates are derived from the counters, so they are always consistent
    with them.
    """
    field_name: str
    total_samples: int = 0
    extracted_count: int = 0
    correct_count: int = 0
    partial_match_count: int = 0

    @property
    def missing_count(self) -> int:
        return self.total_samples - self.extracted_count

    @property
    def accuracy(self) -> float:
        return self._rate(self.correct_count)

    @property
    def partial_accuracy(self) -> float:
        return self._rate(self.partial_match_count)

    @property
    def extraction_rate(self) -> float:
        return self._rate(self.extracted_count)

    def _rate(self, count: int) -> float:
        return count / self.total_samples if self.total_samples else 0.0

    def record(self, comparison: Dict[str, Any]) -> None:
        """Add one document's comparison (as built by evaluate_single)."""
        self.total_samples += 1
        if comparison['extracted']:
            self.extracted_count += 1
        if comparison['exact_match']:
            self.correct_count += 1
        if comparison['exact_match'] or comparison['partial_match']:
            self.partial_match_count += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'accuracy': self.accuracy,
            'partial_accuracy': self.partial_accuracy,
            'extraction_rate': self.extraction_rate,
            'extracted_count': self.extracted_count,
            'correct_count': self.correct_count,
            'missing_count': self.missing_count,
        }


@dataclass
class EvaluationResult:
    """
    Complete evaluation results.

    Attributes:
        field_metrics: Field name -> FieldMetrics
        avg_confidence: Mean document confidence (0-100)
        total_samples: Number of documents evaluated
        timestamp: Evaluation timestamp
    """
    field_metrics: Dict[str, FieldMetrics] = field(default_factory=dict)
    avg_confidence: float = 0.0
    total_samples: int = 0
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    @property
    def overall_accuracy(self) -> float:
        """Mean exact match accuracy over fields."""
        return self._mean(m.accuracy for m in self.field_metrics.values())

    @property
    def overall_extraction_rate(self) -> float:
        """Mean extraction rate over fields."""
        return self._mean(m.extraction_rate for m in self.field_metrics.values())

    @staticmethod
    def _mean(values) -> float:
        values = list(values)
        return sum(values) / len(values) if values else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'timestamp': self.timestamp,
            'total_samples': self.total_samples,
            'overall_accuracy': self.overall_accuracy,
            'overall_extraction_rate': self.overall_extraction_rate,
            'avg_confidence': self.avg_confidence,
            'field_metrics': {
                name: metrics.to_dict() for name, metrics in self.field_metrics.items()
            }
        }

    def print_report(self) -> str:
        """Render the results as a fixed-width text table."""
        rule = "=" * 72
        lines = [
            rule,
            "DDT EXTRACTION EVALUATION REPORT",
            rule,
            f"Timestamp:        {self.timestamp}",
            f"Documents:        {self.total_samples}",
            f"Accuracy:         {self.overall_accuracy:.1%}",
            f"Extraction rate:  {self.overall_extraction_rate:.1%}",
            f"Avg confidence:   {self.avg_confidence:.1f}",
            "-" * 72,
            f"{'Field':<22}{'Exact':>10}{'Partial':>10}{'Found':>10}{'Found/Total':>20}",
        ]

        for name, m in self.field_metrics.items():
            lines.append(
                f"{name:<22}{m.accuracy:>10.1%}{m.partial_accuracy:>10.1%}"
                f"{m.extraction_rate:>10.1%}{f'{m.extracted_count}/{m.total_samples}':>20}"
            )

        lines.append(rule)
        return "\n".join(lines)


def prediction_values(document: ParsedDocument) -> Dict[str, Any]:
    """Flatten a parsed document into the values compared with ground truth."""
    values: Dict[str, Any] = dict(document.fields)
    for name in AMOUNT_FIELDS:
        values[name] = getattr(document, name)
    values[LINE_ITEM_COUNT] = len(document.line_items)
    return values


class MetricsCalculator:
    """
    Compares parsed documents with ground truth records.

    Ground truth fields that are absent or empty never count as matches,
    so partially labelled records lower accuracy but not extraction rate.

    Example:
        >>> calculator = MetricsCalculator()
        >>> result = calculator.evaluate(documents, ground_truth)
        >>> print(result.print_report())
    """

    DEFAULT_FIELDS = list(HEADER_FIELDS) + list(AMOUNT_FIELDS) + [LINE_ITEM_COUNT]

    ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

    def __init__(
        self,
        fields: Optional[List[str]] = None,
        case_sensitive: bool = False,
        partial_match_threshold: float = 0.8,
        amount_tolerance: float = 0.01
    ) -> None:
        """
        Initialize the metrics calculator.

        Args:
            fields: Field names to evaluate. Defaults to every header
                    field, the totals and the line item count.
            case_sensitive: Whether text comparisons are case-sensitive.
            partial_match_threshold: Similarity needed for a partial match.
            amount_tolerance: Largest difference counted as an exact amount.
        """
        self.fields = fields or self.DEFAULT_FIELDS
        self.case_sensitive = case_sensitive
        self.partial_match_threshold = partial_match_threshold
        self.amount_tolerance = Decimal(str(amount_tolerance))

        self.amount_normalizer = AmountNormalizer()
        self.date_normalizer = DateNormalizer()

    def evaluate(
        self,
        predictions: List[ParsedDocument],
        ground_truth: List[Dict[str, Any]]
    ) -> EvaluationResult:
        """
        Evaluate parsed documents against ground truth.

        Args:
            predictions: Parsed documents.
            ground_truth: Ground truth records, in the same order.

        Returns:
            EvaluationResult with per-field metrics.

        Raises:
            ValueError: If the two lists differ in length.
        """
        if len(predictions) != len(ground_truth):
            raise ValueError(
                f"Got {len(predictions)} documents but {len(ground_truth)} "
                f"ground truth records"
            )

        if not predictions:
            return EvaluationResult()

        field_metrics = {name: FieldMetrics(field_name=name) for name in self.fields}
        for document, record in zip(predictions, ground_truth):
            for name, comparison in self.evaluate_single(document, record).items():
                field_metrics[name].record(comparison)

        logger.debug(f"Compared {len(predictions)} documents on {len(self.fields)} fields")
        return EvaluationResult(
            field_metrics=field_metrics,
            avg_confidence=sum(d.confidence for d in predictions) / len(predictions),
            total_samples=len(predictions)
        )

    def evaluate_single(
        self,
        document: ParsedDocument,
        ground_truth: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Compare one document with its ground truth record.

        Returns:
            Field name -> {predicted, ground_truth, exact_match,
            partial_match, extracted}.
        """
        values = prediction_values(document)
        comparisons = {}

        for name in self.fields:
            predicted = values.get(name)
            expected = ground_truth.get(name)
            exact, partial = self._compare_values(predicted, expected, name)

            comparisons[name] = {
                'predicted': self._display(predicted),
                'ground_truth': self._display(expected),
                'exact_match': exact,
                'partial_match': partial,
                'extracted': not self._is_empty(predicted)
            }

        return comparisons

    @staticmethod
    def _is_empty(value: Any) -> bool:
        if value is None or value == '':
            return True
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return value == 0
        return False

    @staticmethod
    def _display(value: Any) -> Any:
        return float(value) if isinstance(value, Decimal) else value

    def _compare_values(self, predicted: Any, expected: Any, name: str) -> Tuple[bool, bool]:
        """
        Compare a predicted value with its ground truth.

        Returns:
            Tuple of (exact, partial).
        """
        if self._is_empty(expected) or self._is_empty(predicted):
            return False, False

        if name in AMOUNT_FIELDS:
            return self._compare_amounts(predicted, expected)

        if name == LINE_ITEM_COUNT:
            try:
                same = int(predicted) == int(expected)
            except (TypeError, ValueError):
                same = False
            return same, same

        left = self._normalize_value(predicted, name)
        right = self._normalize_value(expected, name)
        if left == right:
            return True, True

        return False, levenshtein_ratio(left, right) >= self.partial_match_threshold

    def _compare_amounts(self, predicted: Any, expected: Any) -> Tuple[bool, bool]:
        left = self.amount_normalizer.to_decimal(str(predicted))
        right = self.amount_normalizer.to_decimal(str(expected))
        if left is None or right is None:
            return False, False

        same = abs(left - right) <= self.amount_tolerance
        return same, same

    def _normalize_value(self, value: Any, name: str) -> str:
        text = ' '.join(str(value).split())
        if not self.case_sensitive:
            text = text.lower()

        if name.endswith('_date') and not self.ISO_DATE.match(text):
            text = self.date_normalizer.normalize(text) or text
        elif name.endswith('_tax_id'):
            text = re.sub(r'\D', '', text)

        return text


def levenshtein_ratio(first: str, second: str) -> float:
    """
    Similarity of two strings: 1 - edit distance / length of the longer one.

    Example:
        >>> levenshtein_ratio("frutta", "fruta")
        0.8333333333333334
    """
    if first == second:
        return 1.0
    if not first or not second:
        return 0.0

    previous = list(range(len(second) + 1))
    for i, left in enumerate(first, start=1):
        current = [i]
        for j, right in enumerate(second, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (left != right)
            ))
        previous = current

    return 1.0 - previous[-1] / max(len(first), len(second))
