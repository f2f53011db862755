"""
Main Evaluator Module.

This module provides the Evaluator class that matches parsed delivery
notes to their ground truth records, computes metrics and writes reports.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from config import get_config
from ddt_parser.utils.logger import get_logger
from ddt_parser.utils.helpers import ensure_directory
from ddt_parser.utils.exceptions import EvaluationError
from ddt_parser.extraction.document import ParsedDocument
from .metrics import EvaluationResult, MetricsCalculator
from .ground_truth import GroundTruthLoader

# Initialize module logger
logger = get_logger(__name__)


class Evaluator:
    """
    Main evaluator for the DDT parser.

    Attributes:
        metrics_calculator: MetricsCalculator instance
        ground_truth: GroundTruthLoader instance, if loaded

    Example:
        >>> evaluator = Evaluator("ground_truth.json")
        >>> result = evaluator.evaluate(documents, source_files=["scan_001.txt"])
        >>> print(result.print_report())
    """

    def __init__(self, ground_truth_path: Optional[str] = None) -> None:
        """
        Initialize the evaluator.

        Args:
            ground_truth_path: Path to ground truth file.
        """
        self.metrics_calculator = MetricsCalculator(
            case_sensitive=get_config("evaluation.case_sensitive", False),
            partial_match_threshold=get_config("evaluation.partial_match_threshold", 0.8),
            amount_tolerance=get_config("evaluation.amount_tolerance", 0.01)
        )

        self.ground_truth: Optional[GroundTruthLoader] = None
        if ground_truth_path:
            self.load_ground_truth(ground_truth_path)

        logger.debug("Evaluator initialized")

    def load_ground_truth(self, path: str) -> None:
        """
        Load ground truth data from file.

        Args:
            path: Path to ground truth file.
        """
        self.ground_truth = GroundTruthLoader(path)
        validation = self.ground_truth.validate()

        if validation['invalid_records'] > 0:
            logger.warning(
                f"Ground truth has {validation['invalid_records']} incomplete records"
            )

    def _match_ground_truth(
        self,
        documents: Sequence[ParsedDocument],
        source_files: Optional[Sequence[str]],
        ground_truth: Optional[List[Dict[str, Any]]]
    ) -> List[Dict[str, Any]]:
        """Return one ground truth record per document."""
        if ground_truth is not None:
            return ground_truth

        if self.ground_truth is None:
            raise EvaluationError(
                "No ground truth available. Load ground truth or provide it as argument."
            )

        if source_files is None or len(source_files) != len(documents):
            raise EvaluationError(
                "Source file names are required to match documents to ground truth",
                {"documents": len(documents)}
            )

        matched = []
        for source_file in source_files:
            record = self.ground_truth.get_by_filename(source_file)
            if record is None:
                logger.warning(f"No ground truth for: {source_file}")
                record = {}
            matched.append(record)
        return matched

    def evaluate(
        self,
        documents: Sequence[ParsedDocument],
        source_files: Optional[Sequence[str]] = None,
        ground_truth: Optional[List[Dict[str, Any]]] = None
    ) -> EvaluationResult:
        """
        Evaluate parsed documents.

        Args:
            documents: Parsed documents to evaluate.
            source_files: Source file of each document, used to look up
                          the loaded ground truth.
            ground_truth: Explicit ground truth records, in document order.

        Returns:
            EvaluationResult with computed metrics.

        Raises:
            EvaluationError: If no ground truth can be matched.
        """
        records = self._match_ground_truth(documents, source_files, ground_truth)

        try:
            result = self.metrics_calculator.evaluate(list(documents), records)
        except ValueError as e:
            raise EvaluationError(str(e))

        logger.info(
            f"Evaluation complete: {result.overall_accuracy * 100:.1f}% accuracy "
            f"on {result.total_samples} samples"
        )
        return result

    def generate_report(
        self,
        evaluation_result: EvaluationResult,
        output_path: Optional[str] = None,
        format: str = 'txt'
    ) -> str:
        """
        Generate an evaluation report.

        Args:
            evaluation_result: Evaluation result to report.
            output_path: Path for report file. If None, returns string.
            format: Report format ('txt' or 'json').

        Returns:
            Report string or path to saved file.
        """
        if format == 'txt':
            report = evaluation_result.print_report()
        elif format == 'json':
            report = json.dumps(evaluation_result.to_dict(), indent=2)
        else:
            raise EvaluationError(f"Unsupported report format: {format}")

        if output_path:
            ensure_directory(Path(output_path).parent)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(report)
            logger.info(f"Report saved to: {output_path}")
            return output_path

        return report

    def save_detailed_results(
        self,
        documents: Sequence[ParsedDocument],
        output_path: str,
        source_files: Optional[Sequence[str]] = None,
        ground_truth: Optional[List[Dict[str, Any]]] = None
    ) -> str:
        """
        Save per-document comparisons to a JSON file.

        Returns:
            Path to saved file.
        """
        records = self._match_ground_truth(documents, source_files, ground_truth)

        detailed = []
        for idx, (document, record) in enumerate(zip(documents, records)):
            detailed.append({
                'sample_index': idx,
                'source_file': source_files[idx] if source_files else '',
                'comparison': self.metrics_calculator.evaluate_single(document, record)
            })

        ensure_directory(Path(output_path).parent)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(detailed, f, indent=2, default=str, ensure_ascii=False)

        logger.info(f"Detailed results saved to: {output_path}")
        return output_path
