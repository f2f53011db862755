"""
Evaluation Module for the DDT Parser.

This module measures extraction quality against labelled data:
    - Field-level accuracy and partial matches
    - Missing field rates
    - Totals and line item count accuracy
    - Text and JSON reports
"""

from .evaluator import Evaluator
from .metrics import EvaluationResult, MetricsCalculator
from .ground_truth import GroundTruthLoader

__all__ = ['Evaluator', 'EvaluationResult', 'MetricsCalculator', 'GroundTruthLoader']
