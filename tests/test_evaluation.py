"""
Unit tests for the evaluation module.

Tests cover:
- Field comparison (exact, partial, dates, tax IDs, amounts, line item count)
- Ground truth loading from JSON and CSV
- Evaluator matching, reports and detailed results
"""

import json
from pathlib import Path

import pytest

from ddt_parser.evaluation import EvaluationResult, Evaluator, GroundTruthLoader, MetricsCalculator
from ddt_parser.extraction.document import ParsedDocument
from ddt_parser.utils.exceptions import EvaluationError, InputFileNotFoundError


@pytest.fixture
def ground_truth_record() -> dict:
    """Hand-labelled record for the sample delivery note."""
    return {
        'document_number': "12249",
        'document_date': "09/12/2025",
        'supplier_name': "QUELLI CHE LA FRUTA SRL",
        'supplier_tax_id': "IT 01234567890",
        'subtotal': "25,05",
        'line_items': [{}, {}, {}],
    }


@pytest.fixture
def ground_truth_file(tmp_path: Path, ground_truth_record: dict) -> Path:
    """Ground truth JSON keyed by source file name."""
    path = tmp_path / "ground_truth.json"
    path.write_text(json.dumps({"scan_001.txt": ground_truth_record}), encoding="utf-8")
    return path


class TestMetricsCalculator:
    """Tests for MetricsCalculator."""

    def test_single_comparison(self, sample_document: ParsedDocument, ground_truth_record: dict) -> None:
        """Test per-field comparison of one document."""
        record = dict(ground_truth_record, line_item_count=3)
        comparison = MetricsCalculator().evaluate_single(sample_document, record)

        assert comparison['document_number']['exact_match'] is True
        assert comparison['document_date']['exact_match'] is True
        assert comparison['supplier_tax_id']['exact_match'] is True
        assert comparison['subtotal']['exact_match'] is True
        assert comparison['line_item_count']['exact_match'] is True
        assert comparison['supplier_name']['exact_match'] is False
        assert comparison['supplier_name']['partial_match'] is True
        assert comparison['grand_total']['exact_match'] is False
        assert comparison['grand_total']['extracted'] is True

    def test_evaluate(self, sample_document: ParsedDocument, ground_truth_record: dict) -> None:
        """Test aggregated metrics."""
        result = MetricsCalculator().evaluate([sample_document], [ground_truth_record])

        assert result.total_samples == 1
        assert result.avg_confidence == 100
        assert result.field_metrics['document_number'].accuracy == 1.0
        assert result.field_metrics['supplier_name'].accuracy == 0.0
        assert result.field_metrics['supplier_name'].partial_accuracy == 1.0
        assert 0 < result.overall_accuracy < 1

    def test_missing_prediction(self, ground_truth_record: dict) -> None:
        """Test that empty predictions count as missing."""
        result = MetricsCalculator().evaluate([ParsedDocument()], [ground_truth_record])

        assert result.field_metrics['document_number'].missing_count == 1
        assert result.field_metrics['subtotal'].extraction_rate == 0.0

    def test_length_mismatch(self, sample_document: ParsedDocument) -> None:
        """Test that predictions and ground truth must pair up."""
        with pytest.raises(ValueError):
            MetricsCalculator().evaluate([sample_document], [])

    def test_empty_input(self) -> None:
        """Test evaluation of no documents."""
        assert MetricsCalculator().evaluate([], []).total_samples == 0


class TestGroundTruthLoader:
    """Tests for GroundTruthLoader."""

    def test_json_keyed_by_file(self, ground_truth_file: Path) -> None:
        """Test loading a JSON object keyed by file name."""
        loader = GroundTruthLoader(ground_truth_file)
        record = loader.get_by_filename("scans/scan_001.txt")

        assert len(loader) == 1
        assert record['document_number'] == "12249"
        assert record['line_item_count'] == 3
        assert loader.get_by_filename("other.txt") is None

    def test_json_records(self, tmp_path: Path) -> None:
        """Test loading a {"records": [...]} document."""
        path = tmp_path / "gt.json"
        path.write_text(json.dumps({"records": [{"filename": "a.txt", "document_number": "1"}]}))

        loader = GroundTruthLoader(path)

        assert loader.get_by_filename("a.txt")['document_number'] == "1"
        assert loader.validate()['invalid_records'] == 1

    def test_csv(self, tmp_path: Path) -> None:
        """Test loading a CSV file."""
        path = tmp_path / "gt.csv"
        path.write_text(
            "source_file,document_number,document_date,supplier_name\n"
            "scan_001.txt,12249,09/12/2025,ACME SRL\n",
            encoding="utf-8"
        )

        loader = GroundTruthLoader(path)

        assert loader[0]['supplier_name'] == "ACME SRL"
        assert loader.validate()['valid_records'] == 1

    @pytest.mark.parametrize("name, content", [
        ("gt.xlsx", "x"),
        ("gt.json", "{broken"),
        ("gt.json", "[1, 2]"),
    ])
    def test_rejected(self, tmp_path: Path, name: str, content: str) -> None:
        """Test unsupported formats and malformed JSON."""
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")

        with pytest.raises(EvaluationError):
            GroundTruthLoader(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file raises InputFileNotFoundError."""
        with pytest.raises(InputFileNotFoundError):
            GroundTruthLoader(tmp_path / "missing.json")


class TestEvaluator:
    """Tests for Evaluator."""

    def test_match_by_source_file(self, sample_document: ParsedDocument, ground_truth_file: Path) -> None:
        """Test that documents are matched to ground truth by file name."""
        result = Evaluator(str(ground_truth_file)).evaluate(
            [sample_document], source_files=["scan_001.txt"]
        )

        assert isinstance(result, EvaluationResult)
        assert result.field_metrics['document_number'].correct_count == 1

    def test_without_ground_truth(self, sample_document: ParsedDocument) -> None:
        """Test that evaluation needs ground truth."""
        with pytest.raises(EvaluationError):
            Evaluator().evaluate([sample_document])

    def test_without_source_files(self, sample_document: ParsedDocument, ground_truth_file: Path) -> None:
        """Test that loaded ground truth needs source file names."""
        with pytest.raises(EvaluationError):
            Evaluator(str(ground_truth_file)).evaluate([sample_document])

    def test_reports(self, sample_document: ParsedDocument, ground_truth_record: dict, tmp_path: Path) -> None:
        """Test text and JSON reports."""
        evaluator = Evaluator()
        result = evaluator.evaluate([sample_document], ground_truth=[ground_truth_record])

        assert "DDT EXTRACTION EVALUATION REPORT" in evaluator.generate_report(result)
        assert json.loads(evaluator.generate_report(result, format='json'))['total_samples'] == 1

        output = tmp_path / "reports" / "report.txt"
        assert evaluator.generate_report(result, str(output)) == str(output)
        assert output.exists()

        with pytest.raises(EvaluationError):
            evaluator.generate_report(result, format='html')

    def test_detailed_results(self, sample_document: ParsedDocument, ground_truth_file: Path, tmp_path: Path) -> None:
        """Test saving per-document comparisons."""
        output = tmp_path / "detailed.json"
        Evaluator(str(ground_truth_file)).save_detailed_results(
            [sample_document], str(output), source_files=["scan_001.txt"]
        )

        detailed = json.loads(output.read_text(encoding="utf-8"))
        assert detailed[0]['source_file'] == "scan_001.txt"
        assert detailed[0]['comparison']['document_number']['exact_match'] is True
