"""
Ground Truth Loader Module.

This module handles loading hand-labelled delivery note data used to
evaluate extraction results.

Supported Formats:
    - JSON files: a list of records, {"records": [...]}, or an object
      keyed by source file name
    - CSV files: one record per row
"""

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ddt_parser.utils.logger import get_logger
from ddt_parser.utils.exceptions import EvaluationError, InputFileNotFoundError

# Initialize module logger
logger = get_logger(__name__)


class GroundTruthLoader:
    """
    Loads ground truth data from JSON or CSV files.

    Records are matched to parsed documents by their "source_file" (or
    "filename") key. A record with a "line_items" list and no
    "line_item_count" gets the count filled in.

    Attributes:
        data: Loaded ground truth records
        file_path: Path to ground truth file

    Example:
        >>> loader = GroundTruthLoader("ground_truth.json")
        >>> record = loader.get_by_filename("scan_001.txt")
        >>> record["document_number"]
        "12249"
    """

    # Fields every record is expected to carry
    REQUIRED_FIELDS = [
        'document_number',
        'document_date',
        'supplier_name'
    ]

    def __init__(self, file_path: Optional[Union[str, Path]] = None) -> None:
        """
        Initialize the ground truth loader.

        Args:
            file_path: Path to ground truth file. If None, creates empty loader.
        """
        self.file_path = Path(file_path) if file_path else None
        self.data: List[Dict[str, Any]] = []
        self._file_index: Dict[str, int] = {}

        if self.file_path:
            self.load(self.file_path)

    def load(self, file_path: Union[str, Path]) -> List[Dict[str, Any]]:
        """
        Load ground truth from file.

        Args:
            file_path: Path to ground truth file.

        Returns:
            List of ground truth records.

        Raises:
            InputFileNotFoundError: If the file doesn't exist.
            EvaluationError: If the format is not supported or malformed.
        """
        path = Path(file_path)

        if not path.exists():
            raise InputFileNotFoundError(str(path))

        extension = path.suffix.lower()

        if extension == '.json':
            records = self._load_json(path)
        elif extension == '.csv':
            records = self._load_csv(path)
        else:
            raise EvaluationError(
                f"Unsupported ground truth format: {extension}",
                {"file": str(path)}
            )

        self.data = [self._complete_record(record) for record in records]
        self._build_index()

        logger.info(f"Loaded {len(self.data)} ground truth records from {path.name}")
        return self.data

    def _load_json(self, path: Path) -> List[Dict[str, Any]]:
        """Load ground truth from JSON file."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise EvaluationError(f"Invalid ground truth JSON: {e}", {"file": str(path)})

        if isinstance(data, dict):
            if 'records' in data:
                data = data['records']
            else:
                # Keyed by source file name
                data = [
                    {**record, 'source_file': filename}
                    for filename, record in data.items()
                    if isinstance(record, dict)
                ]

        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise EvaluationError("Ground truth must be a list of objects", {"file": str(path)})

        return data

    def _load_csv(self, path: Path) -> List[Dict[str, Any]]:
        """Load ground truth from CSV file."""
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return [dict(row) for row in csv.DictReader(f)]

    @staticmethod
    def _complete_record(record: Dict[str, Any]) -> Dict[str, Any]:
        record = dict(record)
        if isinstance(record.get('line_items'), list) and 'line_item_count' not in record:
            record['line_item_count'] = len(record['line_items'])
        return record

    def _build_index(self) -> None:
        """Build an index for faster lookups by filename."""
        self._file_index = {}

        for idx, record in enumerate(self.data):
            filename = record.get('source_file') or record.get('filename')
            if filename:
                self._file_index[Path(filename).name] = idx
                self._file_index[filename] = idx

    def get_all(self) -> List[Dict[str, Any]]:
        """Get all ground truth records."""
        return self.data

    def get_by_filename(self, filename: str) -> Optional[Dict[str, Any]]:
        """
        Get ground truth record by source filename.

        Args:
            filename: Source file name (with or without path).

        Returns:
            Ground truth record or None.
        """
        if filename in self._file_index:
            return self.data[self._file_index[filename]]

        normalized = Path(filename).name
        if normalized in self._file_index:
            return self.data[self._file_index[normalized]]

        return None

    def validate(self) -> Dict[str, Any]:
        """
        Check the loaded records for missing required fields.

        Returns:
            Dictionary with validation results.
        """
        results = {
            'total_records': len(self.data),
            'valid_records': 0,
            'invalid_records': 0,
            'missing_fields': {}
        }

        for record in self.data:
            missing = [f for f in self.REQUIRED_FIELDS if not record.get(f)]
            for field in missing:
                results['missing_fields'][field] = results['missing_fields'].get(field, 0) + 1

            if missing:
                results['invalid_records'] += 1
            else:
                results['valid_records'] += 1

        logger.info(
            f"Ground truth validation: {results['valid_records']}/{results['total_records']} valid"
        )
        return results

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self):
        return iter(self.data)

    def __getitem__(self, index: int) -> Dict[str, Any]:
        return self.data[index]
