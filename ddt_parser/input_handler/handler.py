"""
Main Input Handler Module.

This module provides the InputHandler class that loads OCR output saved
to disk so it can be fed to the extractor.

Supported formats:
    - .txt: plain recognized text (no optical confidence)
    - .json: {"text": ..., "confidence": ...}, optionally wrapped in
      {"data": {...}}

Usage:
    from ddt_parser.input_handler import InputHandler

    handler = InputHandler()
    result = handler.load("scan_001.json")

    # Process batch
    results = handler.load_batch("./scans/")
"""

import json
from pathlib import Path
from typing import List, Union

from config import get_config
from ddt_parser.utils.logger import get_logger
from ddt_parser.utils.helpers import get_file_extension, validate_file_exists
from ddt_parser.utils.exceptions import (
    CorruptedFileError,
    InputError,
    InputFileNotFoundError,
    UnsupportedFileTypeError,
)
from .ocr_result import OCRResult

# Initialize module logger
logger = get_logger(__name__)


class InputHandler:
    """
    Loads OCR results from text and JSON files.

    Attributes:
        supported_extensions: Set of accepted file extensions
        encoding: Text encoding of input files

    Example:
        >>> handler = InputHandler()
        >>> result = handler.load("scan_001.txt")
        >>> print(result.line_count)

        >>> # Batch processing
        >>> for result in handler.load_batch("./scans/"):
        ...     document = parse_ddt_text(result.text, result.confidence)
    """

    TEXT_EXTENSIONS = {'.txt'}
    JSON_EXTENSIONS = {'.json'}

    def __init__(self) -> None:
        """Initialize the InputHandler from configuration."""
        self.supported_extensions = {
            ext.lower() for ext in get_config(
                "input.supported_extensions",
                sorted(self.TEXT_EXTENSIONS | self.JSON_EXTENSIONS)
            )
        }
        self.encoding = get_config("input.encoding", "utf-8")

        logger.debug(f"InputHandler initialized with extensions: {self.supported_extensions}")

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Validate that a file exists and has a supported extension.

        Raises:
            InputFileNotFoundError: If the file doesn't exist.
            UnsupportedFileTypeError: If the file type is not supported.
        """
        path = Path(filepath)

        if not validate_file_exists(path):
            raise InputFileNotFoundError(str(filepath))

        extension = get_file_extension(path)
        known = self.TEXT_EXTENSIONS | self.JSON_EXTENSIONS
        if extension not in self.supported_extensions or extension not in known:
            raise UnsupportedFileTypeError(extension, sorted(self.supported_extensions))

        return path

    def load(self, filepath: Union[str, Path]) -> OCRResult:
        """
        Load one OCR result.

        Args:
            filepath: Path to a .txt or .json file.

        Returns:
            OCRResult with source_file set to the file name.

        Raises:
            InputFileNotFoundError: If the file doesn't exist.
            UnsupportedFileTypeError: If the file type is not supported.
            CorruptedFileError: If the file cannot be decoded.
        """
        path = self.validate_file(filepath)
        logger.info(f"Loading file: {path}")

        try:
            content = path.read_text(encoding=self.encoding)
        except UnicodeDecodeError as e:
            raise CorruptedFileError(str(path), f"Not {self.encoding} text: {e}")

        if get_file_extension(path) in self.TEXT_EXTENSIONS:
            return OCRResult(text=content, source_file=path.name)

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            raise CorruptedFileError(str(path), f"Invalid JSON: {e}")

        if not isinstance(payload, dict):
            raise CorruptedFileError(str(path), "JSON root must be an object")

        try:
            return OCRResult.from_dict(payload, source_file=path.name)
        except ValueError as e:
            raise CorruptedFileError(str(path), str(e))

    def load_batch(self, directory: Union[str, Path]) -> List[OCRResult]:
        """
        Load every supported file in a directory, sorted by name.

        Corrupted files are logged and skipped.

        Raises:
            InputFileNotFoundError: If the directory doesn't exist.
            InputError: If the path is not a directory.
        """
        directory = Path(directory)

        if not directory.exists():
            raise InputFileNotFoundError(str(directory))

        if not directory.is_dir():
            raise InputError(f"Path is not a directory: {directory}")

        files = sorted(
            path for path in directory.iterdir()
            if path.is_file() and get_file_extension(path) in self.supported_extensions
        )
        logger.info(f"Found {len(files)} files to process in {directory}")

        results = []
        for filepath in files:
            try:
                results.append(self.load(filepath))
            except CorruptedFileError as e:
                logger.error(f"Skipping {filepath.name}: {e}")

        logger.info(f"Loaded {len(results)}/{len(files)} files")
        return results
