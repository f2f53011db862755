"""
Unit tests for utilities.

Tests cover:
- Decimal rounding helpers
- Logger namespacing
- Exception messages
"""

from decimal import Decimal

import pytest

from ddt_parser.utils.exceptions import DDTParserError, UnsupportedFileTypeError
from ddt_parser.utils.helpers import ensure_directory, get_file_extension, quantize_amount, round_half_up
from ddt_parser.utils.logger import get_logger


@pytest.mark.parametrize("value, expected", [
    (Decimal("2.345"), Decimal("2.35")),
    (Decimal("2.344"), Decimal("2.34")),
    (3, Decimal("3.00")),
    ("8.5", Decimal("8.50")),
])
def test_quantize_amount(value, expected: Decimal) -> None:
    """Test rounding to cents, half-up."""
    assert quantize_amount(value) == expected


@pytest.mark.parametrize("value, expected", [
    (72.5, 73),
    (Decimal("76.8"), 77),
    (52.4, 52),
    (0, 0),
])
def test_round_half_up(value, expected: int) -> None:
    """Test that halves round up instead of to even."""
    assert round_half_up(value) == expected


def test_get_logger_namespace() -> None:
    """Test that loggers live under the parser namespace."""
    assert get_logger("main").name == "ddt_parser.main"
    assert get_logger("ddt_parser.extraction").name == "ddt_parser.extraction"


def test_file_helpers(tmp_path) -> None:
    """Test directory creation and extension lookup."""
    directory = ensure_directory(tmp_path / "a" / "b")

    assert directory.is_dir()
    assert get_file_extension("scan.JSON") == ".json"


def test_exception_messages() -> None:
    """Test exception string forms."""
    error = UnsupportedFileTypeError(".jpg", [".json", ".txt"])

    assert isinstance(error, DDTParserError)
    assert str(error).startswith("Unsupported file type: '.jpg' | Details:")
    assert str(DDTParserError("plain")) == "plain"
