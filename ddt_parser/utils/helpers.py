"""
Helper Utilities Module.

Generic helpers shared by the parser modules.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - validate_file_exists: Check for a regular file
    - quantize_amount: Round a decimal to cents, half-up
    - round_half_up: Round a number to the nearest integer, half-up
"""

from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Union

CENT = Decimal("0.01")


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it and its parents if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("outputs/reports")
        PosixPath('outputs/reports')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the lowercase file extension, including the dot.

    Example:
        >>> get_file_extension("scan_001.TXT")
        ".txt"
        >>> get_file_extension("noextension")
        ""
    """
    return Path(filepath).suffix.lower()


def validate_file_exists(filepath: Union[str, Path]) -> bool:
    """Check if a path exists and is a regular file."""
    path = Path(filepath)
    return path.exists() and path.is_file()


def quantize_amount(value: Union[Decimal, int, str]) -> Decimal:
    """
    Round a monetary value to two decimal places, half-up.

    Example:
        >>> quantize_amount(Decimal("2.345"))
        Decimal('2.35')
    """
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_half_up(value: Union[Decimal, float, int]) -> int:
    """
    Round to the nearest integer with halves going up.

    The builtin round() rounds halves to even, so 72.5 would become 72.

    Example:
        >>> round_half_up(72.5)
        73
    """
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
