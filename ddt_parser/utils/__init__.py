"""
Utility Module for the DDT Parser.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File and decimal helpers
"""

from .logger import setup_logger, get_logger
from .helpers import ensure_directory, get_file_extension, quantize_amount, round_half_up

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'quantize_amount',
    'round_half_up'
]
