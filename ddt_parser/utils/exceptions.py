"""
Custom Exceptions Module.

This module defines the exceptions raised by the layers around the
extraction engine. The engine itself never raises for malformed OCR text:
an unmatched field simply keeps its empty default. Exceptions are reserved
for file input, configuration, manual corrections and evaluation.

Exception Hierarchy:
    DDTParserError (base)
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── InputFileNotFoundError
    │   └── CorruptedFileError
    ├── ConfigurationError
    ├── PostProcessingError
    │   ├── ValidationError
    │   └── CorrectionError
    └── EvaluationError
"""


class DDTParserError(Exception):
    """
    Base exception for all DDT parser errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(DDTParserError):
    """Base exception for OCR input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when an input file is neither OCR text nor OCR JSON.

    Example:
        >>> raise UnsupportedFileTypeError(".jpg", [".txt", ".json"])
    """

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class InputFileNotFoundError(InputError):
    """Raised when an input file or directory cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class CorruptedFileError(InputError):
    """Raised when an OCR payload cannot be decoded."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Corrupted or unreadable file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(DDTParserError):
    """Raised when a configuration source is missing or invalid."""

    def __init__(self, source: str, reason: str = None):
        message = f"Invalid configuration: {source}"
        details = {"source": source, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# POST-PROCESSING ERRORS
# =============================================================================

class PostProcessingError(DDTParserError):
    """Base exception for post-processing errors."""
    pass


class ValidationError(PostProcessingError):
    """Raised when a value cannot be accepted for a document field."""

    def __init__(self, field: str, value, reason: str = None):
        message = f"Validation failed for field '{field}'"
        details = {"field": field, "value": value, "reason": reason}
        super().__init__(message, details)


class CorrectionError(ValidationError):
    """Raised when a manual correction targets an unknown field or row."""
    pass


# =============================================================================
# EVALUATION ERRORS
# =============================================================================

class EvaluationError(DDTParserError):
    """Raised when parsed documents cannot be compared with ground truth."""

    def __init__(self, reason: str, details: dict = None):
        super().__init__(f"Evaluation failed: {reason}", details)


__all__ = [
    'DDTParserError',
    'InputError',
    'UnsupportedFileTypeError',
    'InputFileNotFoundError',
    'CorruptedFileError',
    'ConfigurationError',
    'PostProcessingError',
    'ValidationError',
    'CorrectionError',
    'EvaluationError',
]
