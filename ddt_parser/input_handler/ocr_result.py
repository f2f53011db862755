"""
OCR Result Data Class.

This module defines the structure handed over by the OCR collaborator:
the recognized text plus, when the engine reports one, its overall
recognition confidence (0-100).

Classes:
    OCRResult: Text and confidence of one recognized document
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class OCRResult:
    """
    Output of one OCR pass over a delivery note photo.

    Attributes:
        text: Recognized text, lines separated by newlines
        confidence: Engine mean confidence (0-100), None if not reported
        source_file: File the result was loaded from

    Example:
        >>> result = OCRResult.from_dict({"data": {"text": "DDT n. 1", "confidence": 91}})
        >>> result.confidence
        91.0
    """
    text: str = ""
    confidence: Optional[float] = None
    source_file: Optional[str] = None

    @property
    def line_count(self) -> int:
        """Number of non-empty lines."""
        return sum(1 for line in self.text.splitlines() if line.strip())

    def is_empty(self) -> bool:
        """Check if no text was recognized."""
        return not self.text.strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            'text': self.text,
            'confidence': self.confidence,
            'source_file': self.source_file
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source_file: Optional[str] = None) -> 'OCRResult':
        """
        Create an OCRResult from an OCR engine payload.

        Accepts {"text": ..., "confidence": ...}, optionally wrapped in a
        "data" object as returned by tesseract-style engines.

        Raises:
            ValueError: If the payload has no text or a non-numeric confidence.
        """
        if isinstance(data.get('data'), dict):
            data = data['data']

        text = data.get('text')
        if not isinstance(text, str):
            raise ValueError("Payload has no 'text' string")

        confidence = data.get('confidence')
        if confidence is not None:
            if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
                raise ValueError(f"Confidence is not a number: {confidence!r}")
            confidence = float(confidence)

        return cls(
            text=text,
            confidence=confidence,
            source_file=source_file or data.get('source_file')
        )

    def __repr__(self) -> str:
        return (
            f"OCRResult(source_file={self.source_file!r}, "
            f"lines={self.line_count}, confidence={self.confidence})"
        )
