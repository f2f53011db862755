"""
Input Handler Module for the DDT Parser.

This module loads the output of the OCR collaborator (recognized text and
its confidence) from text or JSON files.
"""

from .handler import InputHandler
from .ocr_result import OCRResult

__all__ = ['InputHandler', 'OCRResult']
