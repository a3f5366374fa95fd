"""
OCR engine implementations.

``OCREngine`` is the capability a client drives; ``TesseractEngine`` is the
backend for a local Tesseract installation.
"""

from .base import (
    OCREngine,
    PageSegMode,
    TESSEDIT_CHAR_WHITELIST,
    TESSEDIT_CHAR_BLACKLIST,
)
from .tesseract_engine import TesseractEngine, create_tesseract_engine

__all__ = [
    "OCREngine", "PageSegMode", "TESSEDIT_CHAR_WHITELIST", "TESSEDIT_CHAR_BLACKLIST",
    "TesseractEngine", "create_tesseract_engine",
]
