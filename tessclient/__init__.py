"""
tess-client - a stateful client for the Tesseract OCR engine.

The client collects OCR settings (image, languages, variables, page
segmentation mode, config file), initializes the engine lazily and owns the
engine and image handles until it is closed.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .core import (
    Client,
    ClientConfig,
    engine_version,
    clear_persistent_cache,
    TessClientError,
    ConfigPathError,
    EngineInitError,
    MissingImagePathError,
    EmptyImageDataError,
    ImageNotFoundError,
    VariableBindError,
    RecognitionError,
    ClientClosedError,
)
from .ocr import OCREngine, PageSegMode, TesseractEngine

__all__ = [
    "Client", "ClientConfig", "engine_version", "clear_persistent_cache",
    "OCREngine", "PageSegMode", "TesseractEngine",
    "TessClientError", "ConfigPathError", "EngineInitError",
    "MissingImagePathError", "EmptyImageDataError", "ImageNotFoundError",
    "VariableBindError", "RecognitionError", "ClientClosedError",
    "__version__",
]
