"""
Base classes and interfaces for OCR engines.

This module defines the engine capability the client drives. An engine
instance is one engine handle: it is configured by ``init``, has images bound
to it, and produces text on demand. Image handles are opaque objects created
by the engine and destroyed through it.
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Dict, Optional


TESSEDIT_CHAR_WHITELIST = "tessedit_char_whitelist"
TESSEDIT_CHAR_BLACKLIST = "tessedit_char_blacklist"


class PageSegMode(IntEnum):
    """Page segmentation modes, using the engine's numeric values."""

    OSD_ONLY = 0                 # Orientation and script detection only
    AUTO_OSD = 1                 # Automatic page segmentation with OSD
    AUTO_ONLY = 2                # Automatic segmentation, no OSD or OCR
    AUTO = 3                     # Fully automatic, no OSD (engine default)
    SINGLE_COLUMN = 4            # Single column of text of variable sizes
    SINGLE_BLOCK_VERT_TEXT = 5   # Single uniform block of vertical text
    SINGLE_BLOCK = 6             # Single uniform block of text
    SINGLE_LINE = 7              # Single text line
    SINGLE_WORD = 8              # Single word
    CIRCLE_WORD = 9              # Single word in a circle
    SINGLE_CHAR = 10             # Single character
    SPARSE_TEXT = 11             # As much text as possible, no order
    SPARSE_TEXT_OSD = 12         # Sparse text with OSD
    RAW_LINE = 13                # Single line, bypassing engine hacks


class OCREngine(ABC):
    """
    Abstract base class for OCR engine handles.

    A client owns exactly one engine instance for its whole life and calls
    ``free`` on it exactly once. Engines must not be shared between clients.
    """

    def __init__(self, name: str, **kwargs):
        """
        Initialize OCR engine.

        Args:
            name: Engine identifier
            **kwargs: Engine-specific configuration
        """
        self.name = name
        self.config = kwargs

    @abstractmethod
    def init(self, languages: Optional[str], config_path: Optional[str],
             tessdata_prefix: Optional[str] = None) -> int:
        """
        Configure the engine for recognition.

        Args:
            languages: Languages joined with '+', or None for the engine default
            config_path: Path of an engine config file, or None
            tessdata_prefix: Directory holding language data, or None

        Returns:
            0 on success, a non-zero status code otherwise
        """

    @abstractmethod
    def set_image_from_path(self, path: str) -> Any:
        """Load the image at ``path``, bind it and return its handle."""

    @abstractmethod
    def set_image_from_buffer(self, data: bytes) -> Any:
        """Decode ``data``, bind the image and return its handle."""

    @abstractmethod
    def rebind_image(self, handle: Any) -> None:
        """Bind an existing image handle again."""

    @abstractmethod
    def destroy_image(self, handle: Any) -> None:
        """Release an image handle created by this engine."""

    @abstractmethod
    def set_variable(self, key: str, value: str) -> bool:
        """Set an engine variable. Returns False if the engine rejects it."""

    @abstractmethod
    def set_page_seg_mode(self, mode: PageSegMode) -> None:
        """Set the page segmentation mode."""

    @abstractmethod
    def get_utf8_text(self) -> str:
        """Recognize the bound image and return plain text."""

    @abstractmethod
    def get_hocr_text(self) -> str:
        """Recognize the bound image and return hOCR markup."""

    @abstractmethod
    def clear(self) -> None:
        """Drop recognition results and the bound image reference."""

    @abstractmethod
    def clear_persistent_cache(self) -> None:
        """Clear the process-wide cache shared by all engine handles."""

    @abstractmethod
    def version(self) -> str:
        """Return the engine version string."""

    @abstractmethod
    def free(self) -> None:
        """Release the engine handle."""

    def get_info(self) -> Dict[str, Any]:
        """
        Get engine information.

        Returns:
            Dictionary with engine details
        """
        return {
            'name': self.name,
            'config': self.config
        }

    def __repr__(self) -> str:
        return f"OCREngine(name='{self.name}')"
