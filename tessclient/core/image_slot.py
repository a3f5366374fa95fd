"""
Owned slot for the image handle bound to an engine.

The slot is the only place a client keeps its image handle. ``replace`` is
its single mutation entry point and always destroys the previous occupant
before storing the new one, so a client never holds more than one live
image handle.
"""

from typing import Any, Optional

from ..ocr.base import OCREngine
from ..utils.logger import get_logger


logger = get_logger("image_slot")


class ImageSlot:
    """Holds at most one image handle created by ``engine``."""

    def __init__(self, engine: OCREngine):
        self._engine = engine
        self._handle: Optional[Any] = None

    @property
    def bound(self) -> bool:
        return self._handle is not None

    @property
    def handle(self) -> Optional[Any]:
        return self._handle

    def replace(self, handle: Optional[Any]) -> None:
        """Release the current handle, then store ``handle`` (which may be None)."""
        previous, self._handle = self._handle, None
        if previous is not None:
            logger.debug("Destroying bound image handle")
            self._engine.destroy_image(previous)
        self._handle = handle

    def release(self) -> None:
        """Release the current handle. A no-op when the slot is empty."""
        self.replace(None)

    def rebind(self) -> None:
        """Bind the stored handle to the engine again."""
        if self._handle is None:
            raise RuntimeError("No image handle to rebind")
        self._engine.rebind_image(self._handle)
