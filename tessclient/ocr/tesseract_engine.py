"""
Tesseract OCR Engine.

This module drives the local ``tesseract`` binary through pytesseract. Each
engine instance plays the role of one engine handle: it remembers the
languages, config file and variables it was configured with and the image
currently bound to it, and hands all of them to Tesseract on every
recognition call. Images are held as loaded Pillow images.

Installed languages and binary versions are expensive to query, so they are
kept in a process-wide cache shared by every engine instance. The cache
survives ``free()`` of individual engines and is only emptied by
``clear_persistent_cache()``.
"""

import io
import shlex
from typing import Any, Dict, List, Optional, Tuple

import pytesseract
from PIL import Image

from .base import OCREngine, PageSegMode
from ..core.errors import RecognitionError
from ..utils.logger import get_logger


DEFAULT_LANGUAGE = "eng"

# Process-wide cache: installed languages per (tesseract_cmd, tessdata dir)
# and version strings per tesseract_cmd.
_PERSISTENT_CACHE: Dict[str, Dict[Any, Any]] = {
    'languages': {},
    'versions': {},
}


class TesseractEngine(OCREngine):
    """
    Tesseract OCR engine handle backed by pytesseract.

    ``tesseract_cmd`` is written to ``pytesseract.pytesseract.tesseract_cmd``,
    which is global to the process. Constructing an engine with a different
    command redirects every existing engine as well, and cache entries are
    keyed by whichever command is current when they are looked up. Use a
    single command per process.
    """

    def __init__(self, tesseract_cmd: Optional[str] = None, **kwargs):
        """
        Create an engine handle.

        Args:
            tesseract_cmd: Path to tesseract executable (PATH lookup if None)
            **kwargs: Additional configuration options
        """
        super().__init__("tesseract", **kwargs)
        self.tesseract_cmd = tesseract_cmd
        self.logger = get_logger("tesseract_engine")

        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd

        self._freed = False
        self._languages: Optional[str] = None
        self._config_path: Optional[str] = None
        self._tessdata_prefix: Optional[str] = None
        self._variables: Dict[str, str] = {}
        self._page_seg_mode: Optional[PageSegMode] = None
        self._image: Optional[Image.Image] = None

    def _ensure_handle(self):
        if self._freed:
            raise RuntimeError("Tesseract engine handle has already been freed")

    def _cmd_key(self) -> str:
        return str(pytesseract.pytesseract.tesseract_cmd)

    def _installed_languages(self, tessdata_prefix: Optional[str]) -> List[str]:
        """Installed languages for the tessdata directory, via the persistent cache."""
        key: Tuple[str, Optional[str]] = (self._cmd_key(), tessdata_prefix)
        cache = _PERSISTENT_CACHE['languages']
        if key not in cache:
            config = f"--tessdata-dir {shlex.quote(tessdata_prefix)}" if tessdata_prefix else ""
            cache[key] = list(pytesseract.get_languages(config=config))
            self.logger.debug(f"Cached {len(cache[key])} installed languages for {key}")
        return cache[key]

    def init(self, languages: Optional[str], config_path: Optional[str],
             tessdata_prefix: Optional[str] = None) -> int:
        """
        Verify the requested languages and store the init parameters.

        Returns:
            0 on success, -1 if Tesseract is missing or a language is not installed
        """
        self._ensure_handle()

        try:
            installed = self._installed_languages(tessdata_prefix)
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError) as e:
            self.logger.error(f"Tesseract not available: {e}")
            return -1

        requested = languages.split('+') if languages else [DEFAULT_LANGUAGE]
        missing = [lang for lang in requested if lang not in installed]
        if missing:
            self.logger.error(
                f"Tesseract languages not installed: {', '.join(missing)}. "
                f"Available: {', '.join(installed)}"
            )
            return -1

        self._languages = languages
        self._config_path = config_path
        self._tessdata_prefix = tessdata_prefix
        # Re-initialization resets variables to engine defaults
        self._variables = {}
        self._page_seg_mode = None
        return 0

    def _load(self, source: Any, description: str) -> Image.Image:
        try:
            image = Image.open(source)
            image.load()
        except (OSError, Image.DecompressionBombError) as e:
            raise RecognitionError(f"Could not read image from {description}: {e}") from e
        self._image = image
        return image

    def set_image_from_path(self, path: str) -> Image.Image:
        self._ensure_handle()
        return self._load(path, path)

    def set_image_from_buffer(self, data: bytes) -> Image.Image:
        self._ensure_handle()
        return self._load(io.BytesIO(data), f"{len(data)} byte buffer")

    def rebind_image(self, handle: Image.Image) -> None:
        self._ensure_handle()
        self._image = handle

    def destroy_image(self, handle: Image.Image) -> None:
        if self._image is handle:
            self._image = None
        handle.close()

    def set_variable(self, key: str, value: str) -> bool:
        """
        Store a variable to pass as ``-c key=value``.

        Names containing whitespace or '=' and values containing newlines
        cannot be expressed on the command line and are rejected.
        """
        self._ensure_handle()
        if not key or '=' in key or any(c.isspace() for c in key):
            return False
        if '\n' in value or '\r' in value:
            return False
        self._variables[key] = value
        return True

    def set_page_seg_mode(self, mode: PageSegMode) -> None:
        self._ensure_handle()
        self._page_seg_mode = PageSegMode(mode)

    def _get_tesseract_config(self) -> str:
        """Get Tesseract configuration string."""
        config_parts = []

        if self._tessdata_prefix:
            config_parts.append(f"--tessdata-dir {shlex.quote(self._tessdata_prefix)}")

        if self._page_seg_mode is not None:
            config_parts.append(f"--psm {int(self._page_seg_mode)}")

        for key, value in self._variables.items():
            config_parts.append(f"-c {shlex.quote(f'{key}={value}')}")

        # Config files must come after all options
        if self._config_path:
            config_parts.append(shlex.quote(self._config_path))

        return " ".join(config_parts)

    def _bound_image(self) -> Image.Image:
        self._ensure_handle()
        if self._image is None:
            raise RecognitionError("No image is bound to the engine")
        return self._image

    def get_utf8_text(self) -> str:
        image = self._bound_image()
        try:
            return pytesseract.image_to_string(
                image,
                lang=self._languages,
                config=self._get_tesseract_config()
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            self.logger.error(f"Text recognition failed: {e}")
            raise RecognitionError(f"Text recognition failed: {e}") from e

    def get_hocr_text(self) -> str:
        image = self._bound_image()
        try:
            hocr = pytesseract.image_to_pdf_or_hocr(
                image,
                lang=self._languages,
                config=self._get_tesseract_config(),
                extension='hocr'
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            self.logger.error(f"hOCR recognition failed: {e}")
            raise RecognitionError(f"hOCR recognition failed: {e}") from e
        return hocr.decode('utf-8')

    def clear(self) -> None:
        self._image = None

    def clear_persistent_cache(self) -> None:
        for cache in _PERSISTENT_CACHE.values():
            cache.clear()
        self.logger.debug("Persistent cache cleared")

    def version(self) -> str:
        self._ensure_handle()
        key = self._cmd_key()
        versions = _PERSISTENT_CACHE['versions']
        if key not in versions:
            try:
                versions[key] = str(pytesseract.get_tesseract_version())
            except pytesseract.TesseractNotFoundError as e:
                raise RecognitionError(f"Tesseract not found: {e}") from e
        return versions[key]

    def free(self) -> None:
        self._image = None
        self._variables = {}
        self._freed = True

    def get_info(self) -> Dict[str, Any]:
        """Get engine information."""
        info = super().get_info()
        info.update({
            'tesseract_cmd': self.tesseract_cmd,
            'languages': self._languages,
            'config_path': self._config_path,
            'tessdata_prefix': self._tessdata_prefix,
            'page_seg_mode': self._page_seg_mode,
            'variables': dict(self._variables),
            'freed': self._freed
        })
        return info


def create_tesseract_engine(tesseract_cmd: Optional[str] = None, **kwargs) -> TesseractEngine:
    """
    Factory function to create a Tesseract engine handle.

    Args:
        tesseract_cmd: Path to tesseract executable
        **kwargs: Additional configuration options

    Returns:
        Tesseract engine handle
    """
    return TesseractEngine(tesseract_cmd, **kwargs)
