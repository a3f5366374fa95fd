"""
Client: argument builder and lifecycle owner for an OCR engine handle.

A client collects settings through fluent setters and only talks to the
engine when text is requested. Initialization is lazy and idempotent: it runs
before the first extraction and again only after languages, the config file
or the tessdata prefix change. Image binding, variables and the page
segmentation mode are applied on every extraction.

Clients are not thread-safe. Every client must be closed, either explicitly
or by using it as a context manager::

    with Client() as client:
        text = client.set_languages("eng").set_image("scan.png").text()
"""

import functools
import os
import time
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .config import ClientConfig
from .errors import (
    ClientClosedError,
    ConfigPathError,
    EmptyImageDataError,
    EngineInitError,
    ImageNotFoundError,
    MissingImagePathError,
    VariableBindError,
)
from .image_slot import ImageSlot
from ..ocr.base import (
    OCREngine,
    PageSegMode,
    TESSEDIT_CHAR_BLACKLIST,
    TESSEDIT_CHAR_WHITELIST,
)
from ..ocr.tesseract_engine import TesseractEngine
from ..utils.logger import ClientLoggerAdapter, get_logger


EngineFactory = Callable[[], OCREngine]


def _with_engine(engine_factory: Optional[EngineFactory], action: Callable[[OCREngine], Any]) -> Any:
    """Run ``action`` on a throwaway engine handle, always freeing it."""
    engine = (engine_factory or TesseractEngine)()
    try:
        return action(engine)
    finally:
        engine.free()


def engine_version(engine_factory: Optional[EngineFactory] = None) -> str:
    """Return the version of the OCR engine."""
    return _with_engine(engine_factory, lambda engine: engine.version())


def clear_persistent_cache(engine_factory: Optional[EngineFactory] = None) -> None:
    """
    Clear process-wide engine caches.

    Installed-language data and similar expensive lookups are cached for the
    whole process and survive individual clients being closed. This clears
    them for every client at once.
    """
    _with_engine(engine_factory, lambda engine: engine.clear_persistent_cache())


class Client:
    """Argument builder for an OCR engine handle."""

    def __init__(self, engine_factory: Optional[EngineFactory] = None, trim: bool = True):
        """
        Create a client owning a freshly allocated engine handle.

        Args:
            engine_factory: Zero-argument callable returning an OCREngine
                (defaults to TesseractEngine)
            trim: Strip leading/trailing newlines from text output
        """
        self._api = (engine_factory or TesseractEngine)()
        self._image = ImageSlot(self._api)
        self.logger = ClientLoggerAdapter(get_logger("client"), {})

        self._initialized = False
        self._closed = False

        self.trim = trim
        self._languages: Tuple[str, ...] = ()
        self._tessdata_prefix: Optional[str] = None
        self._config_file_path: Optional[str] = None

        self._image_path: Optional[str] = None
        self._image_data: Optional[bytes] = None
        self._empty_image_data = False

        # Applied in insertion order on every extraction
        self._variables: Dict[str, str] = {}
        self._page_seg_mode: Optional[PageSegMode] = None

    @classmethod
    def from_config(cls, config: ClientConfig,
                    engine_factory: Optional[EngineFactory] = None) -> "Client":
        """
        Create a client with the defaults held by ``config``.

        Raises:
            ConfigPathError: If ``config.config_file`` is set but invalid
        """
        if engine_factory is None:
            engine_factory = functools.partial(TesseractEngine, config.tesseract_cmd)
        client = cls(engine_factory, trim=config.trim)
        try:
            client.set_languages(*config.languages)
            if config.tessdata_prefix:
                client.set_tessdata_prefix(config.tessdata_prefix)
            if config.page_seg_mode is not None:
                client.set_page_seg_mode(config.page_seg_mode)
            for key, value in config.variables.items():
                client.set_variable(key, value)
            if config.config_file:
                client.set_config_file(config.config_file)
        except Exception:
            client.close()
            raise
        return client

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("initialized" if self._initialized else "uninitialized")
        return f"Client(languages={list(self._languages)}, {state})"

    # Read-only views of the configuration

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def languages(self) -> Tuple[str, ...]:
        return self._languages

    @property
    def tessdata_prefix(self) -> Optional[str]:
        return self._tessdata_prefix

    @property
    def config_file_path(self) -> Optional[str]:
        return self._config_file_path

    @property
    def image_path(self) -> Optional[str]:
        return self._image_path

    @property
    def image_data(self) -> Optional[bytes]:
        return self._image_data

    @property
    def variables(self) -> Dict[str, str]:
        return dict(self._variables)

    @property
    def page_seg_mode(self) -> Optional[PageSegMode]:
        return self._page_seg_mode

    def _ensure_open(self):
        if self._closed:
            raise ClientClosedError()

    # Setters

    def set_image(self, image_path: Union[str, os.PathLike]) -> "Client":
        """Set path to the image file to be processed."""
        self._ensure_open()
        self._image.release()
        self._image_path = os.fspath(image_path)
        self._image_data = None
        self._empty_image_data = False
        self.logger.extra['image_source'] = self._image_path
        return self

    def set_image_from_bytes(self, data: bytes) -> "Client":
        """
        Set in-memory image data to be processed.

        An empty buffer is accepted and treated as no image data.
        """
        self._ensure_open()
        self._image.release()
        self._image_path = None
        self._image_data = bytes(data) if data else None
        self._empty_image_data = not data
        self.logger.extra['image_source'] = f"<{len(data)} bytes>"
        return self

    def set_languages(self, *languages: str) -> "Client":
        """Set languages to use. The engine default (English) if none."""
        self._ensure_open()
        self._initialized = False
        self._languages = tuple(languages)
        return self

    def set_tessdata_prefix(self, prefix: Optional[Union[str, os.PathLike]]) -> "Client":
        """Set the directory containing language data."""
        self._ensure_open()
        self._initialized = False
        self._tessdata_prefix = os.fspath(prefix) if prefix is not None else None
        return self

    def set_variable(self, key: str, value: str) -> "Client":
        """Set an engine variable, applied on every extraction."""
        self._ensure_open()
        self._variables[key] = value
        return self

    def set_whitelist(self, whitelist: str) -> "Client":
        """Restrict recognition to the given characters."""
        return self.set_variable(TESSEDIT_CHAR_WHITELIST, whitelist)

    def set_blacklist(self, blacklist: str) -> "Client":
        """Exclude the given characters from recognition."""
        return self.set_variable(TESSEDIT_CHAR_BLACKLIST, blacklist)

    def set_page_seg_mode(self, mode: Union[PageSegMode, int]) -> "Client":
        """Set the page segmentation mode used for layout analysis."""
        self._ensure_open()
        self._page_seg_mode = PageSegMode(mode)
        return self

    def set_trim(self, trim: bool) -> "Client":
        self._ensure_open()
        self.trim = trim
        return self

    def set_config_file(self, path: Union[str, os.PathLike]) -> "Client":
        """
        Set the path of an engine config file.

        Raises:
            ConfigPathError: If the path does not exist or is a directory
        """
        self._ensure_open()
        path = os.fspath(path)
        if not os.path.exists(path):
            raise ConfigPathError(path, "no such file")
        if os.path.isdir(path):
            raise ConfigPathError(path, "the specified config file path seems to be a directory")
        self._initialized = False
        self._config_file_path = path
        return self

    # Pipeline

    def _init(self):
        """Initialize the engine unless it already reflects the current settings."""
        if self._initialized:
            return

        langs = "+".join(self._languages) if self._languages else None
        config = None
        if self._config_file_path and os.path.exists(self._config_file_path):
            config = self._config_file_path

        code = self._api.init(langs, config, self._tessdata_prefix)
        if code != 0:
            self.logger.error(f"Engine initialization failed with code {code}",
                              extra={'languages': langs})
            raise EngineInitError(code, langs)

        self._initialized = True
        self.logger.info(f"Engine initialized (languages={langs or 'default'}, config={config})",
                         extra={'languages': langs})

    def _bind_image(self):
        """Bind the current image, reusing the stored handle when unchanged."""
        if self._image.bound:
            self._image.rebind()
            return

        if self._image_data:
            handle = self._api.set_image_from_buffer(self._image_data)
        else:
            if not self._image_path:
                if self._empty_image_data:
                    raise EmptyImageDataError()
                raise MissingImagePathError()
            if not os.path.exists(self._image_path):
                raise ImageNotFoundError(self._image_path)
            handle = self._api.set_image_from_path(self._image_path)

        self._image.replace(handle)

    def _apply_settings(self):
        """Apply variables and the page segmentation mode."""
        for key, value in self._variables.items():
            if not self._api.set_variable(key, value):
                raise VariableBindError(key, value)
            self.logger.debug(f"Bound variable {key}={value!r}")

        if self._page_seg_mode is not None:
            self._api.set_page_seg_mode(self._page_seg_mode)

    def _prepare(self):
        self._ensure_open()
        self._init()
        self._bind_image()
        self._apply_settings()

    def text(self) -> str:
        """
        Run OCR and return the recognized text.

        Leading and trailing newlines are removed when ``trim`` is set.

        Raises:
            TessClientError: If any pipeline step fails
        """
        self._prepare()
        start_time = time.time()
        out = self._api.get_utf8_text()
        self.logger.debug(f"Extracted {len(out)} characters",
                          extra={'elapsed': time.time() - start_time})
        if self.trim:
            out = out.strip("\n")
        return out

    def hocr_text(self) -> str:
        """
        Run OCR and return hOCR markup.

        See https://en.wikipedia.org/wiki/HOCR for the format.
        """
        self._prepare()
        start_time = time.time()
        out = self._api.get_hocr_text()
        self.logger.debug(f"Extracted {len(out)} characters of hOCR",
                          extra={'elapsed': time.time() - start_time})
        return out

    def close(self) -> None:
        """Free the engine handle and any bound image. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._initialized = False
        try:
            self._api.clear()
            self._api.free()
        finally:
            self._image.release()
