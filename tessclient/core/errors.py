"""
Exception types raised by the tess-client library.

Every failure of a client operation surfaces as a subclass of
``TessClientError`` carrying the offending values as attributes, so callers
can catch the whole family or a single kind.
"""

from typing import Optional


class TessClientError(Exception):
    """Base class for all tess-client errors."""


class ConfigPathError(TessClientError):
    """The config file path does not exist or points to a directory."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config file path '{path}': {reason}")


class EngineInitError(TessClientError):
    """The engine rejected initialization with a non-zero status code."""

    def __init__(self, code: int, languages: Optional[str] = None):
        self.code = code
        self.languages = languages
        super().__init__(f"Failed to initialize engine with code {code}")


class MissingImagePathError(TessClientError):
    """Neither an image path nor image data has been set."""

    def __init__(self, message: str = "No image path or image data has been set"):
        super().__init__(message)


class EmptyImageDataError(MissingImagePathError):
    """Only an empty image buffer was supplied, and no image path."""

    def __init__(self):
        super().__init__("Image data is empty and no image path has been set")


class ImageNotFoundError(TessClientError):
    """The configured image path does not exist at bind time."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Image file does not exist: {path}")


class VariableBindError(TessClientError):
    """The engine rejected a variable assignment."""

    def __init__(self, key: str, value: str):
        self.key = key
        self.value = value
        super().__init__(f"Failed to set variable with key({key}):value({value})")


class RecognitionError(TessClientError):
    """The engine failed while producing output or answering a query."""


class ClientClosedError(TessClientError):
    """A client was used after ``close()``."""

    def __init__(self):
        super().__init__("Client has already been closed")
