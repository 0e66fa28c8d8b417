"""
Error taxonomy for orientation normalization.

Every failure aborts the whole operation; callers can tell the kinds apart
by type. File-system errors raised by the calling layer are not wrapped.
"""
from typing import Any


class OrientationError(Exception):
    """Base class for all orientkit failures."""


class InvalidFormatError(OrientationError):
    """Input is not a decodable JPEG container."""


class MissingExifError(OrientationError):
    """Image decoded fine but carries no EXIF metadata."""


class MissingOrientationError(OrientationError):
    """EXIF metadata has no Orientation tag."""


class UnsupportedOrientationError(OrientationError):
    """Orientation tag holds a value outside the eight EXIF codes."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Unsupported orientation value: {value!r}")


class EncodingError(OrientationError):
    """Updated document could not be serialized back to bytes."""
