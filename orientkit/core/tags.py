"""
Centralized EXIF directory and tag constants.

Used by: extractor, rewriter, codec
"""
from dataclasses import dataclass
from enum import Enum


class Directory(Enum):
    """EXIF directories; values match the IFD names used by piexif."""
    IMAGE = "0th"
    EXIF = "Exif"
    GPS = "GPS"
    INTEROP = "Interop"
    THUMBNAIL = "1st"


@dataclass(frozen=True)
class Tag:
    """A tag id scoped to the directory it lives in."""
    directory: Directory
    tag_id: int
    name: str


ORIENTATION = Tag(Directory.IMAGE, 0x0112, "Orientation")
IMAGE_WIDTH = Tag(Directory.IMAGE, 0x0100, "ImageWidth")
IMAGE_LENGTH = Tag(Directory.IMAGE, 0x0101, "ImageLength")

EXIF_IMAGE_WIDTH = Tag(Directory.EXIF, 0xA002, "PixelXDimension")
EXIF_IMAGE_LENGTH = Tag(Directory.EXIF, 0xA003, "PixelYDimension")

RELATED_IMAGE_WIDTH = Tag(Directory.INTEROP, 0x1001, "RelatedImageWidth")
RELATED_IMAGE_LENGTH = Tag(Directory.INTEROP, 0x1002, "RelatedImageLength")

THUMBNAIL_ORIENTATION = Tag(Directory.THUMBNAIL, 0x0112, "Orientation")
THUMBNAIL_WIDTH = Tag(Directory.THUMBNAIL, 0x0100, "ImageWidth")
THUMBNAIL_LENGTH = Tag(Directory.THUMBNAIL, 0x0101, "ImageLength")

# Structural pointers; the container regenerates them on encode.
POINTER_TAGS = {
    Directory.IMAGE: {0x8769, 0x8825},
    Directory.EXIF: {0xA005},
    Directory.THUMBNAIL: {0x0201, 0x0202},
}

# XMP attribute names mirroring the binary tags above.
XMP_ORIENTATION = "tiff:Orientation"
XMP_IMAGE_WIDTH = "tiff:ImageWidth"
XMP_IMAGE_LENGTH = "tiff:ImageLength"
XMP_PIXEL_X_DIMENSION = "exif:PixelXDimension"
XMP_PIXEL_Y_DIMENSION = "exif:PixelYDimension"
XMP_THUMBNAIL_WIDTH = "xmp:ThumbnailsWidth"
XMP_THUMBNAIL_HEIGHT = "xmp:ThumbnailsHeight"

XMP_ATTRIBUTES = (
    XMP_ORIENTATION,
    XMP_IMAGE_WIDTH,
    XMP_IMAGE_LENGTH,
    XMP_PIXEL_X_DIMENSION,
    XMP_PIXEL_Y_DIMENSION,
    XMP_THUMBNAIL_WIDTH,
    XMP_THUMBNAIL_HEIGHT,
)


def is_pointer(directory: Directory, tag_id: int) -> bool:
    """Check if a tag only stores an offset into the TIFF structure."""
    return tag_id in POINTER_TAGS.get(directory, ())
