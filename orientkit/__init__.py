"""
orientkit - EXIF orientation normalization for JPEG images.

Rotates and mirrors the pixel raster so the stored orientation becomes
"normal" (1), and rewrites every metadata store that repeats width,
height or orientation so the file stays internally consistent:
- Primary and thumbnail rasters transformed as exact pixel permutations
- IFD0, Exif, Interop and thumbnail IFD1 tags rewritten
- XMP attributes mirroring those tags kept in sync
- GPS directory and ICC profile passed through untouched

Designed following SOLID principles and common design patterns.

Example usage:
    from orientkit import OrientationNormalizer

    normalizer = OrientationNormalizer()

    # Bytes in, bytes out
    upright = normalizer.normalize(Path("photo.jpg").read_bytes())

    # In place on disk
    normalizer.normalize_file(Path("photo.jpg"))

    # Individual components
    from orientkit import TransformTable, RasterTransformer

    transform = TransformTable.resolve(6)
    print(transform.rotation, transform.mirror)  # 90 False
"""

from .normalizer import (
    OrientationNormalizer,
    NormalizerConfig,
    PipelineState,
    normalize_orientation,
)
from .core.interfaces import (
    OrientationCode,
    ImageDimensions,
    Transform,
    Raster,
    MetadataTree,
    EncodingHints,
    Thumbnail,
    ImageDocument,
    ExtractedMetadata,
)
from .core.tags import Directory, Tag
from .core.xmp import XmpPacket
from .core.errors import (
    OrientationError,
    InvalidFormatError,
    MissingExifError,
    MissingOrientationError,
    UnsupportedOrientationError,
    EncodingError,
)
from .image import (
    TransformTable,
    resolve_transform,
    RasterTransformer,
    MetadataExtractor,
    MetadataRewriter,
)
from .codec import JpegContainerCodec, CodecConfig

__version__ = "1.0.0"

__all__ = [
    # Main facade
    "OrientationNormalizer",
    "NormalizerConfig",
    "PipelineState",
    "normalize_orientation",

    # Core types
    "OrientationCode",
    "ImageDimensions",
    "Transform",
    "Raster",
    "MetadataTree",
    "EncodingHints",
    "Thumbnail",
    "ImageDocument",
    "ExtractedMetadata",
    "Directory",
    "Tag",
    "XmpPacket",

    # Errors
    "OrientationError",
    "InvalidFormatError",
    "MissingExifError",
    "MissingOrientationError",
    "UnsupportedOrientationError",
    "EncodingError",

    # Engine components
    "TransformTable",
    "resolve_transform",
    "RasterTransformer",
    "MetadataExtractor",
    "MetadataRewriter",

    # Codec
    "JpegContainerCodec",
    "CodecConfig",
]
