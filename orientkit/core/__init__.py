"""
Core module - Interfaces, protocols, data types and errors for orientkit.
"""
from .interfaces import (
    # Enums
    OrientationCode,

    # Data classes
    ImageDimensions,
    Transform,
    Raster,
    MetadataField,
    MetadataTree,
    EncodingHints,
    Thumbnail,
    ImageDocument,
    ExtractedMetadata,

    # Abstract interfaces
    IContainerCodec,
    IRasterTransformer,
    IMetadataExtractor,
    IMetadataRewriter,
    IOrientationNormalizer,
)
from .tags import Directory, Tag
from .xmp import XmpPacket
from .errors import (
    OrientationError,
    InvalidFormatError,
    MissingExifError,
    MissingOrientationError,
    UnsupportedOrientationError,
    EncodingError,
)

__all__ = [
    # Enums
    "OrientationCode",
    "Directory",

    # Data classes
    "ImageDimensions",
    "Transform",
    "Raster",
    "MetadataField",
    "MetadataTree",
    "EncodingHints",
    "Thumbnail",
    "ImageDocument",
    "ExtractedMetadata",
    "Tag",
    "XmpPacket",

    # Abstract interfaces
    "IContainerCodec",
    "IRasterTransformer",
    "IMetadataExtractor",
    "IMetadataRewriter",
    "IOrientationNormalizer",

    # Errors
    "OrientationError",
    "InvalidFormatError",
    "MissingExifError",
    "MissingOrientationError",
    "UnsupportedOrientationError",
    "EncodingError",
]
