"""
Abstract interfaces following Interface Segregation Principle (SOLID).
Defines contracts and data types for all orientkit components.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple, Union
from pathlib import Path

import numpy as np

from .tags import Directory, Tag
from .xmp import XmpPacket


class OrientationCode(IntEnum):
    """The eight EXIF orientation values."""
    NORMAL = 1
    MIRROR_HORIZONTAL = 2
    ROTATE_180 = 3
    MIRROR_VERTICAL = 4
    MIRROR_HORIZONTAL_ROTATE_90 = 5
    ROTATE_90 = 6
    MIRROR_HORIZONTAL_ROTATE_270 = 7
    ROTATE_270 = 8


@dataclass
class ImageDimensions:
    """Represents image dimensions with utility properties."""
    width: int
    height: int

    @property
    def is_portrait(self) -> bool:
        return self.height > self.width

    @property
    def is_landscape(self) -> bool:
        return self.width > self.height

    def swapped(self) -> "ImageDimensions":
        return ImageDimensions(self.height, self.width)


@dataclass(frozen=True)
class Transform:
    """
    Horizontal mirror (optional) followed by a clockwise rotation.

    Instances form the dihedral group of the square under ``then``.
    """
    rotation: int = 0
    mirror: bool = False

    def __post_init__(self):
        if self.rotation not in (0, 90, 180, 270):
            raise ValueError(f"Rotation must be a multiple of 90 in [0, 270], got {self.rotation}")

    @property
    def swaps_dimensions(self) -> bool:
        return self.rotation in (90, 270)

    @property
    def is_identity(self) -> bool:
        return self.rotation == 0 and not self.mirror

    def then(self, other: "Transform") -> "Transform":
        """Compose: apply ``self`` first, then ``other``."""
        # A mirror reverses the sense of any rotation applied before it.
        rotation = -self.rotation if other.mirror else self.rotation
        return Transform(
            rotation=(other.rotation + rotation) % 360,
            mirror=self.mirror != other.mirror,
        )

    def inverse(self) -> "Transform":
        if self.mirror:
            return self
        return Transform(rotation=(-self.rotation) % 360)

    def output_dimensions(self, dimensions: ImageDimensions) -> ImageDimensions:
        if self.swaps_dimensions:
            return dimensions.swapped()
        return ImageDimensions(dimensions.width, dimensions.height)


@dataclass
class Raster:
    """Pixel grid of shape (height, width) or (height, width, channels)."""
    pixels: np.ndarray
    mode: str = "RGB"

    def __post_init__(self):
        if self.pixels.ndim not in (2, 3):
            raise ValueError(f"Raster must be 2-D or 3-D, got {self.pixels.ndim} dimensions")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def dimensions(self) -> ImageDimensions:
        return ImageDimensions(self.width, self.height)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return self.mode == other.mode and np.array_equal(self.pixels, other.pixels)


@dataclass(frozen=True)
class MetadataField:
    """A single (directory, tag) entry and its value."""
    directory: Directory
    tag_id: int
    value: Any


class MetadataTree:
    """
    EXIF metadata keyed by (directory, tag id).

    Values keep the container's typing: ints for BYTE/SHORT/LONG,
    (numerator, denominator) pairs for RATIONAL, bytes for ASCII and
    UNDEFINED, tuples for multi-valued tags. The TIFF type each tag was
    stored with is kept alongside when known, so tags the encoder has no
    definition for can be written back unchanged.
    """

    def __init__(
        self,
        fields: Optional[Dict[Tuple[Directory, int], Any]] = None,
        types: Optional[Dict[Tuple[Directory, int], int]] = None
    ):
        self._fields: Dict[Tuple[Directory, int], Any] = dict(fields or {})
        self._types: Dict[Tuple[Directory, int], int] = dict(types or {})

    @classmethod
    def from_directories(
        cls,
        directories: Dict[Directory, Dict[int, Any]],
        types: Optional[Dict[Directory, Dict[int, int]]] = None
    ) -> "MetadataTree":
        tree = cls()
        for directory, entries in directories.items():
            for tag_id, value in entries.items():
                tree._fields[(directory, tag_id)] = value
        for directory, entries in (types or {}).items():
            for tag_id, tiff_type in entries.items():
                if (directory, tag_id) in tree._fields:
                    tree._types[(directory, tag_id)] = tiff_type
        return tree

    def tag_type(self, directory: Directory, tag_id: int) -> Optional[int]:
        """TIFF type the tag was stored with, if known."""
        return self._types.get((directory, tag_id))

    def get(self, tag: Tag, default: Any = None) -> Any:
        return self._fields.get((tag.directory, tag.tag_id), default)

    def set(self, tag: Tag, value: Any) -> None:
        """Replace (or add) a single tag without touching any other."""
        self._fields[(tag.directory, tag.tag_id)] = value

    def __contains__(self, tag: Tag) -> bool:
        return (tag.directory, tag.tag_id) in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MetadataTree):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"MetadataTree({len(self._fields)} fields)"

    def directory(self, directory: Directory) -> Dict[int, Any]:
        """Copy of every tag stored in one directory."""
        return {
            tag_id: value
            for (current, tag_id), value in self._fields.items()
            if current == directory
        }

    def has_directory(self, directory: Directory) -> bool:
        return any(current == directory for current, _ in self._fields)

    def fields(self) -> Iterator[MetadataField]:
        for (directory, tag_id), value in self._fields.items():
            yield MetadataField(directory, tag_id, value)

    def copy(self) -> "MetadataTree":
        return MetadataTree(self._fields, self._types)


@dataclass
class EncodingHints:
    """Compression settings read from a source JPEG, reused on encode."""
    quantization: Optional[Dict[int, List[int]]] = None
    subsampling: int = -1
    progressive: bool = False


@dataclass
class Thumbnail:
    """Embedded EXIF thumbnail and its own IFD1 metadata."""
    raster: Raster
    metadata: MetadataTree = field(default_factory=MetadataTree)
    encoding: EncodingHints = field(default_factory=EncodingHints)

    @property
    def dimensions(self) -> ImageDimensions:
        return self.raster.dimensions

    def copy(self) -> "Thumbnail":
        return replace(self, metadata=self.metadata.copy())


@dataclass
class ImageDocument:
    """Decoded image: raster, metadata stores and pass-through blobs."""
    raster: Raster
    metadata: Optional[MetadataTree] = None
    thumbnail: Optional[Thumbnail] = None
    icc_profile: Optional[bytes] = None
    xmp: Optional[XmpPacket] = None
    comment: Optional[bytes] = None
    encoding: EncodingHints = field(default_factory=EncodingHints)

    @property
    def dimensions(self) -> ImageDimensions:
        return self.raster.dimensions

    @property
    def has_exif(self) -> bool:
        return self.metadata is not None

    @property
    def gps(self) -> Optional[Dict[int, Any]]:
        if self.metadata is None or not self.metadata.has_directory(Directory.GPS):
            return None
        return self.metadata.directory(Directory.GPS)

    def copy(self) -> "ImageDocument":
        return replace(
            self,
            metadata=self.metadata.copy() if self.metadata is not None else None,
            thumbnail=self.thumbnail.copy() if self.thumbnail is not None else None,
        )


@dataclass
class ExtractedMetadata:
    """Validated view of the orientation-related metadata of a document."""
    orientation: OrientationCode
    exif_width: Optional[int] = None
    exif_height: Optional[int] = None
    image_width: Optional[int] = None
    image_height: Optional[int] = None
    related_image_width: Optional[int] = None
    related_image_height: Optional[int] = None
    thumbnail: Optional[Thumbnail] = None
    gps: Optional[Dict[int, Any]] = None
    xmp: Optional[XmpPacket] = None
    icc_profile: Optional[bytes] = None


class IContainerCodec(ABC):
    """Interface for turning bytes into documents and back."""

    @abstractmethod
    def decode(self, data: bytes) -> ImageDocument:
        """Decode container bytes into an ImageDocument."""
        pass

    @abstractmethod
    def encode(self, document: ImageDocument) -> bytes:
        """Encode an ImageDocument back into container bytes."""
        pass


class IRasterTransformer(ABC):
    """Interface for geometric pixel transforms."""

    @abstractmethod
    def apply(self, raster: Raster, transform: Transform) -> Raster:
        """Return a new raster with the transform applied."""
        pass


class IMetadataExtractor(ABC):
    """Interface for reading and validating orientation metadata."""

    @abstractmethod
    def extract(self, document: ImageDocument) -> ExtractedMetadata:
        """Extract orientation-related metadata from a document."""
        pass


class IMetadataRewriter(ABC):
    """Interface for synchronizing metadata with new raster geometry."""

    @abstractmethod
    def rewrite(
        self,
        document: ImageDocument,
        transform: Transform,
        new_primary_dims: ImageDimensions,
        new_thumbnail_dims: Optional[ImageDimensions] = None
    ) -> ImageDocument:
        """Return a document whose metadata agrees with the new geometry."""
        pass


class IOrientationNormalizer(ABC):
    """Interface for the complete normalization operation."""

    @abstractmethod
    def normalize(self, data: bytes) -> bytes:
        """Normalize orientation of an encoded image."""
        pass

    @abstractmethod
    def normalize_stream(self, stream: BinaryIO) -> bytes:
        """Normalize orientation of an image read from a binary stream."""
        pass

    @abstractmethod
    def normalize_file(
        self,
        image_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None
    ) -> Path:
        """Normalize orientation of an image file."""
        pass
