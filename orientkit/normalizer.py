"""
OrientationNormalizer - Main facade for EXIF orientation normalization.
Orchestrates decoding, validation, raster transforms, metadata rewriting
and re-encoding. Follows Facade Pattern for simplified API.
"""
from pathlib import Path
from typing import BinaryIO, Optional, Union
from dataclasses import dataclass
from enum import Enum
import logging

from .core.interfaces import (
    IContainerCodec,
    IOrientationNormalizer,
    ImageDocument,
    Transform,
)
from .core.errors import OrientationError, InvalidFormatError, EncodingError
from .codec.jpeg import JpegContainerCodec, CodecConfig
from .image.orientation import TransformTable
from .image.raster import RasterTransformer
from .image.metadata import MetadataExtractor
from .image.rewriter import MetadataRewriter

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """Linear states of a single normalization pass."""
    DECODED = "decoded"
    VALIDATED = "validated"
    TRANSFORMED = "transformed"
    REWRITTEN = "rewritten"
    REASSEMBLED = "reassembled"


@dataclass
class NormalizerConfig:
    """Configuration for orientation normalization."""
    jpeg_quality: Optional[int] = None
    keep_subsampling: bool = True
    thumbnail_quality: int = 90
    optimize: bool = False

    def __post_init__(self):
        if self.jpeg_quality is not None and not 1 <= self.jpeg_quality <= 95:
            raise ValueError(f"jpeg_quality must be between 1 and 95, got {self.jpeg_quality}")
        if not 1 <= self.thumbnail_quality <= 95:
            raise ValueError(f"thumbnail_quality must be between 1 and 95, got {self.thumbnail_quality}")

    def codec_options(self) -> CodecConfig:
        return CodecConfig(
            quality=self.jpeg_quality,
            keep_subsampling=self.keep_subsampling,
            thumbnail_quality=self.thumbnail_quality,
            optimize=self.optimize,
        )


class OrientationNormalizer(IOrientationNormalizer):
    """
    Main facade for normalizing EXIF orientation.
    Each call is independent; the result is either the complete
    normalized image or exactly one OrientationError.

    Example:
        normalizer = OrientationNormalizer()

        # Bytes in, bytes out
        upright = normalizer.normalize(jpeg_bytes)

        # Files and streams
        normalizer.normalize_file(Path("photo.jpg"), Path("photo_upright.jpg"))
        with open("photo.jpg", "rb") as f:
            upright = normalizer.normalize_stream(f)
    """

    def __init__(
        self,
        config: Optional[NormalizerConfig] = None,
        codec: Optional[IContainerCodec] = None
    ):
        self.config = config or NormalizerConfig()

        self.codec = codec or JpegContainerCodec(self.config.codec_options())
        self.extractor = MetadataExtractor()
        self.transformer = RasterTransformer()
        self.rewriter = MetadataRewriter()

    def normalize(self, data: bytes) -> bytes:
        """
        Normalize the orientation of an encoded JPEG.

        Args:
            data: JPEG bytes carrying EXIF orientation

        Returns:
            JPEG bytes with an upright raster and Orientation = 1

        Raises:
            InvalidFormatError, MissingExifError, MissingOrientationError,
            UnsupportedOrientationError, EncodingError
        """
        try:
            document = self.codec.decode(data)
            self._enter(PipelineState.DECODED)

            normalized = self.normalize_document(document)

            output = self._encode(normalized)
            self._enter(PipelineState.REASSEMBLED)
            return output
        except OrientationError as e:
            logger.error(f"Orientation normalization failed: {e}")
            raise

    def normalize_document(self, document: ImageDocument) -> ImageDocument:
        """Run validation, transform and rewrite on an already decoded document."""
        extracted = self.extractor.extract(document)
        self._enter(PipelineState.VALIDATED)

        transform = TransformTable.resolve(extracted.orientation)
        transformed = self.transform_document(document, transform)
        self._enter(PipelineState.TRANSFORMED)

        rewritten = self.rewriter.rewrite(
            transformed,
            transform,
            transformed.dimensions,
            transformed.thumbnail.dimensions if transformed.thumbnail is not None else None,
        )
        self._enter(PipelineState.REWRITTEN)

        source, target = document.dimensions, rewritten.dimensions
        logger.info(
            f"Normalized orientation {extracted.orientation.value}: "
            f"{source.width}x{source.height} -> {target.width}x{target.height}"
        )
        return rewritten

    def transform_document(self, document: ImageDocument, transform: Transform) -> ImageDocument:
        """Apply one transform to the primary raster and, if present, the thumbnail raster."""
        result = document.copy()
        result.raster = self.transformer.apply(document.raster, transform)
        if result.thumbnail is not None:
            result.thumbnail.raster = self.transformer.apply(document.thumbnail.raster, transform)
        return result

    def normalize_stream(self, stream: BinaryIO) -> bytes:
        """Normalize an image read from a binary stream."""
        return self.normalize(stream.read())

    def normalize_file(
        self,
        image_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Normalize an image file.

        Args:
            image_path: Source image path
            output_path: Output path (defaults to overwriting source)

        Returns:
            Path to the normalized image

        Raises:
            FileNotFoundError: source does not exist (not wrapped)
            InvalidFormatError: source is a directory or not a JPEG
        """
        image_path = Path(image_path)
        output_path = Path(output_path) if output_path else image_path

        if image_path.is_dir():
            raise InvalidFormatError(f"Not an image file: {image_path}")

        output = self.normalize(image_path.read_bytes())
        output_path.write_bytes(output)

        logger.info(f"Wrote {output_path}")
        return output_path

    def _encode(self, document: ImageDocument) -> bytes:
        try:
            return self.codec.encode(document)
        except EncodingError:
            raise
        except Exception as e:
            raise EncodingError(f"Cannot encode image: {e}") from e

    @staticmethod
    def _enter(state: PipelineState) -> None:
        logger.debug(f"Pipeline state: {state.name}")


def normalize_orientation(data: bytes, config: Optional[NormalizerConfig] = None) -> bytes:
    """Normalize orientation of JPEG bytes with a one-off normalizer."""
    return OrientationNormalizer(config).normalize(data)
