"""
Metadata synchronization after a geometric transform.

Every store that repeats width, height or orientation (IFD0, Exif IFD,
Interop IFD, thumbnail IFD1 and the XMP packet) is brought in line with
the transformed rasters. Tags that were absent stay absent.
"""
from typing import Dict, Optional
import logging

from ..core.interfaces import (
    IMetadataRewriter,
    ImageDimensions,
    ImageDocument,
    MetadataTree,
    OrientationCode,
    Thumbnail,
    Transform,
)
from ..core.tags import (
    Tag,
    ORIENTATION,
    IMAGE_WIDTH,
    IMAGE_LENGTH,
    EXIF_IMAGE_WIDTH,
    EXIF_IMAGE_LENGTH,
    RELATED_IMAGE_WIDTH,
    RELATED_IMAGE_LENGTH,
    THUMBNAIL_ORIENTATION,
    THUMBNAIL_WIDTH,
    THUMBNAIL_LENGTH,
    XMP_ORIENTATION,
    XMP_IMAGE_WIDTH,
    XMP_IMAGE_LENGTH,
    XMP_PIXEL_X_DIMENSION,
    XMP_PIXEL_Y_DIMENSION,
    XMP_THUMBNAIL_WIDTH,
    XMP_THUMBNAIL_HEIGHT,
)
from ..core.xmp import XmpPacket

logger = logging.getLogger(__name__)


class MetadataRewriter(IMetadataRewriter):
    """Rewrites orientation and dimension metadata for transformed rasters."""

    def rewrite(
        self,
        document: ImageDocument,
        transform: Transform,
        new_primary_dims: ImageDimensions,
        new_thumbnail_dims: Optional[ImageDimensions] = None
    ) -> ImageDocument:
        """
        Produce a document whose metadata agrees with the new geometry.

        Only metadata changes; rasters are carried over as they are. When
        ``new_thumbnail_dims`` is omitted it is derived by applying
        ``transform`` to the thumbnail raster's current size, so callers
        that already transformed the thumbnail must pass it explicitly.
        GPS, ICC profile and unrelated tags are carried over as-is.
        """
        result = document.copy()

        if result.metadata is not None:
            self.reset_orientation(result.metadata)
            self.rewrite_dimensions(result.metadata, new_primary_dims)
            self.rewrite_related_dimensions(result.metadata, new_primary_dims)

        if result.thumbnail is not None:
            if new_thumbnail_dims is None:
                new_thumbnail_dims = transform.output_dimensions(result.thumbnail.dimensions)
            self.rewrite_thumbnail(result.thumbnail, new_thumbnail_dims)
        else:
            new_thumbnail_dims = None

        if result.xmp is not None:
            result.xmp = self.rewrite_xmp(result.xmp, new_primary_dims, new_thumbnail_dims)

        logger.debug(
            f"Rewrote metadata for rotation={transform.rotation} mirror={transform.mirror}: "
            f"{new_primary_dims.width}x{new_primary_dims.height}"
        )
        return result

    @staticmethod
    def reset_orientation(metadata: MetadataTree) -> None:
        metadata.set(ORIENTATION, int(OrientationCode.NORMAL))

    @staticmethod
    def rewrite_dimensions(metadata: MetadataTree, dimensions: ImageDimensions) -> None:
        """Overwrite Exif PixelX/YDimension and IFD0 ImageWidth/Length where present."""
        _replace_if_present(metadata, EXIF_IMAGE_WIDTH, dimensions.width)
        _replace_if_present(metadata, EXIF_IMAGE_LENGTH, dimensions.height)
        _replace_if_present(metadata, IMAGE_WIDTH, dimensions.width)
        _replace_if_present(metadata, IMAGE_LENGTH, dimensions.height)

    @staticmethod
    def rewrite_related_dimensions(metadata: MetadataTree, dimensions: ImageDimensions) -> None:
        """Overwrite Interop RelatedImageWidth/Length where present."""
        _replace_if_present(metadata, RELATED_IMAGE_WIDTH, dimensions.width)
        _replace_if_present(metadata, RELATED_IMAGE_LENGTH, dimensions.height)

    @staticmethod
    def rewrite_thumbnail(thumbnail: Thumbnail, dimensions: ImageDimensions) -> None:
        """Overwrite the thumbnail's own IFD1 size and orientation where present."""
        _replace_if_present(thumbnail.metadata, THUMBNAIL_WIDTH, dimensions.width)
        _replace_if_present(thumbnail.metadata, THUMBNAIL_LENGTH, dimensions.height)
        _replace_if_present(thumbnail.metadata, THUMBNAIL_ORIENTATION, int(OrientationCode.NORMAL))

    @staticmethod
    def rewrite_xmp(
        xmp: XmpPacket,
        dimensions: ImageDimensions,
        thumbnail_dimensions: Optional[ImageDimensions] = None
    ) -> XmpPacket:
        """Update XMP attributes that mirror rewritten binary tags."""
        values: Dict[str, str] = {
            XMP_ORIENTATION: str(int(OrientationCode.NORMAL)),
            XMP_IMAGE_WIDTH: str(dimensions.width),
            XMP_IMAGE_LENGTH: str(dimensions.height),
            XMP_PIXEL_X_DIMENSION: str(dimensions.width),
            XMP_PIXEL_Y_DIMENSION: str(dimensions.height),
        }
        if thumbnail_dimensions is not None:
            values[XMP_THUMBNAIL_WIDTH] = str(thumbnail_dimensions.width)
            values[XMP_THUMBNAIL_HEIGHT] = str(thumbnail_dimensions.height)

        present = xmp.attributes
        updates = {name: value for name, value in values.items() if name in present}
        if not updates:
            return xmp
        return xmp.with_values(updates)


def _replace_if_present(metadata: MetadataTree, tag: Tag, value: int) -> None:
    if tag in metadata:
        metadata.set(tag, value)
    else:
        logger.debug(f"{tag.directory.value}/{tag.name} absent, left untouched")
