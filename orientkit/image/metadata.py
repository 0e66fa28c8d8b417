"""
Orientation metadata extraction and validation.
"""
from typing import Any, Optional
import logging

from ..core.interfaces import (
    IMetadataExtractor,
    ImageDocument,
    ExtractedMetadata,
    MetadataTree,
    OrientationCode,
)
from ..core.errors import (
    MissingExifError,
    MissingOrientationError,
    UnsupportedOrientationError,
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
)

logger = logging.getLogger(__name__)


def _single_value(value: Any) -> Any:
    """Unwrap one-element tuples the container uses for counted values."""
    if isinstance(value, (tuple, list)) and len(value) == 1:
        return value[0]
    return value


class MetadataExtractor(IMetadataExtractor):
    """Reads orientation, dimension tags and optional stores from a document."""

    def extract(self, document: ImageDocument) -> ExtractedMetadata:
        """
        Extract and validate orientation-related metadata.

        Raises:
            MissingExifError: document has no EXIF metadata
            MissingOrientationError: EXIF has no Orientation tag
            UnsupportedOrientationError: Orientation is not one of 1-8
        """
        metadata = document.metadata
        if metadata is None:
            raise MissingExifError("Image has no EXIF metadata")

        orientation = self.read_orientation(metadata)

        extracted = ExtractedMetadata(
            orientation=orientation,
            exif_width=self._optional_int(metadata, EXIF_IMAGE_WIDTH),
            exif_height=self._optional_int(metadata, EXIF_IMAGE_LENGTH),
            image_width=self._optional_int(metadata, IMAGE_WIDTH),
            image_height=self._optional_int(metadata, IMAGE_LENGTH),
            related_image_width=self._optional_int(metadata, RELATED_IMAGE_WIDTH),
            related_image_height=self._optional_int(metadata, RELATED_IMAGE_LENGTH),
            thumbnail=document.thumbnail,
            gps=document.gps,
            xmp=document.xmp,
            icc_profile=document.icc_profile,
        )

        logger.debug(
            f"Extracted orientation={orientation.value} "
            f"thumbnail={extracted.thumbnail is not None} "
            f"gps={extracted.gps is not None} xmp={extracted.xmp is not None}"
        )
        return extracted

    @staticmethod
    def read_orientation(metadata: MetadataTree) -> OrientationCode:
        if ORIENTATION not in metadata:
            raise MissingOrientationError("EXIF metadata has no Orientation tag")

        value = _single_value(metadata.get(ORIENTATION))
        if isinstance(value, bool) or not isinstance(value, int):
            raise UnsupportedOrientationError(value)

        try:
            return OrientationCode(value)
        except ValueError:
            raise UnsupportedOrientationError(value) from None

    @staticmethod
    def _optional_int(metadata: MetadataTree, tag: Tag) -> Optional[int]:
        if tag not in metadata:
            return None
        value = _single_value(metadata.get(tag))
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        logger.debug(f"Ignoring non-integer {tag.name}: {value!r}")
        return None
