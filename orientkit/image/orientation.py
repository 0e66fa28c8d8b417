"""
EXIF orientation code to geometric transform mapping.
Follows Single Responsibility Principle - the only place orientation semantics live.
"""
from types import MappingProxyType
from typing import Mapping
import logging

from ..core.interfaces import OrientationCode, Transform
from ..core.errors import UnsupportedOrientationError

logger = logging.getLogger(__name__)


class TransformTable:
    """Resolves EXIF orientation codes to the transform that makes them upright."""

    _TRANSFORMS: Mapping[OrientationCode, Transform] = MappingProxyType({
        OrientationCode.NORMAL: Transform(rotation=0, mirror=False),
        OrientationCode.MIRROR_HORIZONTAL: Transform(rotation=0, mirror=True),
        OrientationCode.ROTATE_180: Transform(rotation=180, mirror=False),
        OrientationCode.MIRROR_VERTICAL: Transform(rotation=180, mirror=True),
        OrientationCode.MIRROR_HORIZONTAL_ROTATE_90: Transform(rotation=90, mirror=True),
        OrientationCode.ROTATE_90: Transform(rotation=90, mirror=False),
        OrientationCode.MIRROR_HORIZONTAL_ROTATE_270: Transform(rotation=270, mirror=True),
        OrientationCode.ROTATE_270: Transform(rotation=270, mirror=False),
    })

    @classmethod
    def resolve(cls, code: int) -> Transform:
        """
        Get the transform for an orientation code.

        Args:
            code: EXIF orientation value (1-8)

        Returns:
            Transform to apply to the stored raster

        Raises:
            UnsupportedOrientationError: code is not one of the eight EXIF values
        """
        try:
            return cls._TRANSFORMS[OrientationCode(code)]
        except ValueError:
            raise UnsupportedOrientationError(code) from None

    @classmethod
    def codes(cls) -> tuple:
        return tuple(cls._TRANSFORMS)

    @classmethod
    def transforms(cls) -> Mapping[OrientationCode, Transform]:
        return cls._TRANSFORMS


def resolve_transform(code: int) -> Transform:
    """Shortcut for TransformTable.resolve."""
    return TransformTable.resolve(code)
