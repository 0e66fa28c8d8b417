"""
Exact geometric transforms on pixel rasters.
Every output pixel is a copy of exactly one input pixel; nothing is resampled.
"""
import numpy as np
import logging

from ..core.interfaces import IRasterTransformer, Raster, Transform

logger = logging.getLogger(__name__)


class RasterTransformer(IRasterTransformer):
    """Mirrors and rotates rasters as pure index permutations."""

    def apply(self, raster: Raster, transform: Transform) -> Raster:
        """
        Apply a transform to a raster.

        The mirror (column x <-> column width-1-x) runs first, then the
        clockwise rotation. 90 and 270 degree rotations swap width and height.
        """
        pixels = raster.pixels

        if transform.mirror:
            pixels = self.mirror(pixels)

        if transform.rotation:
            pixels = self.rotate(pixels, transform.rotation)

        logger.debug(
            f"Transformed raster {raster.width}x{raster.height} -> "
            f"{pixels.shape[1]}x{pixels.shape[0]} (rotation={transform.rotation}, mirror={transform.mirror})"
        )
        return Raster(np.ascontiguousarray(pixels), raster.mode)

    @staticmethod
    def mirror(pixels: np.ndarray) -> np.ndarray:
        """Reflect about the vertical axis."""
        return pixels[:, ::-1]

    @staticmethod
    def rotate(pixels: np.ndarray, degrees: int) -> np.ndarray:
        """Rotate clockwise by a multiple of 90 degrees."""
        # np.rot90 turns counter-clockwise for positive k
        return np.rot90(pixels, k=-(degrees // 90), axes=(0, 1))
