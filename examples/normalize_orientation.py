"""
Example: EXIF Orientation Normalization with orientkit

This example demonstrates how to:
- Normalize a JPEG so its pixels are stored upright
- Inspect what a given orientation code does
- Run the codec-free pipeline on a decoded document
"""
import logging
from pathlib import Path
from orientkit import (
    OrientationNormalizer,
    NormalizerConfig,
    JpegContainerCodec,
    TransformTable,
    OrientationError,
)


def normalize_folder(folder: Path, output: Path):
    """Normalize every JPEG of a folder into another folder."""
    output.mkdir(parents=True, exist_ok=True)
    normalizer = OrientationNormalizer(NormalizerConfig(thumbnail_quality=85))

    for image_path in sorted(folder.glob("*.jp*g")):
        try:
            result = normalizer.normalize_file(image_path, output / image_path.name)
            print(f"Normalized: {result}")
        except OrientationError as e:
            print(f"Skipped {image_path.name}: {type(e).__name__}: {e}")


def describe_codes():
    """Print the transform behind each orientation code."""
    for code, transform in TransformTable.transforms().items():
        action = f"rotate {transform.rotation}"
        if transform.mirror:
            action = f"mirror, then {action}"
        print(f"{code.value} {code.name}: {action}")


def inspect_document(image_path: Path):
    """Decode, normalize and report without writing anything."""
    codec = JpegContainerCodec()
    document = codec.decode(image_path.read_bytes())

    result = OrientationNormalizer(codec=codec).normalize_document(document)
    print(f"Before: {document.dimensions.width}x{document.dimensions.height}")
    print(f"After: {result.dimensions.width}x{result.dimensions.height}")
    print(f"GPS kept: {result.gps is not None}")
    if result.thumbnail is not None:
        print(f"Thumbnail: {result.thumbnail.dimensions.width}x{result.thumbnail.dimensions.height}")


if __name__ == "__main__":
    import sys

    logging.basicConfig(level=logging.INFO)

    if len(sys.argv) < 3:
        print("Usage: python normalize_orientation.py <folder_path> <output_path>")
        sys.exit(1)

    folder = Path(sys.argv[1])
    if not folder.exists():
        print(f"Folder not found: {folder}")
        sys.exit(1)

    describe_codes()
    normalize_folder(folder, Path(sys.argv[2]))
