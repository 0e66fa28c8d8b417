"""
Pytest configuration and fixtures for orientkit tests.
"""
import io
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Optional, Tuple
from PIL import Image
import numpy as np
import piexif

from orientkit import (
    ImageDocument,
    MetadataTree,
    Raster,
    Thumbnail,
    XmpPacket,
    Directory,
)
from orientkit.codec.jpeg import piexif_tag_types


QUADRANT_COLORS = {
    "top_left": (255, 0, 0),
    "top_right": (0, 255, 0),
    "bottom_left": (0, 0, 255),
    "bottom_right": (255, 255, 255),
}

GPS_FIELDS = {
    piexif.GPSIFD.GPSVersionID: (2, 2, 0, 0),
    piexif.GPSIFD.GPSLatitudeRef: b"N",
    piexif.GPSIFD.GPSLatitude: ((43, 1), (39, 1), (1234, 100)),
    piexif.GPSIFD.GPSLongitudeRef: b"W",
    piexif.GPSIFD.GPSLongitude: ((79, 1), (23, 1), (5678, 100)),
}

ICC_PROFILE = b"\x00\x00\x01\x00orientkit-test-profile" * 16

# Tags piexif has no definition for
PRIVATE_TAG = 0x9999
COMPOSITE_IMAGE_TAG = 0xA460

# Interop tags piexif has no definition for
RELATED_IMAGE_TYPES = {
    (Directory.INTEROP, 0x1001): piexif.TYPES.Short,
    (Directory.INTEROP, 0x1002): piexif.TYPES.Short,
}


def xmp_packet(**attributes: str) -> str:
    attrs = "\n    ".join(f'{name}="{value}"' for name, value in attributes.items())
    return (
        '<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>\n'
        '<x:xmpmeta xmlns:x="adobe:ns:meta/">\n'
        ' <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">\n'
        '  <rdf:Description rdf:about=""\n'
        '    xmlns:tiff="http://ns.adobe.com/tiff/1.0/"\n'
        '    xmlns:exif="http://ns.adobe.com/exif/1.0/"\n'
        '    xmlns:xmp="http://ns.adobe.com/xap/1.0/"\n'
        '    xmp:CreatorTool="orientkit tests"\n'
        f'    {attrs}/>\n'
        ' </rdf:RDF>\n'
        '</x:xmpmeta>\n'
        '<?xpacket end="w"?>'
    )


def quadrant_image(size: Tuple[int, int]) -> Image.Image:
    """Image split into four solid quadrants of distinct colors."""
    width, height = size
    img = Image.new("RGB", size)
    half_w, half_h = width // 2, height // 2
    img.paste(QUADRANT_COLORS["top_left"], (0, 0, half_w, half_h))
    img.paste(QUADRANT_COLORS["top_right"], (half_w, 0, width, half_h))
    img.paste(QUADRANT_COLORS["bottom_left"], (0, half_h, half_w, height))
    img.paste(QUADRANT_COLORS["bottom_right"], (half_w, half_h, width, height))
    return img


def quadrant_color(img: Image.Image, quadrant: str) -> Tuple[int, int, int]:
    """Color at the center of a quadrant."""
    width, height = img.size
    x = width // 4 if "left" in quadrant else 3 * width // 4
    y = height // 4 if "top" in quadrant else 3 * height // 4
    return img.convert("RGB").getpixel((x, y))


def colors_match(actual, expected, tolerance: int = 40) -> bool:
    return all(abs(a - e) <= tolerance for a, e in zip(actual, expected))


def build_jpeg(
    size: Tuple[int, int] = (160, 120),
    orientation: Optional[int] = 6,
    exif: bool = True,
    exif_dims: bool = True,
    image_dims: bool = False,
    related_dims: Optional[str] = None,
    gps: bool = False,
    thumbnail_size: Optional[Tuple[int, int]] = None,
    thumbnail_dims: bool = False,
    xmp: Optional[str] = None,
    icc_profile: Optional[bytes] = None,
) -> bytes:
    """
    Build an in-memory JPEG with the requested metadata stores.

    related_dims: None, "both", "width" or "height"
    """
    width, height = size
    save_kwargs = {"quality": 95}

    if exif:
        exif_dict = {"0th": {}, "Exif": {}, "GPS": {}, "Interop": {}, "1st": {}, "thumbnail": None}
        if orientation is not None:
            exif_dict["0th"][piexif.ImageIFD.Orientation] = orientation
        exif_dict["0th"][piexif.ImageIFD.Make] = b"TestCamera"
        if image_dims:
            exif_dict["0th"][piexif.ImageIFD.ImageWidth] = width
            exif_dict["0th"][piexif.ImageIFD.ImageLength] = height
        if exif_dims:
            exif_dict["Exif"][piexif.ExifIFD.PixelXDimension] = width
            exif_dict["Exif"][piexif.ExifIFD.PixelYDimension] = height
        if related_dims:
            exif_dict["Interop"][piexif.InteropIFD.InteroperabilityIndex] = b"R98"
            if related_dims in ("both", "width"):
                exif_dict["Interop"][0x1001] = width
            if related_dims in ("both", "height"):
                exif_dict["Interop"][0x1002] = height
        if gps:
            exif_dict["GPS"] = dict(GPS_FIELDS)
        if thumbnail_size:
            buffer = io.BytesIO()
            quadrant_image(thumbnail_size).save(buffer, "JPEG", quality=95)
            exif_dict["thumbnail"] = buffer.getvalue()
            exif_dict["1st"][piexif.ImageIFD.Compression] = 6
            if thumbnail_dims:
                exif_dict["1st"][piexif.ImageIFD.ImageWidth] = thumbnail_size[0]
                exif_dict["1st"][piexif.ImageIFD.ImageLength] = thumbnail_size[1]
        with piexif_tag_types(RELATED_IMAGE_TYPES):
            save_kwargs["exif"] = piexif.dump(exif_dict)

    if xmp is not None:
        save_kwargs["xmp"] = xmp.encode("utf-8")
    if icc_profile is not None:
        save_kwargs["icc_profile"] = icc_profile

    buffer = io.BytesIO()
    quadrant_image(size).save(buffer, "JPEG", **save_kwargs)
    return buffer.getvalue()


def coordinate_raster(width: int, height: int) -> Raster:
    """Raster whose pixel at (x, y) stores (y, x), so every pixel is unique."""
    ys, xs = np.mgrid[0:height, 0:width]
    return Raster(np.stack([ys, xs], axis=-1).astype(np.int32), "RGB")


def make_document(
    width: int = 8,
    height: int = 6,
    orientation: Optional[int] = 6,
    fields: Optional[dict] = None,
    thumbnail: Optional[Tuple[int, int]] = None,
    thumbnail_fields: Optional[dict] = None,
    xmp: Optional[str] = None,
    icc_profile: Optional[bytes] = None,
    with_exif: bool = True,
) -> ImageDocument:
    """Codec-free document with a coordinate raster."""
    metadata = None
    if with_exif:
        directories = {Directory.IMAGE: {}}
        if orientation is not None:
            directories[Directory.IMAGE][0x0112] = orientation
        for directory, entries in (fields or {}).items():
            directories.setdefault(directory, {}).update(entries)
        metadata = MetadataTree.from_directories(directories)

    thumb = None
    if thumbnail:
        thumb = Thumbnail(
            raster=coordinate_raster(*thumbnail),
            metadata=MetadataTree.from_directories({Directory.THUMBNAIL: dict(thumbnail_fields or {})}),
        )

    return ImageDocument(
        raster=coordinate_raster(width, height),
        metadata=metadata,
        thumbnail=thumb,
        icc_profile=icc_profile,
        xmp=XmpPacket(xmp) if xmp is not None else None,
    )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="orientkit_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def jpeg_factory():
    """Factory building JPEG bytes with configurable EXIF/XMP/ICC stores."""
    return build_jpeg


@pytest.fixture
def document_factory():
    """Factory building codec-free ImageDocuments."""
    return make_document


@pytest.fixture
def rotated_jpeg() -> bytes:
    """Landscape JPEG tagged orientation 6 with EXIF dimensions."""
    return build_jpeg(size=(160, 120), orientation=6)


@pytest.fixture
def full_jpeg() -> bytes:
    """JPEG carrying every metadata store the engine touches or passes through."""
    return build_jpeg(
        size=(160, 120),
        orientation=6,
        image_dims=True,
        related_dims="both",
        gps=True,
        thumbnail_size=(32, 24),
        thumbnail_dims=True,
        xmp=xmp_packet(**{
            "tiff:Orientation": "6",
            "tiff:ImageWidth": "160",
            "tiff:ImageLength": "120",
            "exif:PixelXDimension": "160",
            "exif:PixelYDimension": "120",
            "xmp:ThumbnailsWidth": "32",
            "xmp:ThumbnailsHeight": "24",
        }),
        icc_profile=ICC_PROFILE,
    )


@pytest.fixture
def no_exif_jpeg() -> bytes:
    """Valid JPEG without any EXIF segment."""
    return build_jpeg(exif=False)


@pytest.fixture
def png_bytes() -> bytes:
    """A PNG image, i.e. a different container format."""
    buffer = io.BytesIO()
    Image.new("RGB", (40, 30), color="blue").save(buffer, "PNG")
    return buffer.getvalue()


@pytest.fixture
def sample_image(temp_dir, rotated_jpeg) -> Path:
    """Rotated JPEG written to disk."""
    image_path = temp_dir / "rotated.jpg"
    image_path.write_bytes(rotated_jpeg)
    return image_path


@pytest.fixture
def empty_dir(temp_dir) -> Path:
    """Create an empty directory."""
    empty = temp_dir / "empty"
    empty.mkdir()
    return empty


@pytest.fixture
def private_tags_jpeg() -> bytes:
    """JPEG whose EXIF carries tags piexif has no definition for."""
    exif = Image.Exif()
    exif[0x0112] = 6
    exif[0x010F] = "Cam"
    exif[PRIVATE_TAG] = 42
    exif.get_ifd(0x8769)[COMPOSITE_IMAGE_TAG] = 2
    buffer = io.BytesIO()
    quadrant_image((160, 120)).save(buffer, "JPEG", quality=95, exif=exif.tobytes())
    return buffer.getvalue()
