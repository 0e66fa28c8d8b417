"""
JPEG container codec built on Pillow (pixels, ICC, XMP, comment, TIFF tag
types) and piexif (EXIF TIFF structure and embedded thumbnail).
"""
import io
import struct
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

import numpy as np
import piexif
from PIL import Image, JpegImagePlugin, TiffImagePlugin, UnidentifiedImageError

from ..core.interfaces import (
    IContainerCodec,
    EncodingHints,
    ImageDocument,
    MetadataTree,
    Raster,
    Thumbnail,
)
from ..core.errors import InvalidFormatError, EncodingError
from ..core.tags import Directory, is_pointer
from ..core.xmp import XmpPacket

logger = logging.getLogger(__name__)

TagKey = Tuple[Directory, int]

EXIF_HEADER = b"Exif\x00\x00"

# Byte through Double; piexif reads and writes nothing else.
_PIEXIF_TYPES = frozenset(range(1, 13))

# Interop tags piexif has no definition for, typed as cameras write them.
_DEFAULT_TYPES: Dict[TagKey, int] = {
    (Directory.INTEROP, 0x0002): piexif.TYPES.Undefined,
    (Directory.INTEROP, 0x1000): piexif.TYPES.Ascii,
    (Directory.INTEROP, 0x1001): piexif.TYPES.Short,
    (Directory.INTEROP, 0x1002): piexif.TYPES.Short,
}

# (child, parent, pointer tag)
_SUB_IFDS = (
    (Directory.EXIF, Directory.IMAGE, 0x8769),
    (Directory.GPS, Directory.IMAGE, 0x8825),
    (Directory.INTEROP, Directory.EXIF, 0xA005),
)

_TREE_DIRECTORIES = (Directory.IMAGE, Directory.EXIF, Directory.GPS, Directory.INTEROP)

_PARSE_ERRORS = (ValueError, SyntaxError, struct.error, IndexError, KeyError)

_registry_lock = threading.RLock()


@contextmanager
def piexif_tag_types(types: Dict[TagKey, int]) -> Iterator[None]:
    """
    Make piexif aware of tags missing from ``piexif.TAGS`` for one call.

    piexif skips unregistered tags on load and cannot dump them at all.
    Definitions added here are removed again on exit; the lock keeps
    concurrent codec calls from seeing each other's entries.
    """
    with _registry_lock:
        added = []
        try:
            for (directory, tag_id), tiff_type in types.items():
                table = piexif.TAGS[directory.value]
                if tag_id in table:
                    continue
                if tiff_type not in _PIEXIF_TYPES:
                    logger.warning(
                        f"Dropping {directory.value} tag {tag_id:#06x}: unsupported TIFF type {tiff_type}"
                    )
                    continue
                table[tag_id] = {"name": f"Tag{tag_id:#06x}", "type": tiff_type}
                added.append((table, tag_id))
            yield
        finally:
            for table, tag_id in added:
                del table[tag_id]


def scan_tag_types(tiff: bytes) -> Dict[TagKey, int]:
    """
    Read the stored TIFF type of every tag in an EXIF tree.

    Walks IFD0, its Exif/GPS/Interop sub-directories and IFD1 with
    Pillow's IFD reader, which keeps tags no registry knows about.
    """
    fp = io.BytesIO(tiff)
    head = fp.read(8)
    types: Dict[TagKey, int] = {}
    directories: Dict[Directory, TiffImagePlugin.ImageFileDirectory_v2] = {}

    root = TiffImagePlugin.ImageFileDirectory_v2(head)
    directories[Directory.IMAGE] = _read_ifd(fp, head, root.next)

    for child, parent, pointer in _SUB_IFDS:
        if parent not in directories or pointer not in directories[parent].tagtype:
            continue
        offset = _single_int(directories[parent].get(pointer))
        if offset is not None and 0 < offset < len(tiff):
            directories[child] = _read_ifd(fp, head, offset, group=pointer)

    first = directories[Directory.IMAGE].next
    if first and 0 < first < len(tiff):
        directories[Directory.THUMBNAIL] = _read_ifd(fp, head, first)

    for directory, ifd in directories.items():
        for tag_id, tiff_type in ifd.tagtype.items():
            types[(directory, tag_id)] = tiff_type
    return types


def _read_ifd(
    fp: io.BytesIO,
    head: bytes,
    offset: int,
    group: Optional[int] = None
) -> TiffImagePlugin.ImageFileDirectory_v2:
    ifd = TiffImagePlugin.ImageFileDirectory_v2(head, group=group)
    fp.seek(offset)
    ifd.load(fp)
    return ifd


def _single_int(value: Any) -> Optional[int]:
    if isinstance(value, tuple) and len(value) == 1:
        value = value[0]
    return value if isinstance(value, int) else None


@dataclass
class CodecConfig:
    """Re-encoding options for the JPEG codec."""
    quality: Optional[int] = None
    keep_subsampling: bool = True
    thumbnail_quality: int = 90
    optimize: bool = False


class JpegContainerCodec(IContainerCodec):
    """
    Decodes JPEG bytes into an ImageDocument and encodes it back.

    Re-encoding reuses the source quantization tables and chroma
    subsampling unless an explicit quality is configured. Every EXIF tag
    is kept with its stored TIFF type, including tags piexif does not
    define.
    """

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()

    # -- decoding -----------------------------------------------------------

    def decode(self, data: bytes) -> ImageDocument:
        """
        Decode JPEG bytes.

        Raises:
            InvalidFormatError: data is not a readable JPEG or its EXIF is corrupt
        """
        with self._open(data, "image") as img:
            raster = self._to_raster(img)
            encoding = self._encoding_hints(img)
            info = dict(img.info)

        metadata = None
        thumbnail = None
        exif_bytes = info.get("exif")
        if exif_bytes:
            metadata, thumbnail = self._parse_exif(exif_bytes)
        else:
            logger.debug("No EXIF segment found")

        xmp = info.get("xmp")

        return ImageDocument(
            raster=raster,
            metadata=metadata,
            thumbnail=thumbnail,
            icc_profile=info.get("icc_profile") or None,
            xmp=XmpPacket.from_bytes(xmp) if xmp else None,
            comment=info.get("comment") or None,
            encoding=encoding,
        )

    def _open(self, data: bytes, label: str) -> Image.Image:
        try:
            img = Image.open(io.BytesIO(data))
        except Image.DecompressionBombError as e:
            raise InvalidFormatError(f"Refusing oversized {label}: {e}") from e
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise InvalidFormatError(f"Cannot identify {label} data: {e}") from e

        if img.format != "JPEG":
            img.close()
            raise InvalidFormatError(f"Expected JPEG {label}, got {img.format or 'unknown format'}")

        try:
            img.load()
        except (OSError, SyntaxError, ValueError) as e:
            img.close()
            raise InvalidFormatError(f"Corrupt JPEG {label}: {e}") from e

        return img

    @staticmethod
    def _to_raster(img: Image.Image) -> Raster:
        return Raster(np.array(img), img.mode)

    @staticmethod
    def _encoding_hints(img: Image.Image) -> EncodingHints:
        quantization = getattr(img, "quantization", None)
        return EncodingHints(
            quantization={k: list(v) for k, v in quantization.items()} if quantization else None,
            subsampling=JpegImagePlugin.get_sampling(img),
            progressive=bool(img.info.get("progressive") or img.info.get("progression")),
        )

    def _parse_exif(self, exif_bytes: bytes):
        tiff = exif_bytes[len(EXIF_HEADER):] if exif_bytes.startswith(EXIF_HEADER) else exif_bytes
        try:
            types = scan_tag_types(tiff)
            with piexif_tag_types(types):
                exif_dict = piexif.load(EXIF_HEADER + tiff)
        except _PARSE_ERRORS as e:
            raise InvalidFormatError(f"Cannot parse EXIF metadata: {e}") from e

        directories = {
            directory: self._strip_pointers(directory, exif_dict.get(directory.value) or {})
            for directory in _TREE_DIRECTORIES
        }
        first = self._strip_pointers(Directory.THUMBNAIL, exif_dict.get("1st") or {})
        types_by_directory: Dict[Directory, Dict[int, int]] = {}
        for (directory, tag_id), tiff_type in types.items():
            types_by_directory.setdefault(directory, {})[tag_id] = tiff_type

        thumbnail = None
        thumbnail_bytes = exif_dict.get("thumbnail")
        if thumbnail_bytes:
            with self._open(thumbnail_bytes, "thumbnail") as img:
                thumbnail = Thumbnail(
                    raster=self._to_raster(img),
                    metadata=MetadataTree.from_directories({Directory.THUMBNAIL: first}, types_by_directory),
                    encoding=self._encoding_hints(img),
                )
        elif first:
            # IFD1 without an embedded JPEG stays with the primary tree
            directories[Directory.THUMBNAIL] = first

        return MetadataTree.from_directories(directories, types_by_directory), thumbnail

    @staticmethod
    def _strip_pointers(directory: Directory, entries: Dict[int, Any]) -> Dict[int, Any]:
        return {
            tag_id: value
            for tag_id, value in entries.items()
            if not is_pointer(directory, tag_id)
        }

    # -- encoding -----------------------------------------------------------

    def encode(self, document: ImageDocument) -> bytes:
        """
        Encode a document back into JPEG bytes.

        Raises:
            EncodingError: pixels, EXIF or any embedded segment cannot be written
        """
        try:
            options = self._save_options(document.encoding)
            if document.metadata is not None or document.thumbnail is not None:
                options["exif"] = self._dump_exif(document)
            if document.icc_profile:
                options["icc_profile"] = document.icc_profile
            if document.xmp is not None:
                options["xmp"] = document.xmp.to_bytes()
            if document.comment:
                options["comment"] = document.comment

            return self._save(self._to_image(document.raster), options)
        except Exception as e:
            logger.error(f"Error encoding image: {e}")
            raise EncodingError(f"Cannot encode image: {e}") from e

    def _save_options(self, hints: EncodingHints, quality: Optional[int] = None) -> Dict[str, Any]:
        options: Dict[str, Any] = {"optimize": self.config.optimize}
        quality = quality if quality is not None else self.config.quality

        if quality is not None:
            options["quality"] = quality
        elif hints.quantization:
            options["qtables"] = [hints.quantization[k] for k in sorted(hints.quantization)]

        if self.config.keep_subsampling and hints.subsampling != -1:
            options["subsampling"] = hints.subsampling
        if hints.progressive:
            options["progressive"] = True
        return options

    @staticmethod
    def _to_image(raster: Raster) -> Image.Image:
        pixels = np.ascontiguousarray(raster.pixels, dtype=np.uint8)
        return Image.frombytes(raster.mode, (raster.width, raster.height), pixels.tobytes())

    @staticmethod
    def _save(img: Image.Image, options: Dict[str, Any]) -> bytes:
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", **options)
        return buffer.getvalue()

    def _encode_thumbnail(self, thumbnail: Thumbnail) -> bytes:
        # Own tables when known, otherwise the configured thumbnail quality
        quality = None if thumbnail.encoding.quantization else self.config.thumbnail_quality
        options = self._save_options(thumbnail.encoding, quality)
        options.pop("progressive", None)
        return self._save(self._to_image(thumbnail.raster), options)

    def _dump_exif(self, document: ImageDocument) -> bytes:
        exif_dict: Dict[str, Any] = {directory.value: {} for directory in Directory}
        exif_dict["thumbnail"] = None
        types: Dict[TagKey, int] = dict(_DEFAULT_TYPES)

        if document.metadata is not None:
            self._collect(document.metadata, exif_dict, types)
        if document.thumbnail is not None:
            self._collect(document.thumbnail.metadata, exif_dict, types, Directory.THUMBNAIL)
            exif_dict["thumbnail"] = self._encode_thumbnail(document.thumbnail)

        with piexif_tag_types(types):
            for directory in Directory:
                ifd = exif_dict[directory.value]
                for tag_id, value in ifd.items():
                    if tag_id not in piexif.TAGS[directory.value]:
                        raise EncodingError(
                            f"No TIFF type known for {directory.value} tag {tag_id:#06x}"
                        )
                    ifd[tag_id] = _coerce_value(directory, tag_id, value)
            return piexif.dump(exif_dict)

    @staticmethod
    def _collect(
        tree: MetadataTree,
        exif_dict: Dict[str, Any],
        types: Dict[TagKey, int],
        target: Optional[Directory] = None
    ) -> None:
        for entry in tree.fields():
            directory = target or entry.directory
            exif_dict[directory.value][entry.tag_id] = entry.value
            tiff_type = tree.tag_type(entry.directory, entry.tag_id)
            if tiff_type is not None:
                types[(directory, entry.tag_id)] = tiff_type


def _coerce_value(directory: Directory, tag_id: int, value: Any) -> Any:
    """Convert values stored with a non-standard TIFF type to what piexif writes."""
    tag_info = piexif.TAGS[directory.value][tag_id]
    if tag_info["type"] != piexif.TYPES.Undefined:
        return value
    if isinstance(value, int):
        logger.warning(f"Coercing {tag_info['name']} from int to bytes")
        return bytes([value])
    if isinstance(value, tuple) and all(isinstance(v, int) for v in value):
        logger.warning(f"Coercing {tag_info['name']} from byte tuple to bytes")
        return bytes(value)
    return value
