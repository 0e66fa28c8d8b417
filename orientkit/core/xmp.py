"""
XMP packet access limited to the attributes that mirror EXIF tags.

The packet text is kept verbatim; only the values of recognized
attributes are ever replaced, so everything else round-trips untouched.
"""
import re
from typing import Dict, Iterable, Mapping, Optional

from .tags import XMP_ATTRIBUTES


def _attribute_pattern(name: str) -> "re.Pattern[str]":
    # tiff:Orientation="6" or tiff:Orientation='6'
    return re.compile(
        r'(?P<prefix>(?<![\w:.-])' + re.escape(name) + r'\s*=\s*(?P<quote>["\']))'
        r'(?P<value>[^"\']*)'
        r'(?P=quote)'
    )


def _element_pattern(name: str) -> "re.Pattern[str]":
    # <tiff:Orientation>6</tiff:Orientation>
    return re.compile(
        r'(?P<prefix><' + re.escape(name) + r'(?:\s[^>]*)?>)'
        r'(?P<value>[^<]*)'
        r'(?P<suffix></' + re.escape(name) + r'>)'
    )


class XmpPacket:
    """Text XMP packet exposing its EXIF-mirroring attributes."""

    def __init__(self, text: str, names: Iterable[str] = XMP_ATTRIBUTES):
        self.text = text
        self.names = tuple(names)

    @classmethod
    def from_bytes(cls, data: bytes) -> "XmpPacket":
        return cls(data.decode("utf-8", errors="surrogateescape"))

    def to_bytes(self) -> bytes:
        return self.text.encode("utf-8", errors="surrogateescape")

    def _find(self, name: str) -> Optional["re.Match[str]"]:
        return (
            _attribute_pattern(name).search(self.text)
            or _element_pattern(name).search(self.text)
        )

    @property
    def attributes(self) -> Dict[str, str]:
        """Recognized attribute names present in the packet, with their values."""
        found = {}
        for name in self.names:
            match = self._find(name)
            if match:
                found[name] = match.group("value").strip()
        return found

    def get(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    def __contains__(self, name: str) -> bool:
        return self._find(name) is not None

    def with_values(self, values: Mapping[str, str]) -> "XmpPacket":
        """
        Return a new packet with the given attributes updated.

        Names missing from the packet are ignored, never added.
        """
        text = self.text
        for name, value in values.items():
            text = _attribute_pattern(name).sub(
                lambda m: f"{m.group('prefix')}{value}{m.group('quote')}", text
            )
            text = _element_pattern(name).sub(
                lambda m: f"{m.group('prefix')}{value}{m.group('suffix')}", text
            )
        return XmpPacket(text, self.names)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, XmpPacket):
            return NotImplemented
        return self.text == other.text

    def __repr__(self) -> str:
        return f"XmpPacket({self.attributes!r})"
