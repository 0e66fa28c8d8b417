"""
Container codecs for orientkit.
"""
from .jpeg import JpegContainerCodec, CodecConfig

__all__ = ['JpegContainerCodec', 'CodecConfig']
