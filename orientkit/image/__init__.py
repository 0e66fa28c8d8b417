"""
Orientation engine components for orientkit.
"""
from .orientation import TransformTable, resolve_transform
from .raster import RasterTransformer
from .metadata import MetadataExtractor
from .rewriter import MetadataRewriter

__all__ = [
    'TransformTable',
    'resolve_transform',
    'RasterTransformer',
    'MetadataExtractor',
    'MetadataRewriter',
]
