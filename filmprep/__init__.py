"""Photograph preparation pipeline: border, aspect fill and longest-side resize."""

__version__ = "0.1.0"

from .configuration import BatchPreset, TransformRequest
from .image_processing import add_uniform_border, fill_to_aspect_ratio, resize_longest_side
from .pipeline import apply_and_save, apply_transforms
from .raster import DecodeError, EncodeError, ImageProcessingError, RasterInvariantError

__all__ = [
    "BatchPreset",
    "DecodeError",
    "EncodeError",
    "ImageProcessingError",
    "RasterInvariantError",
    "TransformRequest",
    "add_uniform_border",
    "apply_and_save",
    "apply_transforms",
    "fill_to_aspect_ratio",
    "resize_longest_side",
]
