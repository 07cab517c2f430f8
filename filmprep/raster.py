"""Decoding and encoding of in-memory RGBA raster buffers."""

import os
import shutil
import tempfile
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from rich.console import Console

console = Console()

RASTER_MODE = "RGBA"
FILL_COLOR = (255, 255, 255, 255)
ALPHA_CAPABLE_FORMATS = frozenset({"PNG", "WEBP", "TIFF", "TGA", "ICO"})


class ImageProcessingError(Exception):
    """Exception for image processing operations."""


class DecodeError(ImageProcessingError):
    """Source image is missing, unreadable or in an unsupported format."""


class EncodeError(ImageProcessingError):
    """Destination is unwritable or cannot hold the pixel data."""


class RasterInvariantError(ImageProcessingError):
    """A transform produced a buffer with non-positive dimensions."""


def validate_image_dimensions_are_positive(width: int, height: int) -> None:
    """Verify image dimensions are positive integers."""
    if width <= 0:
        raise RasterInvariantError(f"Image width must be positive, got {width}")
    if height <= 0:
        raise RasterInvariantError(f"Image height must be positive, got {height}")


def decode_raster_buffer(source_image_path: Path) -> Image.Image:
    """Load image from disk as a fully decoded RGBA buffer."""
    try:
        with Image.open(source_image_path) as source_image:
            source_image.load()
            return source_image.convert(RASTER_MODE)
    except UnidentifiedImageError as format_error:
        raise DecodeError(
            f"Could not identify image format for {source_image_path}"
        ) from format_error
    except Image.DecompressionBombError as size_error:
        raise DecodeError(
            f"Image {source_image_path} is too large to decode: {size_error}"
        ) from size_error
    except OSError as filesystem_error:
        raise DecodeError(
            f"Could not read {source_image_path}: {filesystem_error}"
        ) from filesystem_error


def determine_output_format(output_path: Path) -> str:
    """Resolve Pillow format name from destination file extension."""
    registered_extensions = Image.registered_extensions()
    output_format = registered_extensions.get(output_path.suffix.lower())
    if output_format is None:
        raise EncodeError(
            f"Unsupported output extension '{output_path.suffix}' for {output_path}"
        )
    if output_format not in Image.SAVE:
        raise EncodeError(
            f"{output_format} images can be read but not written: {output_path}"
        )
    return output_format


def has_only_opaque_pixels(raster_buffer: Image.Image) -> bool:
    """Check whether every pixel of the buffer is fully opaque."""
    return raster_buffer.getchannel("A").getextrema() == (255, 255)


def flatten_onto_fill_color(raster_buffer: Image.Image) -> Image.Image:
    """Composite buffer over opaque fill color, dropping the alpha channel."""
    background = Image.new("RGB", raster_buffer.size, FILL_COLOR[:3])
    background.paste(raster_buffer, mask=raster_buffer.getchannel("A"))
    return background


def prepare_buffer_for_output_format(
    raster_buffer: Image.Image, output_format: str
) -> Image.Image:
    """Drop or flatten alpha so the buffer fits the output format."""
    if has_only_opaque_pixels(raster_buffer):
        return raster_buffer.convert("RGB")
    if output_format in ALPHA_CAPABLE_FORMATS:
        return raster_buffer

    console.print(
        f"[yellow]Warning: {output_format} has no alpha channel, "
        "flattening transparency onto white"
    )
    return flatten_onto_fill_color(raster_buffer)


def apply_jpeg_optimization_settings(output_format: str) -> dict:
    """Apply JPEG-specific optimization settings for high quality output."""
    if output_format != "JPEG":
        return {}

    return {
        "quality": 95,
        "subsampling": 0,      # Disable chroma subsampling for quality
        "optimize": True,
        "progressive": True,
    }


def current_umask() -> int:
    """Read the process umask, which can only be queried by setting it."""
    process_umask = os.umask(0)
    os.umask(process_umask)
    return process_umask


def preserve_destination_permissions(
    temporary_path: Path, output_path: Path
) -> None:
    """Give the freshly written file the permissions of the file it replaces."""
    if output_path.exists():
        shutil.copymode(output_path, temporary_path)
    else:
        os.chmod(temporary_path, 0o666 & ~current_umask())


def encode_raster_buffer(raster_buffer: Image.Image, output_path: Path) -> None:
    """Write buffer to disk in the format implied by the file extension.

    The image is written to a temporary sibling file first and moved over the
    destination only once encoding succeeded, so the destination (which may be
    the source image itself) is never left half-written.
    """
    output_path = Path(output_path)
    output_format = determine_output_format(output_path)
    output_image = prepare_buffer_for_output_format(raster_buffer, output_format)
    save_parameters = apply_jpeg_optimization_settings(output_format)

    temporary_path = None
    try:
        file_descriptor, temporary_name = tempfile.mkstemp(
            dir=output_path.parent,
            prefix=f".{output_path.stem}-",
            suffix=output_path.suffix,
        )
        temporary_path = Path(temporary_name)
        with os.fdopen(file_descriptor, "wb") as temporary_file:
            output_image.save(temporary_file, format=output_format, **save_parameters)
        preserve_destination_permissions(temporary_path, output_path)
        os.replace(temporary_path, output_path)
    except (OSError, ValueError, KeyError) as encoding_error:
        raise EncodeError(
            f"Could not write {output_path}: {encoding_error}"
        ) from encoding_error
    finally:
        if temporary_path is not None:
            temporary_path.unlink(missing_ok=True)
