"""Geometric transforms over RGBA raster buffers."""

import math

from PIL import Image

from .raster import FILL_COLOR, RASTER_MODE


def create_canvas_with_fill_color(canvas_width: int, canvas_height: int) -> Image.Image:
    """Create opaque white RGBA canvas with specified dimensions."""
    return Image.new(RASTER_MODE, (canvas_width, canvas_height), FILL_COLOR)


def paste_image_at_offset(
    canvas: Image.Image,
    source_image: Image.Image,
    horizontal_offset: int,
    vertical_offset: int,
) -> Image.Image:
    """Copy source pixels verbatim onto canvas at the given offset."""
    canvas.paste(source_image, (horizontal_offset, vertical_offset))
    return canvas


def add_uniform_border(source_image: Image.Image, border_thickness: int) -> Image.Image:
    """Surround image with a white frame of border_thickness pixels per side."""
    if border_thickness < 0:
        raise ValueError(f"Border thickness must not be negative: {border_thickness}")
    if border_thickness == 0:
        return source_image

    canvas = create_canvas_with_fill_color(
        source_image.width + 2 * border_thickness,
        source_image.height + 2 * border_thickness,
    )
    return paste_image_at_offset(
        canvas, source_image, border_thickness, border_thickness
    )


def validate_aspect_ratio_is_positive(ratio_width: float, ratio_height: float) -> None:
    """Verify both aspect ratio components are positive."""
    if ratio_width <= 0 or ratio_height <= 0:
        raise ValueError(
            f"Aspect ratio components must be positive: {ratio_width}:{ratio_height}"
        )


def calculate_aspect_fill_dimensions(
    original_width: int,
    original_height: int,
    ratio_width: float,
    ratio_height: float,
) -> tuple[int, int]:
    """Calculate the smallest canvas with the target ratio that holds the image.

    The canvas grows along exactly one axis. Dimensions are rounded up, so the
    result may exceed the exact ratio by at most one pixel on the grown axis.
    """
    validate_aspect_ratio_is_positive(ratio_width, ratio_height)
    target_aspect_ratio = ratio_width / ratio_height

    width_based_height = math.ceil(original_width / target_aspect_ratio)
    if width_based_height >= original_height:
        return original_width, width_based_height

    height_based_width = math.ceil(original_height * target_aspect_ratio)
    return height_based_width, original_height


def calculate_centering_offset(target_dimension: int, original_dimension: int) -> int:
    """Offset that centers content, leaving odd leftover pixel on trailing side."""
    return (target_dimension - original_dimension) // 2


def fill_to_aspect_ratio(
    source_image: Image.Image, ratio_width: float, ratio_height: float
) -> Image.Image:
    """Pad image with white along one axis to match width:height ratio."""
    target_width, target_height = calculate_aspect_fill_dimensions(
        source_image.width, source_image.height, ratio_width, ratio_height
    )
    horizontal_offset = calculate_centering_offset(target_width, source_image.width)
    vertical_offset = calculate_centering_offset(target_height, source_image.height)

    if horizontal_offset == 0 and vertical_offset == 0:
        return source_image

    canvas = create_canvas_with_fill_color(target_width, target_height)
    return paste_image_at_offset(
        canvas, source_image, horizontal_offset, vertical_offset
    )


def calculate_longest_side_dimensions(
    original_width: int, original_height: int, longest_side: int
) -> tuple[int, int]:
    """Scale dimensions uniformly so the longer one equals longest_side."""
    if longest_side <= 0:
        raise ValueError(f"Longest side must be positive: {longest_side}")

    original_longest_side = max(original_width, original_height)
    if original_width >= original_height:
        scaled_height = round(original_height * longest_side / original_longest_side)
        return longest_side, max(1, scaled_height)

    scaled_width = round(original_width * longest_side / original_longest_side)
    return max(1, scaled_width), longest_side


def resize_longest_side(source_image: Image.Image, longest_side: int) -> Image.Image:
    """Resample image so its longest side equals longest_side."""
    target_size = calculate_longest_side_dimensions(
        source_image.width, source_image.height, longest_side
    )
    return source_image.resize(target_size, Image.Resampling.LANCZOS)
