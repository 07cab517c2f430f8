"""Pipeline driver: border, aspect fill and resize followed by a single save."""

from pathlib import Path

from PIL import Image

from .configuration import TransformRequest
from .image_processing import (
    add_uniform_border,
    fill_to_aspect_ratio,
    resize_longest_side,
)
from .raster import (
    decode_raster_buffer,
    encode_raster_buffer,
    validate_image_dimensions_are_positive,
)


def apply_transforms(
    source_image: Image.Image, transform_request: TransformRequest
) -> Image.Image:
    """Run requested stages in fixed order: border, aspect fill, resize.

    Stages without a parameter are skipped and leave the buffer untouched.
    The order never depends on how the request was assembled.
    """
    transformed_image = source_image

    if transform_request.border_thickness is not None:
        transformed_image = add_uniform_border(
            transformed_image, transform_request.border_thickness
        )
        validate_image_dimensions_are_positive(*transformed_image.size)

    if transform_request.aspect_ratio is not None:
        ratio_width, ratio_height = transform_request.aspect_ratio
        transformed_image = fill_to_aspect_ratio(
            transformed_image, ratio_width, ratio_height
        )
        validate_image_dimensions_are_positive(*transformed_image.size)

    if transform_request.longest_side is not None:
        transformed_image = resize_longest_side(
            transformed_image, transform_request.longest_side
        )
        validate_image_dimensions_are_positive(*transformed_image.size)

    return transformed_image


def apply_and_save(
    source_image_path: Path,
    transform_request: TransformRequest,
    destination_path: Path | None = None,
) -> Path:
    """Decode source, apply requested transforms and write the result once.

    Destination defaults to the source path, which is then overwritten.
    Raises DecodeError or EncodeError; nothing is written when decoding fails.
    """
    source_image_path = Path(source_image_path)
    output_path = (
        Path(destination_path) if destination_path is not None else source_image_path
    )

    raster_buffer = decode_raster_buffer(source_image_path)
    validate_image_dimensions_are_positive(*raster_buffer.size)

    transformed_buffer = apply_transforms(raster_buffer, transform_request)
    encode_raster_buffer(transformed_buffer, output_path)

    return output_path
