import os

import pytest
from PIL import Image

from filmprep.raster import (
    DecodeError,
    EncodeError,
    RasterInvariantError,
    decode_raster_buffer,
    determine_output_format,
    encode_raster_buffer,
    validate_image_dimensions_are_positive,
)
from tests.imaging import make_opaque_image, make_patterned_image


def test_decode_converts_to_rgba(opaque_png):
    raster_buffer = decode_raster_buffer(opaque_png)

    assert raster_buffer.mode == "RGBA"
    assert raster_buffer.size == (120, 80)
    assert len(raster_buffer.tobytes()) == 120 * 80 * 4


def test_decode_missing_file(tmp_path):
    with pytest.raises(DecodeError):
        decode_raster_buffer(tmp_path / "missing.png")


def test_decode_rejects_non_image(tmp_path):
    not_an_image = tmp_path / "notes.png"
    not_an_image.write_bytes(b"definitely not pixels")

    with pytest.raises(DecodeError, match="Could not identify image format"):
        decode_raster_buffer(not_an_image)


def test_decode_rejects_directory(tmp_path):
    with pytest.raises(DecodeError):
        decode_raster_buffer(tmp_path)


def test_encode_png_keeps_transparency(tmp_path):
    source = make_patterned_image(9, 6)
    output_path = tmp_path / "out.png"

    encode_raster_buffer(source, output_path)

    with Image.open(output_path) as written:
        assert written.mode == "RGBA"
        assert written.tobytes() == source.tobytes()


def test_encode_opaque_buffer_drops_alpha(tmp_path):
    source = make_opaque_image(30, 20).convert("RGBA")
    output_path = tmp_path / "out.png"

    encode_raster_buffer(source, output_path)

    with Image.open(output_path) as written:
        assert written.mode == "RGB"
        assert written.convert("RGBA").tobytes() == source.tobytes()


def test_encode_flattens_alpha_for_formats_without_it(tmp_path):
    source = Image.new("RGBA", (4, 4), (0, 0, 0, 0))
    source.putpixel((1, 1), (10, 20, 30, 255))
    output_path = tmp_path / "out.bmp"

    encode_raster_buffer(source, output_path)

    with Image.open(output_path) as written:
        assert written.mode == "RGB"
        assert written.getpixel((0, 0)) == (255, 255, 255)
        assert written.getpixel((1, 1)) == (10, 20, 30)


def test_encode_jpeg(tmp_path):
    output_path = tmp_path / "out.jpg"

    encode_raster_buffer(make_opaque_image(64, 48).convert("RGBA"), output_path)

    with Image.open(output_path) as written:
        assert written.format == "JPEG"
        assert written.size == (64, 48)


def test_encode_rejects_unknown_extension(tmp_path):
    with pytest.raises(EncodeError, match="Unsupported output extension"):
        encode_raster_buffer(make_patterned_image(2, 2), tmp_path / "out.unknown")

    assert list(tmp_path.iterdir()) == []


def test_encode_into_missing_directory(tmp_path):
    with pytest.raises(EncodeError):
        encode_raster_buffer(make_patterned_image(2, 2), tmp_path / "nope" / "out.png")


def test_failed_encode_leaves_existing_destination_untouched(tmp_path):
    destination = tmp_path / "existing.xbm"
    destination.write_bytes(b"original contents")

    # XBM only stores bilevel images, so an RGB buffer cannot be written
    with pytest.raises(EncodeError):
        encode_raster_buffer(make_opaque_image(8, 8).convert("RGBA"), destination)

    assert destination.read_bytes() == b"original contents"
    assert list(tmp_path.iterdir()) == [destination]


def test_encode_overwrites_existing_file(tmp_path):
    destination = tmp_path / "photo.png"
    make_opaque_image(10, 10).save(destination)

    encode_raster_buffer(make_patterned_image(3, 2), destination)

    with Image.open(destination) as written:
        assert written.size == (3, 2)


@pytest.mark.parametrize(
    "filename, expected_format",
    [("a.png", "PNG"), ("a.JPG", "JPEG"), ("a.jpeg", "JPEG"), ("a.tif", "TIFF")],
)
def test_output_format_follows_extension(tmp_path, filename, expected_format):
    assert determine_output_format(tmp_path / filename) == expected_format


@pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (-1, 5)])
def test_non_positive_dimensions_are_invariant_violations(width, height):
    with pytest.raises(RasterInvariantError):
        validate_image_dimensions_are_positive(width, height)


@pytest.mark.parametrize("filename", ["out.psd", "out.xpm", "out.fli"])
def test_encode_rejects_read_only_formats(tmp_path, filename):
    with pytest.raises(EncodeError, match="can be read but not written"):
        encode_raster_buffer(make_patterned_image(4, 4), tmp_path / filename)

    assert list(tmp_path.iterdir()) == []


def test_decode_rejects_oversized_image(opaque_png, monkeypatch):
    # 120x80 exceeds twice the lowered pixel limit
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(DecodeError, match="too large"):
        decode_raster_buffer(opaque_png)


def test_new_file_permissions_follow_umask(tmp_path):
    output_path = tmp_path / "fresh.png"
    previous_umask = os.umask(0o027)
    try:
        encode_raster_buffer(make_patterned_image(3, 3), output_path)
    finally:
        os.umask(previous_umask)

    assert output_path.stat().st_mode & 0o777 == 0o640
