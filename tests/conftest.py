from pathlib import Path

import pytest

from tests.imaging import make_opaque_image, make_patterned_image


@pytest.fixture
def patterned_image():
    return make_patterned_image(7, 5)


@pytest.fixture
def opaque_png(tmp_path) -> Path:
    image_path = tmp_path / "photo.png"
    make_opaque_image(120, 80).save(image_path)
    return image_path
