from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from diffimg import PixelGrid, abs_channel_diff, extract_color
from diffimg.channels import narrow_channels, premultiply_alpha


@pytest.mark.parametrize(
    ("x", "y", "expected"),
    [(30, 40, 10), (255, 1, 254), (1, 255, 254), (0, 0, 0), (0, 255, 255)],
)
def test_abs_channel_diff_scalar(x: int, y: int, expected: int) -> None:
    assert abs_channel_diff(x, y) == expected
    assert abs_channel_diff(y, x) == expected


def test_abs_channel_diff_arrays_do_not_wrap() -> None:
    left = np.array([0, 255, 10, 200], dtype=np.uint8)
    right = np.array([255, 0, 10, 100], dtype=np.uint8)

    result = abs_channel_diff(left, right)

    assert result.dtype == np.uint8
    assert result.tolist() == [255, 255, 0, 100]


def test_narrow_channels_passes_uint8_through() -> None:
    arr = np.array([1, 2, 3], dtype=np.uint8)
    assert narrow_channels(arr) is arr


def test_narrow_channels_drops_low_byte() -> None:
    wide = np.array([0, 255, 256, 40000, 65535], dtype=np.uint16)
    assert narrow_channels(wide).tolist() == [0, 0, 1, 156, 255]


def test_extract_color_narrows_wide_storage() -> None:
    pixels = np.array([[[65535, 257, 0, 40000]]], dtype=np.uint16)
    assert extract_color(pixels, 0, 0) == (255, 1, 0, 156)


def test_extract_color_out_of_bounds() -> None:
    grid = PixelGrid.blank(2, 3)
    with pytest.raises(IndexError):
        extract_color(grid.pixels, 2, 0)
    with pytest.raises(IndexError):
        grid.color(0, 3)


def test_pixel_grid_indexes_by_x_then_y() -> None:
    pixels = np.zeros((2, 3, 4), dtype=np.uint8)
    pixels[1, 2] = (1, 2, 3, 4)
    grid = PixelGrid.from_array(pixels)

    assert grid.size == (3, 2)
    assert grid.color(2, 1) == (1, 2, 3, 4)
    assert grid.color(0, 0) == (0, 0, 0, 0)


def test_pixel_grid_from_rgb_and_gray_arrays() -> None:
    rgb = PixelGrid.from_array(np.full((1, 1, 3), 7, dtype=np.uint8))
    gray = PixelGrid.from_array(np.full((1, 1), 9, dtype=np.uint8))
    gray_alpha = PixelGrid.from_array(np.array([[[9, 30]]], dtype=np.uint8))

    assert rgb.color(0, 0) == (7, 7, 7, 255)
    assert gray.color(0, 0) == (9, 9, 9, 255)
    assert gray_alpha.color(0, 0) == (9, 9, 9, 30)


def test_pixel_grid_from_wide_array() -> None:
    grid = PixelGrid.from_array(np.full((2, 2, 3), 0x1234, dtype=np.uint16))
    assert grid.pixels.dtype == np.uint8
    assert grid.color(1, 1) == (0x12, 0x12, 0x12, 255)


def test_pixel_grid_is_read_only_copy() -> None:
    source = np.zeros((1, 1, 4), dtype=np.uint8)
    grid = PixelGrid.from_array(source)
    source[0, 0, 0] = 99

    assert grid.color(0, 0) == (0, 0, 0, 0)
    with pytest.raises(ValueError):
        grid.pixels[0, 0, 0] = 1


def test_pixel_grid_rejects_bad_shapes() -> None:
    with pytest.raises(ValueError):
        PixelGrid.from_array(np.zeros((1, 1, 5), dtype=np.uint8))
    with pytest.raises(ValueError):
        PixelGrid(np.zeros((1, 1, 3), dtype=np.uint8))


def test_pixel_grid_from_images() -> None:
    la = PixelGrid.from_image(Image.new("LA", (1, 1), (100, 50)))
    wide = PixelGrid.from_image(Image.new("I;16", (2, 1), 0xABCD))
    rgb = PixelGrid.from_image(Image.new("RGB", (1, 1), (1, 2, 3)))

    assert la.color(0, 0) == (19, 19, 19, 50)
    assert wide.size == (2, 1)
    assert wide.color(1, 0) == (0xAB, 0xAB, 0xAB, 255)
    assert rgb.color(0, 0) == (1, 2, 3, 255)


def test_pixel_grid_to_image_round_trip() -> None:
    grid = PixelGrid.blank(3, 2, (10, 20, 30, 40))
    image = grid.to_image()

    assert image.mode == "RGBA"
    assert image.size == (3, 2)
    assert image.getpixel((2, 1)) == (10, 20, 30, 40)


def test_premultiply_alpha_matches_sixteen_bit_scaling() -> None:
    rgba = np.array(
        [[[255, 0, 0, 128], [10, 20, 30, 128], [200, 100, 50, 255], [255, 255, 255, 0]]],
        dtype=np.uint8,
    )

    result = premultiply_alpha(rgba)

    assert result.tolist() == [
        [[128, 0, 0, 128], [5, 10, 15, 128], [200, 100, 50, 255], [0, 0, 0, 0]]
    ]
    assert rgba[0, 0].tolist() == [255, 0, 0, 128]


def test_from_array_keeps_straight_values() -> None:
    grid = PixelGrid.from_array(np.array([[[255, 0, 0, 0]]], dtype=np.uint8))
    assert grid.color(0, 0) == (255, 0, 0, 0)
