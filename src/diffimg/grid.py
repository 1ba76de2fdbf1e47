from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image

from .channels import MAX_CHANNEL_VALUE, extract_color, narrow_channels, premultiply_alpha

Color = tuple[int, int, int, int]

WIDE_GRAY_MODES = {"I", "I;16", "I;16L", "I;16B", "I;16N"}


def _expand_channels(arr: np.ndarray) -> np.ndarray:
    if arr.ndim == 2:
        arr = arr[:, :, np.newaxis]
    if arr.ndim != 3:
        raise ValueError(f"Expected a 2D or 3D pixel array, got shape {arr.shape}")
    height, width, channels = arr.shape
    opaque = np.full((height, width, 1), MAX_CHANNEL_VALUE, dtype=np.uint8)
    if channels == 1:
        return np.concatenate([arr, arr, arr, opaque], axis=2)
    if channels == 2:
        gray = arr[:, :, :1]
        return np.concatenate([gray, gray, gray, arr[:, :, 1:2]], axis=2)
    if channels == 3:
        return np.concatenate([arr, opaque], axis=2)
    if channels == 4:
        return arr
    raise ValueError(f"Unsupported channel count: {channels}")


@dataclass(frozen=True, eq=False)
class PixelGrid:
    """8-bit RGBA pixels stored as a read-only ``(height, width, 4)`` array."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(f"PixelGrid needs shape (height, width, 4), got {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"PixelGrid needs uint8 pixels, got {self.pixels.dtype}")

    @classmethod
    def from_array(cls, array: np.ndarray) -> PixelGrid:
        narrowed = narrow_channels(np.asarray(array))
        rgba = np.array(_expand_channels(narrowed), dtype=np.uint8, copy=True)
        rgba.setflags(write=False)
        return cls(rgba)

    @classmethod
    def from_image(cls, image: Image.Image) -> PixelGrid:
        """Decode-side constructor: straight alpha is premultiplied into RGB."""
        if image.mode in WIDE_GRAY_MODES:
            return cls.from_array(np.asarray(image))
        if image.mode == "RGBa":
            return cls.from_array(np.asarray(image))
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls.from_array(premultiply_alpha(np.asarray(image)))

    @classmethod
    def blank(cls, width: int, height: int, color: Color = (0, 0, 0, 255)) -> PixelGrid:
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = color
        return cls.from_array(pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def color(self, x: int, y: int) -> Color:
        return extract_color(self.pixels, x, y)

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels))
