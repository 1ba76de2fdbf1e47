"""Per-channel arithmetic shared by both ratio paths.

Every value that reaches the diff engine is an 8-bit channel. Decoders that
keep wider samples are narrowed by dropping the low byte, the same way for
whole grids and for single pixels, so both paths see identical inputs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from .grid import Color

MAX_CHANNEL_VALUE = 255
WIDE_SHIFT = 8


def abs_channel_diff(x: npt.ArrayLike, y: npt.ArrayLike) -> Any:
    """Return ``|x - y|`` for 8-bit channels (scalars or arrays)."""
    wide_x = np.asarray(x, dtype=np.int16)
    wide_y = np.asarray(y, dtype=np.int16)
    result = np.abs(wide_x - wide_y).astype(np.uint8)
    if result.ndim == 0:
        return result[()]
    return result


def narrow_channels(values: np.ndarray) -> np.ndarray:
    arr = np.asarray(values)
    if arr.dtype == np.uint8:
        return arr
    if arr.dtype.kind not in {"u", "i"}:
        raise TypeError(f"Unsupported channel dtype: {arr.dtype}")
    if arr.dtype.itemsize == 1:
        return np.clip(arr, 0, MAX_CHANNEL_VALUE).astype(np.uint8)
    clipped = np.clip(arr.astype(np.int64), 0, 0xFFFF)
    return (clipped >> WIDE_SHIFT).astype(np.uint8)


def extract_color(pixels: np.ndarray, x: int, y: int) -> Color:
    height, width = pixels.shape[:2]
    if not (0 <= x < width and 0 <= y < height):
        raise IndexError(f"Pixel ({x}, {y}) outside {width}x{height} grid")
    r, g, b, a = (int(v) for v in narrow_channels(pixels[y, x]))
    return (r, g, b, a)


def premultiply_alpha(rgba: np.ndarray) -> np.ndarray:
    """Scale straight-alpha 8-bit RGB by alpha, at 16-bit precision.

    Colors are widened to 16 bits (``c * 0x101``), multiplied by the 16-bit
    alpha and divided by ``0xFFFF``, then narrowed. Alpha is unchanged, fully
    opaque pixels come back unchanged, and fully transparent pixels lose their
    color.
    """
    wide = rgba.astype(np.uint64) * 0x101
    alpha = wide[:, :, 3:4]
    out = np.array(rgba, dtype=np.uint8, copy=True)
    out[:, :, :3] = narrow_channels((wide[:, :, :3] * alpha) // 0xFFFF)
    return out
