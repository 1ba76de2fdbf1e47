"""Pixel difference ratio and diff image generation.

The ratio is the sum of absolute per-channel differences divided by the
largest sum the image could produce. RGB always count; alpha counts unless
``ignore_alpha`` is set, in which case the divisor uses three channels.

Two paths produce the same ratio: :func:`compute_ratio` works straight from
the inputs, while :func:`create_diff_image` followed by
:func:`ratio_from_diff_image` goes through a stored diff image. Diff image
alpha is a presentation choice (raw delta, inverted delta, or forced opaque),
so reading the ratio back re-derives the true alpha delta from it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import numpy as np

from .channels import MAX_CHANNEL_VALUE, abs_channel_diff
from .config import AlphaPresentation, DiffOptions
from .errors import DimensionMismatchError, OptionsError
from .grid import PixelGrid

logger = logging.getLogger(__name__)

ROW_BAND_PIXELS = 1 << 22


@dataclass(frozen=True, eq=False)
class DiffImage:
    grid: PixelGrid
    alpha_presentation: AlphaPresentation

    @property
    def size(self) -> tuple[int, int]:
        return self.grid.size


@dataclass(frozen=True)
class DiffResult:
    ratio: float
    diff_image: DiffImage | None = None

    @property
    def percentage(self) -> float:
        return self.ratio * 100

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"ratio": self.ratio, "percentage": self.percentage}
        if self.diff_image is not None:
            width, height = self.diff_image.size
            data["diff_image"] = {
                "width": width,
                "height": height,
                "alpha_presentation": self.diff_image.alpha_presentation.value,
            }
        return data


def _channel_count(ignore_alpha: bool) -> int:
    return 3 if ignore_alpha else 4


def _normalize(total: int, width: int, height: int, ignore_alpha: bool) -> float:
    max_total = width * height * MAX_CHANNEL_VALUE * _channel_count(ignore_alpha)
    if max_total == 0:
        return 0.0
    return float(total) / float(max_total)


def _row_bands(height: int, width: int) -> Iterator[slice]:
    rows = max(1, ROW_BAND_PIXELS // max(width, 1))
    for start in range(0, height, rows):
        yield slice(start, min(start + rows, height))


def resolve_alpha_presentation(
    ignore_alpha: bool,
    alpha_presentation: AlphaPresentation | str | None,
) -> AlphaPresentation:
    if alpha_presentation is None:
        return AlphaPresentation.FORCE_OPAQUE if ignore_alpha else AlphaPresentation.RAW
    presentation = AlphaPresentation.parse(alpha_presentation)
    if presentation is AlphaPresentation.FORCE_OPAQUE and not ignore_alpha:
        raise OptionsError.invalid(
            "Forced-opaque alpha discards the alpha delta; "
            "use it together with ignore_alpha, or pick raw or inverted."
        )
    return presentation


def check_dimensions(a: PixelGrid, b: PixelGrid) -> None:
    if a.width != b.width or a.height != b.height:
        raise DimensionMismatchError(a.width, a.height, b.width, b.height)


def compute_ratio(a: PixelGrid, b: PixelGrid, ignore_alpha: bool = False) -> float:
    """Difference ratio in [0, 1] computed without building a diff image."""
    check_dimensions(a, b)
    channels = _channel_count(ignore_alpha)
    total = np.uint64(0)
    for band in _row_bands(a.height, a.width):
        delta = abs_channel_diff(a.pixels[band, :, :channels], b.pixels[band, :, :channels])
        total += delta.sum(dtype=np.uint64)
    ratio = _normalize(int(total), a.width, a.height, ignore_alpha)
    logger.debug(
        "compute_ratio %dx%d ignore_alpha=%s sum=%d ratio=%r",
        a.width,
        a.height,
        ignore_alpha,
        int(total),
        ratio,
    )
    return ratio


def create_diff_image(
    a: PixelGrid,
    b: PixelGrid,
    ignore_alpha: bool = False,
    alpha_presentation: AlphaPresentation | str | None = None,
) -> DiffImage:
    """Build an RGBA image whose channels are the absolute input deltas."""
    check_dimensions(a, b)
    presentation = resolve_alpha_presentation(ignore_alpha, alpha_presentation)
    delta = abs_channel_diff(a.pixels, b.pixels)
    if presentation is AlphaPresentation.FORCE_OPAQUE:
        delta[:, :, 3] = MAX_CHANNEL_VALUE
    elif presentation is AlphaPresentation.INVERTED:
        delta[:, :, 3] = MAX_CHANNEL_VALUE - delta[:, :, 3]
    logger.debug(
        "create_diff_image %dx%d ignore_alpha=%s alpha=%s",
        a.width,
        a.height,
        ignore_alpha,
        presentation.value,
    )
    return DiffImage(grid=PixelGrid.from_array(delta), alpha_presentation=presentation)


def ratio_from_diff_image(diff_image: DiffImage, ignore_alpha: bool = False) -> float:
    """Difference ratio read back from a diff image's stored channel values."""
    grid = diff_image.grid
    presentation = diff_image.alpha_presentation
    if not ignore_alpha and presentation is AlphaPresentation.FORCE_OPAQUE:
        raise OptionsError.invalid(
            "Cannot recover the alpha delta from a forced-opaque diff image; "
            "read it with ignore_alpha."
        )
    total = 0
    for band in _row_bands(grid.height, grid.width):
        pixels = grid.pixels[band]
        total += int(pixels[:, :, :3].sum(dtype=np.uint64))
        if ignore_alpha:
            continue
        stored_alpha = pixels[:, :, 3].sum(dtype=np.uint64)
        if presentation is AlphaPresentation.INVERTED:
            alpha_count = pixels.shape[0] * pixels.shape[1]
            total += alpha_count * MAX_CHANNEL_VALUE - int(stored_alpha)
        else:
            total += int(stored_alpha)
    ratio = _normalize(total, grid.width, grid.height, ignore_alpha)
    logger.debug(
        "ratio_from_diff_image %dx%d ignore_alpha=%s alpha=%s sum=%d ratio=%r",
        grid.width,
        grid.height,
        ignore_alpha,
        presentation.value,
        total,
        ratio,
    )
    return ratio


def diff(a: PixelGrid, b: PixelGrid, options: DiffOptions | None = None) -> DiffResult:
    """Compare two grids with the path the options ask for."""
    options = options or DiffOptions()
    check_dimensions(a, b)
    if options.generate_diff_image is None:
        return DiffResult(ratio=compute_ratio(a, b, options.ignore_alpha))
    diff_image = create_diff_image(a, b, options.ignore_alpha, options.alpha_presentation)
    return DiffResult(
        ratio=ratio_from_diff_image(diff_image, options.ignore_alpha),
        diff_image=diff_image,
    )
