"""diffimg library package."""

from .channels import abs_channel_diff, extract_color
from .config import AlphaPresentation, DiffOptions, load_options
from .engine import (
    DiffImage,
    DiffResult,
    check_dimensions,
    compute_ratio,
    create_diff_image,
    diff,
    ratio_from_diff_image,
)
from .errors import (
    DiffImgError,
    DimensionMismatchError,
    ImageDecodeError,
    ImageEncodeError,
    ImageNotFoundError,
    OptionsError,
)
from .grid import Color, PixelGrid

__all__ = [
    "AlphaPresentation",
    "Color",
    "DiffImage",
    "DiffImgError",
    "DiffOptions",
    "DiffResult",
    "DimensionMismatchError",
    "ImageDecodeError",
    "ImageEncodeError",
    "ImageNotFoundError",
    "OptionsError",
    "PixelGrid",
    "abs_channel_diff",
    "check_dimensions",
    "compute_ratio",
    "create_diff_image",
    "diff",
    "extract_color",
    "load_options",
    "ratio_from_diff_image",
]
