from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class DiffImgError(Exception):
    code: str
    message: str
    hint: str

    exit_code = 1

    def __str__(self) -> str:
        return self.message


class ImageNotFoundError(DiffImgError):
    exit_code = 3

    @classmethod
    def for_path(cls, path: Path) -> ImageNotFoundError:
        return cls(
            code="E1001_IMAGE_NOT_FOUND",
            message=f"Image not found: {path}",
            hint="Check the input path points to an existing file.",
        )


class ImageDecodeError(DiffImgError):
    exit_code = 3

    @classmethod
    def for_source(cls, source: str, reason: object) -> ImageDecodeError:
        return cls(
            code="E1002_IMAGE_DECODE_FAILED",
            message=f"Could not decode image {source}: {reason}",
            hint="Provide a readable PNG or JPEG file.",
        )


class DimensionMismatchError(DiffImgError):
    exit_code = 4

    def __init__(self, width_a: int, height_a: int, width_b: int, height_b: int) -> None:
        super().__init__(
            code="E1101_DIMENSION_MISMATCH",
            message=(
                f"Image dimensions are different: {width_a}x{height_a}, {width_b}x{height_b}"
            ),
            hint="Both images must have the same width and height.",
        )
        self.width_a = width_a
        self.height_a = height_a
        self.width_b = width_b
        self.height_b = height_b


class ImageEncodeError(DiffImgError):
    exit_code = 5

    @classmethod
    def for_path(cls, path: Path, reason: object) -> ImageEncodeError:
        return cls(
            code="E1201_IMAGE_ENCODE_FAILED",
            message=f"Could not write diff image {path}: {reason}",
            hint="Check the output directory exists and is writable.",
        )


class OptionsError(DiffImgError):
    exit_code = 6

    @classmethod
    def invalid(cls, message: str) -> OptionsError:
        return cls(
            code="E1301_OPTIONS_INVALID",
            message=message,
            hint="Fix the diff options in the config file or on the command line.",
        )
