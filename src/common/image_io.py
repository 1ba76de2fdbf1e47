from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from common.png_utils import has_png_magic, sniff_format
from diffimg.errors import ImageDecodeError, ImageEncodeError, ImageNotFoundError
from diffimg.grid import PixelGrid

logger = logging.getLogger(__name__)


def decode_image(data: bytes, source: str | None = None) -> PixelGrid:
    label = source or "<bytes>"
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            logger.debug(
                "decoded %s format=%s mode=%s size=%s",
                label,
                sniff_format(data) or image.format,
                image.mode,
                image.size,
            )
            return PixelGrid.from_image(image)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageDecodeError.for_source(label, exc) from exc


def load_image(path: Path) -> PixelGrid:
    path = Path(path)
    if not path.is_file():
        raise ImageNotFoundError.for_path(path)
    try:
        data = path.read_bytes()
    except FileNotFoundError as exc:
        raise ImageNotFoundError.for_path(path) from exc
    except OSError as exc:
        raise ImageDecodeError.for_source(str(path), exc) from exc
    return decode_image(data, source=str(path))


def encode_png(grid: PixelGrid) -> bytes:
    buf = io.BytesIO()
    grid.to_image().save(buf, format="PNG")
    return buf.getvalue()


def write_png(path: Path, grid: PixelGrid) -> None:
    path = Path(path)
    try:
        payload = encode_png(grid)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)
    except (OSError, ValueError) as exc:
        raise ImageEncodeError.for_path(path, exc) from exc
    if not has_png_magic(path):
        raise ImageEncodeError.for_path(path, "written file has no PNG header")
    logger.debug("wrote diff image %s (%d bytes)", path, len(payload))
