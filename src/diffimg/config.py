from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .errors import OptionsError


class AlphaPresentation(str, Enum):
    RAW = "raw"
    FORCE_OPAQUE = "force_opaque"
    INVERTED = "inverted"

    @classmethod
    def parse(cls, value: str | AlphaPresentation) -> AlphaPresentation:
        if isinstance(value, AlphaPresentation):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        if normalized == "opaque":
            normalized = "force_opaque"
        try:
            return cls(normalized)
        except ValueError as exc:
            raise OptionsError.invalid(
                f"Unknown alpha presentation: {value!r} (use raw, opaque or inverted)"
            ) from exc


@dataclass(frozen=True)
class DiffOptions:
    ignore_alpha: bool = False
    alpha_presentation: AlphaPresentation | None = None
    generate_diff_image: Path | None = None
    output_as_raw_ratio: bool = False
    max_ratio: float | None = None

    def __post_init__(self) -> None:
        if self.alpha_presentation is not None:
            object.__setattr__(
                self, "alpha_presentation", AlphaPresentation.parse(self.alpha_presentation)
            )

    def merged(self, **overrides: Any) -> DiffOptions:
        """Return a copy with every non-None override applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text())
    except OSError as exc:
        raise OptionsError.invalid(f"Could not read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise OptionsError.invalid(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise OptionsError.invalid(f"Expected mapping at top of YAML: {path}")
    return data


def _as_bool(section: dict[str, Any], key: str) -> bool:
    value = section.get(key, False)
    if not isinstance(value, bool):
        raise OptionsError.invalid(f"diff.{key} must be true or false, got {value!r}")
    return value


def parse_options(data: dict[str, Any]) -> DiffOptions:
    diff = data.get("diff", {}) or {}
    if not isinstance(diff, dict):
        raise OptionsError.invalid("diff section must be a mapping")

    alpha_raw = diff.get("alpha_presentation")
    alpha_presentation = AlphaPresentation.parse(str(alpha_raw)) if alpha_raw is not None else None

    generate_raw = diff.get("generate_diff_image")
    generate_diff_image = Path(str(generate_raw)) if generate_raw else None

    max_ratio_raw = diff.get("max_ratio")
    try:
        max_ratio = float(max_ratio_raw) if max_ratio_raw is not None else None
    except (TypeError, ValueError) as exc:
        raise OptionsError.invalid(f"Invalid diff.max_ratio value: {max_ratio_raw!r}") from exc
    if max_ratio is not None and not 0.0 <= max_ratio <= 1.0:
        raise OptionsError.invalid(f"diff.max_ratio must be within [0, 1], got {max_ratio}")

    return DiffOptions(
        ignore_alpha=_as_bool(diff, "ignore_alpha"),
        alpha_presentation=alpha_presentation,
        generate_diff_image=generate_diff_image,
        output_as_raw_ratio=_as_bool(diff, "output_as_raw_ratio"),
        max_ratio=max_ratio,
    )


def load_options(path: Path) -> DiffOptions:
    return parse_options(_load_yaml(path))
