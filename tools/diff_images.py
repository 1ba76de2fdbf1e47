#!/usr/bin/env python3
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import typer

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from common.image_io import load_image, write_png  # noqa: E402
from diffimg import DiffImgError, DiffOptions, diff, load_options  # noqa: E402

EXIT_GATE_FAILED = 1

app = typer.Typer(
    add_completion=False,
    help="Quantify the pixel difference between two images of the same size.",
)


def _format_number(value: float) -> str:
    # shortest round-trip digits, no trailing ".0": 75.0 prints as 75
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def _fail(exc: DiffImgError) -> typer.Exit:
    typer.echo(f"ERROR {exc.code}: {exc.message}", err=True)
    typer.echo(f"HINT: {exc.hint}", err=True)
    return typer.Exit(code=exc.exit_code)


@app.command()
def main(
    image_a: Path = typer.Argument(..., dir_okay=False, help="First image (PNG or JPEG)."),
    image_b: Path = typer.Argument(..., dir_okay=False, help="Second image (PNG or JPEG)."),
    generate: Path | None = typer.Option(
        None,
        "--generate",
        "-g",
        dir_okay=False,
        help="Write a diff image PNG to this path.",
    ),
    ratio: bool = typer.Option(
        False,
        "--ratio",
        help="Print the bare ratio (0-1.0) instead of the percentage sentence.",
    ),
    ignore_alpha: bool = typer.Option(
        False,
        "--ignore-alpha",
        help="Leave the alpha channel out of the ratio and make the diff image opaque.",
    ),
    alpha_presentation: str | None = typer.Option(
        None,
        "--alpha-presentation",
        help="Diff image alpha: raw, opaque or inverted.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        readable=True,
        help="Optional YAML file with a diff: section.",
    ),
    max_ratio: float | None = typer.Option(
        None,
        "--max-ratio",
        min=0.0,
        max=1.0,
        help="Exit with status 1 when the ratio is above this value.",
    ),
    report: Path | None = typer.Option(
        None,
        "--report",
        "-o",
        dir_okay=False,
        help="Optional path to write the JSON report.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug details."),
) -> None:
    """Compare two images and print how much they differ."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        options = load_options(config) if config is not None else DiffOptions()
        options = options.merged(
            ignore_alpha=ignore_alpha or None,
            alpha_presentation=alpha_presentation,
            generate_diff_image=generate,
            output_as_raw_ratio=ratio or None,
            max_ratio=max_ratio,
        )
        grid_a = load_image(image_a)
        grid_b = load_image(image_b)
        result = diff(grid_a, grid_b, options)
        if result.diff_image is not None and options.generate_diff_image is not None:
            write_png(options.generate_diff_image, result.diff_image.grid)
    except DiffImgError as exc:
        raise _fail(exc)

    if options.output_as_raw_ratio:
        typer.echo(_format_number(result.ratio))
    else:
        typer.echo(f"Images differ by {_format_number(result.percentage)}%")

    passed = options.max_ratio is None or result.ratio <= options.max_ratio
    if report is not None:
        payload = result.to_dict()
        payload.update(
            {
                "image_a": str(image_a),
                "image_b": str(image_b),
                "ignore_alpha": options.ignore_alpha,
                "max_ratio": options.max_ratio,
                "status": "pass" if passed else "fail",
            }
        )
        if options.generate_diff_image is not None:
            payload["diff_image"]["path"] = str(options.generate_diff_image)
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(json.dumps(payload, indent=2, sort_keys=True))
    if not passed:
        typer.echo(
            f"FAIL: ratio {result.ratio} is above max ratio {options.max_ratio}.",
            err=True,
        )
        raise typer.Exit(code=EXIT_GATE_FAILED)


if __name__ == "__main__":
    app(prog_name="diffimg")
