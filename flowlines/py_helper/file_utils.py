"""File utility helpers for rendered output."""

import os
import sys
from pathlib import Path


def svg_to_png(
    source: Path, target: Path | None = None, dpi: float | None = None
) -> Path:
    """
    Rasterize a plotter SVG for previews, using cairosvg.
    """
    if not source.exists():
        raise FileNotFoundError(source)

    output_path = target or source.with_suffix(".png")

    if sys.platform == "darwin":
        _ensure_macos_cairo_path()

    # cairo needs a system library, so the import stays optional
    try:
        import cairosvg
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "cairosvg is required for PNG output (pip install flowlines[png])."
        ) from exc

    cairosvg.svg2png(
        url=str(source), write_to=str(output_path), dpi=96 if dpi is None else int(dpi)
    )
    return output_path


def _ensure_macos_cairo_path() -> None:
    if os.environ.get("DYLD_FALLBACK_LIBRARY_PATH"):
        return

    existing = [p for p in ("/opt/homebrew/lib", "/usr/local/lib") if Path(p).is_dir()]
    if existing:
        os.environ["DYLD_FALLBACK_LIBRARY_PATH"] = ":".join(existing)
