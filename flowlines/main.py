#!/usr/bin/env uv run
"""Render every configured seed to output/ as SVG, and PNG when enabled."""

import argparse
from pathlib import Path
from typing import List, Optional

from flowlines.generator import generate_flow_lines, generate_flow_lines_grid
from flowlines.py_helper import variables
from flowlines.py_helper.file_utils import svg_to_png
from flowlines.py_helper.settings import (
    build_flow_config,
    build_svg_style,
    load_config,
    resolve_seedlist,
)
from flowlines.svg import save_svg


def render(root: Path, grid_spacing: Optional[float] = None) -> List[Path]:
    config_path: Path = root / variables.CONFIG
    output_dir: Path = root / variables.OUTPUT

    config: dict = load_config(config_path)
    output = config.get("output", {})
    if not isinstance(output, dict):
        raise TypeError("[output] must be a table in config.toml")

    style = build_svg_style(config)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for seed in resolve_seedlist(config):
        cfg = build_flow_config(config, seed)
        if grid_spacing is not None:
            result = generate_flow_lines_grid(cfg, grid_spacing)
        else:
            result = generate_flow_lines(cfg)

        svg_path = save_svg(result, output_dir / f"flow_lines_{seed}.svg", style)
        print(f"Wrote {svg_path} (seed={seed}, lines={len(result.lines)})")
        written.append(svg_path)

        if output.get("png", False):
            png_path = svg_to_png(svg_path, dpi=output.get("dpi"))
            print(f"Wrote {png_path}")
            written.append(png_path)

    return written


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Render flow line SVGs.")
    parser.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="Directory holding config.toml; output/ is created beside it.",
    )
    parser.add_argument(
        "--grid-spacing",
        type=float,
        default=None,
        help="Seed one line per grid node instead of random start points.",
    )
    args = parser.parse_args(argv)
    render(args.root.resolve(), args.grid_spacing)


if __name__ == "__main__":
    main()
