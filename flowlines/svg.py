"""Stroke-only SVG output for plotter-ready flow lines."""

import io
from pathlib import Path
from typing import Optional, Sequence, Union

import svgwrite

from .models import FlowLinesResult, Point, SvgStyle
from .postprocess import simplify_line


def path_data(points: Sequence[Point], precision: int = 2) -> str:
    """Quadratic curves through consecutive midpoints; '' for < 2 points."""
    if len(points) < 2:
        return ""

    def fmt(p: Point) -> str:
        return f"{p[0]:.{precision}f},{p[1]:.{precision}f}"

    d = [f"M{fmt(points[0])}"]
    if len(points) == 2:
        d.append(f"L{fmt(points[1])}")
        return " ".join(d)

    for current, nxt in zip(points[1:-1], points[2:]):
        mid = ((current[0] + nxt[0]) / 2, (current[1] + nxt[1]) / 2)
        d.append(f"Q{fmt(current)} {fmt(mid)}")
    d.append(f"L{fmt(points[-1])}")
    return " ".join(d)


def build_drawing(
    result: FlowLinesResult,
    style: Optional[SvgStyle] = None,
    filename: str = "noname.svg",
) -> svgwrite.Drawing:
    style = style or SvgStyle()

    dwg = svgwrite.Drawing(filename, size=(result.width, result.height))
    dwg.viewbox(0, 0, result.width, result.height)

    if style.include_background:
        dwg.add(
            dwg.rect(
                insert=(0, 0),
                size=(result.width, result.height),
                fill=style.background_color,
            )
        )

    for line in result.lines:
        points = line.points
        if len(points) < 2:
            continue
        if style.optimize_paths:
            points = simplify_line(points, style.simplify_epsilon)
        d = path_data(points, style.precision)
        if not d:
            continue
        dwg.add(
            dwg.path(
                d=d,
                fill="none",
                stroke=style.stroke_color,
                stroke_width=style.stroke_width,
                stroke_linecap="round",
                stroke_linejoin="round",
            )
        )

    return dwg


def to_svg(result: FlowLinesResult, style: Optional[SvgStyle] = None) -> str:
    buffer = io.StringIO()
    build_drawing(result, style).write(buffer, pretty=True)
    return buffer.getvalue()


def save_svg(
    result: FlowLinesResult,
    out_file: Union[str, Path],
    style: Optional[SvgStyle] = None,
) -> Path:
    out_path = Path(out_file)
    build_drawing(result, style, str(out_path)).save(pretty=True)
    return out_path
