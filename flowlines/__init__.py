"""Flow line art for pen plotters.

Modules:
- noise: seeded simplex noise and derived samplers
- field: cached direction field with attractors
- spatial: proximity grid
- tracing, streamlines, swarm, hatching: the line generation strategies
- postprocess: smoothing and simplification
- svg: stroke-only SVG output
- generator: configuration in, result out
"""

from .field import FlowField
from .generator import generate_flow_lines, generate_flow_lines_grid, resolve_strategy
from .models import (
    Attractor,
    DensityPoint,
    FieldMode,
    FlowLine,
    FlowLinesConfig,
    FlowLinesResult,
    Strategy,
    SvgStyle,
    TraceStop,
)
from .noise import SimplexNoise, create_noise
from .postprocess import simplify_line, smooth_line
from .spatial import SpatialGrid
from .svg import save_svg, to_svg

__all__ = [
    "Attractor",
    "DensityPoint",
    "FieldMode",
    "FlowField",
    "FlowLine",
    "FlowLinesConfig",
    "FlowLinesResult",
    "SimplexNoise",
    "SpatialGrid",
    "Strategy",
    "SvgStyle",
    "TraceStop",
    "create_noise",
    "generate_flow_lines",
    "generate_flow_lines_grid",
    "resolve_strategy",
    "save_svg",
    "simplify_line",
    "smooth_line",
    "to_svg",
]
