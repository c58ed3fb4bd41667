"""Shared data models for flow line generation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

Point = Tuple[float, float]


class FieldMode(str, Enum):
    """How a cell's direction is derived from the noise engine."""

    NORMAL = "normal"
    CURL = "curl"
    SPIRAL = "spiral"
    TURBULENT = "turbulent"
    RIDGED = "ridged"
    WARPED = "warped"


class Strategy(str, Enum):
    """Line generation strategy, resolved once per run."""

    BASIC = "basic"
    BIDIRECTIONAL = "bidirectional"
    FILL = "fill"
    SWARM = "swarm"
    HATCHING = "hatching"


class TraceStop(Enum):
    """Why a trace loop terminated."""

    MAX_STEPS = "max_steps"
    OUT_OF_BOUNDS = "out_of_bounds"
    COLLISION = "collision"
    FATIGUE = "fatigue"
    STALLED = "stalled"


@dataclass(frozen=True)
class Attractor:
    x: float
    y: float
    radius: float
    strength: float  # positive pulls lines in, negative pushes them away


@dataclass(frozen=True)
class DensityPoint:
    x: float
    y: float
    radius: float
    strength: float  # 0..1, 1 packs lines down towards min_separation


@dataclass(frozen=True)
class FlowLine:
    """One continuous pen stroke."""

    points: Tuple[Point, ...]

    def __len__(self) -> int:
        return len(self.points)

    @property
    def start(self) -> Point:
        return self.points[0]


@dataclass
class FlowLinesConfig:
    width: float
    height: float

    line_count: int = 100
    seed: Optional[int] = None  # None => random 32-bit seed, echoed in the result

    # Tracing
    step_length: float = 2.0
    max_steps: int = 500
    margin: float = 20.0
    min_line_length: int = 10

    # Field
    field_resolution: float = 10.0
    noise_scale: float = 0.005
    octaves: int = 4
    persistence: float = 0.5
    lacunarity: float = 2.0
    field_mode: FieldMode = FieldMode.NORMAL
    spiral_strength: float = 0.5
    warp_strength: float = 0.5

    # Painted overlays
    start_points: Optional[List[Point]] = None
    attractors: List[Attractor] = field(default_factory=list)
    density_points: List[DensityPoint] = field(default_factory=list)

    smoothing: float = 0.0  # 0..1
    separation_distance: float = 0.0  # 0 disables collision checks

    # Strategy toggles
    bidirectional: bool = False
    even_distribution: bool = False
    fill_mode: bool = False
    swarm_mode: bool = False
    form_hatching_mode: bool = False

    # Fill mode density
    density_variation: float = 0.0  # 0..1
    density_noise_scale: float = 0.003
    min_separation: float = 1.0
    fill_max_seeds: Optional[int] = None  # None => line_count * 50

    # Organic perturbations (fill mode)
    velocity_damping: float = 0.0  # 0..1
    line_fatigue: float = 0.0  # 0..1
    edge_attraction: float = 0.0  # 0..1
    wobble: float = 0.0  # perpendicular jitter amplitude
    wobble_frequency: float = 0.02

    # Swarm mode
    swarm_agents: int = 30
    swarm_energy: float = 300.0
    swarm_wander: float = 0.5
    swarm_cluster_radius: float = 40.0
    swarm_cluster_attraction: float = 0.3
    swarm_form_strength: float = 0.3
    swarm_form_scale: float = 0.004
    swarm_density_scale: float = 0.003
    swarm_void_threshold: float = -0.3
    swarm_void_depth: float = 0.3
    swarm_void_repulsion: float = 0.8
    swarm_spawn_rate: float = 0.02
    swarm_spawn_cost: float = 0.3
    swarm_inherit: float = 0.7
    swarm_energy_slowdown: bool = True
    swarm_max_agents: int = 200
    swarm_max_iterations: int = 10000

    # Form hatching
    hatch_density_scale: float = 0.004
    hatch_form_scale: float = 0.003
    hatch_contrast: float = 2.0
    hatch_line_length: float = 60.0
    hatch_length_variation: float = 0.5
    hatch_angle_variation: float = 0.3
    hatch_angle_scale: float = 0.01
    hatch_wobble: float = 0.0


@dataclass(frozen=True)
class FlowLinesResult:
    lines: List[FlowLine]
    width: float
    height: float
    seed: int


@dataclass
class SvgStyle:
    stroke_color: str = "#000000"
    stroke_width: float = 1.0
    background_color: str = "#ffffff"
    include_background: bool = False
    precision: int = 2
    optimize_paths: bool = True
    simplify_epsilon: float = 0.5

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "SvgStyle":
        """Build a style from loosely typed options, ignoring mistyped values."""
        style = cls()
        for name, kind in (
            ("stroke_color", str),
            ("background_color", str),
            ("stroke_width", (int, float)),
            ("simplify_epsilon", (int, float)),
            ("precision", int),
            ("include_background", bool),
            ("optimize_paths", bool),
        ):
            value = options.get(name)
            # bool is an int subclass; only accept it where a bool is expected
            if isinstance(value, bool) and kind is not bool:
                continue
            if isinstance(value, kind):
                setattr(style, name, value)
        return style
