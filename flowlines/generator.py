"""Entry point: configuration in, flow lines out."""

import dataclasses
from typing import Callable, Dict, List

from .field import FlowField
from .hatching import hatch_form
from .models import FieldMode, FlowLine, FlowLinesConfig, FlowLinesResult, Strategy
from .noise import (
    FILL_RNG_OFFSET,
    HATCH_RNG_OFFSET,
    START_POINTS_RNG_OFFSET,
    SWARM_RNG_OFFSET,
    make_rng,
    random_seed,
)
from .streamlines import fill_streamlines
from .swarm import simulate_swarm
from .tracing import grid_start_points, trace_seeded_lines


def validate_config(cfg: FlowLinesConfig) -> None:
    """Fail fast on configurations that cannot produce meaningful output."""
    if cfg.width <= 0 or cfg.height <= 0:
        raise ValueError(f"width and height must be positive, got {cfg.width}x{cfg.height}")
    if cfg.step_length <= 0:
        raise ValueError(f"step_length must be positive, got {cfg.step_length}")
    if cfg.field_resolution <= 0:
        raise ValueError(f"field_resolution must be positive, got {cfg.field_resolution}")
    if cfg.max_steps <= 0:
        raise ValueError(f"max_steps must be positive, got {cfg.max_steps}")
    if cfg.margin < 0 or 2 * cfg.margin >= min(cfg.width, cfg.height):
        raise ValueError(
            f"margin {cfg.margin} leaves no drawable area on {cfg.width}x{cfg.height}"
        )
    if cfg.line_count < 0:
        raise ValueError(f"line_count must not be negative, got {cfg.line_count}")
    if cfg.min_line_length < 0:
        raise ValueError(f"min_line_length must not be negative, got {cfg.min_line_length}")
    if not 0 <= cfg.smoothing <= 1:
        raise ValueError(f"smoothing must be within [0, 1], got {cfg.smoothing}")
    if cfg.separation_distance < 0:
        raise ValueError(
            f"separation_distance must not be negative, got {cfg.separation_distance}"
        )
    if cfg.min_separation <= 0:
        raise ValueError(f"min_separation must be positive, got {cfg.min_separation}")
    for attractor in cfg.attractors:
        if attractor.radius <= 0:
            raise ValueError(f"attractor radius must be positive: {attractor}")
    for dp in cfg.density_points:
        if dp.radius <= 0:
            raise ValueError(f"density point radius must be positive: {dp}")
        if not 0 <= dp.strength <= 1:
            raise ValueError(f"density point strength must be within [0, 1]: {dp}")
    try:
        FieldMode(cfg.field_mode)
    except ValueError:
        modes = ", ".join(mode.value for mode in FieldMode)
        raise ValueError(f"Unknown field_mode {cfg.field_mode!r}. Expected one of: {modes}")


def resolve_strategy(cfg: FlowLinesConfig) -> Strategy:
    if cfg.form_hatching_mode:
        return Strategy.HATCHING
    if cfg.swarm_mode:
        return Strategy.SWARM
    if cfg.fill_mode and cfg.separation_distance > 0:
        return Strategy.FILL
    if cfg.bidirectional:
        return Strategy.BIDIRECTIONAL
    return Strategy.BASIC


def _basic(cfg: FlowLinesConfig, field: FlowField, seed: int) -> List[FlowLine]:
    return trace_seeded_lines(cfg, field, make_rng(seed, START_POINTS_RNG_OFFSET))


def _bidirectional(cfg: FlowLinesConfig, field: FlowField, seed: int) -> List[FlowLine]:
    return trace_seeded_lines(
        cfg, field, make_rng(seed, START_POINTS_RNG_OFFSET), bidirectional=True
    )


def _fill(cfg: FlowLinesConfig, field: FlowField, seed: int) -> List[FlowLine]:
    return fill_streamlines(cfg, field, seed, make_rng(seed, FILL_RNG_OFFSET))


def _swarm(cfg: FlowLinesConfig, field: FlowField, seed: int) -> List[FlowLine]:
    return simulate_swarm(cfg, field, seed, make_rng(seed, SWARM_RNG_OFFSET))


def _hatching(cfg: FlowLinesConfig, field: FlowField, seed: int) -> List[FlowLine]:
    return hatch_form(cfg, seed, make_rng(seed, HATCH_RNG_OFFSET))


STRATEGIES: Dict[Strategy, Callable[[FlowLinesConfig, FlowField, int], List[FlowLine]]] = {
    Strategy.BASIC: _basic,
    Strategy.BIDIRECTIONAL: _bidirectional,
    Strategy.FILL: _fill,
    Strategy.SWARM: _swarm,
    Strategy.HATCHING: _hatching,
}


def build_field(cfg: FlowLinesConfig, seed: int) -> FlowField:
    return FlowField(
        cfg.width,
        cfg.height,
        cfg.field_resolution,
        seed=seed,
        noise_scale=cfg.noise_scale,
        octaves=cfg.octaves,
        persistence=cfg.persistence,
        lacunarity=cfg.lacunarity,
        mode=FieldMode(cfg.field_mode),
        spiral_strength=cfg.spiral_strength,
        warp_strength=cfg.warp_strength,
    )


def generate_flow_lines(cfg: FlowLinesConfig) -> FlowLinesResult:
    validate_config(cfg)
    seed = cfg.seed if cfg.seed is not None else random_seed()

    strategy = resolve_strategy(cfg)
    field = build_field(cfg, seed)
    lines = STRATEGIES[strategy](cfg, field, seed)

    return FlowLinesResult(lines=lines, width=cfg.width, height=cfg.height, seed=seed)


def generate_flow_lines_grid(cfg: FlowLinesConfig, grid_spacing: float) -> FlowLinesResult:
    """Trace one line from every node of a regular grid inside the margin."""
    starts = grid_start_points(cfg.width, cfg.height, grid_spacing, cfg.margin)
    return generate_flow_lines(
        dataclasses.replace(cfg, start_points=starts, line_count=len(starts))
    )
