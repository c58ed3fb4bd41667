"""Load config.toml into a FlowLinesConfig and an SvgStyle."""

import dataclasses
import os
import tomllib
from pathlib import Path
from typing import Dict, List, Tuple

from flowlines.models import (
    Attractor,
    DensityPoint,
    FieldMode,
    FlowLinesConfig,
    SvgStyle,
)

# Tables whose keys map one to one onto FlowLinesConfig fields
CONFIG_SECTIONS = (
    "canvas",
    "field",
    "lines",
    "fill",
    "organic",
    "swarm",
    "hatching",
)

# [svg] key -> SvgStyle field
SVG_KEYS = {
    "stroke_width": "stroke_width",
    "background": "include_background",
    "precision": "precision",
    "optimize_paths": "optimize_paths",
    "simplify_epsilon": "simplify_epsilon",
}

_CONFIG_FIELDS = {f.name for f in dataclasses.fields(FlowLinesConfig)}
_RESERVED = {"seed", "attractors", "density_points"}


def load_config(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("rb") as f:
        return tomllib.load(f)


def _table(config: dict, name: str) -> dict:
    table = config.get(name, {})
    if not isinstance(table, dict):
        raise TypeError(f"[{name}] must be a table in config.toml")
    return table


def _array_of_tables(config: dict, name: str) -> List[dict]:
    items = config.get(name, [])
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise TypeError(f"[[{name}]] must be an array of tables in config.toml")
    return items


def resolve_seed(config: dict) -> int:
    env_seed = os.getenv("GEN_SEED")
    if env_seed:
        return int(env_seed)
    style = _table(config, "style")
    if style.get("seed") is not None:
        return int(style["seed"])
    seed_list = style.get("seedlist")
    if isinstance(seed_list, list) and seed_list:
        return int(seed_list[0])
    raise ValueError("Missing [style].seed or [style].seedlist in config.toml")


def resolve_seedlist(config: dict) -> List[int]:
    """Seeds the runner should render, GEN_SEED first if set."""
    env_seed = os.getenv("GEN_SEED")
    if env_seed:
        return [int(env_seed)]
    style = _table(config, "style")
    seed_list = style.get("seedlist")
    if seed_list is not None:
        if not isinstance(seed_list, list) or not seed_list:
            raise ValueError("[style].seedlist must be a non-empty list in config.toml")
        return [int(value) for value in seed_list]
    return [resolve_seed(config)]


def _points(values: list, name: str) -> List[Tuple[float, float]]:
    points = []
    for value in values:
        if not isinstance(value, list) or len(value) != 2:
            raise ValueError(f"{name} entries must be [x, y] pairs, got {value!r}")
        points.append((float(value[0]), float(value[1])))
    return points


def build_flow_config(config: dict, seed: int) -> FlowLinesConfig:
    values: Dict[str, object] = {}
    for section in CONFIG_SECTIONS:
        for key, value in _table(config, section).items():
            if key not in _CONFIG_FIELDS or key in _RESERVED:
                raise ValueError(f"Unknown key [{section}].{key} in config.toml")
            values[key] = value

    for required in ("width", "height"):
        if required not in values:
            raise ValueError(f"Missing [canvas].{required} in config.toml")

    if "field_mode" in values:
        values["field_mode"] = FieldMode(values["field_mode"])
    if "start_points" in values:
        values["start_points"] = _points(values["start_points"], "start_points")

    values["attractors"] = [
        Attractor(**item) for item in _array_of_tables(config, "attractors")
    ]
    values["density_points"] = [
        DensityPoint(**item) for item in _array_of_tables(config, "density_points")
    ]
    return FlowLinesConfig(seed=seed, **values)


def build_svg_style(config: dict) -> SvgStyle:
    options = {}
    for key, value in _table(config, "svg").items():
        if key not in SVG_KEYS:
            raise ValueError(f"Unknown key [svg].{key} in config.toml")
        options[SVG_KEYS[key]] = value

    colors = _table(config, "colors")
    if "bg" in colors:
        options["background_color"] = colors["bg"]
    if "stroke" in colors:
        options["stroke_color"] = colors["stroke"]
    return SvgStyle.from_mapping(options)
