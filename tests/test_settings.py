import random
import tomllib

import pytest

from flowlines.models import FieldMode
from flowlines.py_helper.seedlist_random import write_seedlist
from flowlines.py_helper.settings import (
    build_flow_config,
    build_svg_style,
    load_config,
    resolve_seed,
    resolve_seedlist,
)

CONFIG_TEXT = """
[style]
    seedlist = [11, 22]

[canvas]
    width = 300
    height = 200
    margin = 10

[field]
    field_mode = "warped"
    noise_scale = 0.01

[lines]
    line_count = 7
    start_points = [[50, 60], [70, 80]]

[colors]
    bg = "#fafafa"
    stroke = "#222222"

[svg]
    background = true
    stroke_width = 0.5

[[attractors]]
    x = 100
    y = 100
    radius = 40
    strength = -0.5
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TEXT, encoding="utf-8")
    return path


def test_build_flow_config(config_file):
    config = load_config(config_file)
    cfg = build_flow_config(config, resolve_seed(config))
    assert cfg.seed == 11
    assert (cfg.width, cfg.height, cfg.margin) == (300, 200, 10)
    assert cfg.field_mode is FieldMode.WARPED
    assert cfg.line_count == 7
    assert cfg.start_points == [(50.0, 60.0), (70.0, 80.0)]
    assert cfg.attractors[0].strength == -0.5


def test_build_svg_style(config_file):
    style = build_svg_style(load_config(config_file))
    assert style.include_background is True
    assert style.background_color == "#fafafa"
    assert style.stroke_color == "#222222"
    assert style.stroke_width == 0.5


def test_env_seed_wins(config_file, monkeypatch):
    monkeypatch.setenv("GEN_SEED", "99")
    config = load_config(config_file)
    assert resolve_seed(config) == 99
    assert resolve_seedlist(config) == [99]


def test_seedlist(config_file):
    assert resolve_seedlist(load_config(config_file)) == [11, 22]


def test_single_seed():
    assert resolve_seedlist({"style": {"seed": 5}}) == [5]


def test_missing_seed():
    with pytest.raises(ValueError):
        resolve_seed({"style": {}})


def test_empty_seedlist():
    with pytest.raises(ValueError):
        resolve_seedlist({"style": {"seedlist": []}})


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.toml")


def test_unknown_key_is_rejected():
    config = {"canvas": {"width": 10, "height": 10, "colour": "red"}}
    with pytest.raises(ValueError, match="colour"):
        build_flow_config(config, 1)


def test_seed_key_is_not_a_canvas_option():
    with pytest.raises(ValueError):
        build_flow_config({"canvas": {"width": 10, "height": 10, "seed": 3}}, 1)


def test_missing_canvas_size():
    with pytest.raises(ValueError, match="height"):
        build_flow_config({"canvas": {"width": 10}}, 1)


def test_section_must_be_a_table():
    with pytest.raises(TypeError):
        build_flow_config({"canvas": 3}, 1)


def test_unknown_svg_key():
    with pytest.raises(ValueError):
        build_svg_style({"svg": {"dashes": True}})


def test_write_seedlist_keeps_other_sections(config_file):
    seeds = write_seedlist(config_file, 4, 10, 20, rng=random.Random(3))
    assert len(seeds) == 4
    assert all(10 <= seed <= 20 for seed in seeds)

    with config_file.open("rb") as f:
        written = tomllib.load(f)
    assert written["style"]["seedlist"] == seeds
    assert written["canvas"]["width"] == 300
    assert written["lines"]["start_points"] == [[50, 60], [70, 80]]
    assert written["attractors"][0]["strength"] == -0.5


@pytest.mark.parametrize("count, low, high", [(0, 0, 10), (3, 10, 1)])
def test_write_seedlist_rejects_bad_arguments(config_file, count, low, high):
    with pytest.raises(ValueError):
        write_seedlist(config_file, count, low, high)
