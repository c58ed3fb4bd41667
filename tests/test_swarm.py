import math
import random

import pytest

from flowlines.field import FlowField
from flowlines.generator import generate_flow_lines
from flowlines.models import FlowLinesConfig
from flowlines.spatial import SpatialGrid
from flowlines.swarm import SwarmSimulation

from .conftest import all_points


def swarm_config(**kwargs):
    values = dict(
        width=300,
        height=300,
        line_count=25,
        seed=12,
        swarm_mode=True,
        swarm_agents=10,
        swarm_energy=120,
        swarm_spawn_rate=0.2,
        min_line_length=5,
    )
    values.update(kwargs)
    return FlowLinesConfig(**values)


def test_swarm_is_deterministic():
    cfg = swarm_config()
    assert generate_flow_lines(cfg).lines == generate_flow_lines(cfg).lines


def test_swarm_lines_are_contained_and_long_enough():
    cfg = swarm_config()
    result = generate_flow_lines(cfg)
    assert result.lines
    assert len(result.lines) <= cfg.line_count
    assert all(len(line) >= cfg.min_line_length for line in result.lines)
    for x, y in all_points(result.lines):
        assert cfg.margin <= x < cfg.width - cfg.margin
        assert cfg.margin <= y < cfg.height - cfg.margin


def _simulation(cfg):
    field = FlowField(cfg.width, cfg.height, cfg.field_resolution, seed=cfg.seed)
    return SwarmSimulation(cfg, field, cfg.seed, random.Random(cfg.seed))


def test_children_reference_parents_by_id():
    cfg = swarm_config(line_count=1000, swarm_spawn_rate=1.0, swarm_energy=60)
    sim = _simulation(cfg)
    sim.run()

    children = [agent for agent in sim.agents.values() if agent.parent_id is not None]
    assert children
    for child in children:
        parent = sim.agents[child.parent_id]
        assert parent.id < child.id
        assert child.generation == parent.generation + 1


def test_population_cap_is_respected():
    cfg = swarm_config(line_count=1000, swarm_spawn_rate=1.0, swarm_max_agents=12)
    sim = _simulation(cfg)
    sim.spawn_initial()
    while sim.alive_count() and sim.iterations < 200:
        sim.tick()
        assert sim.alive_count() <= 12


def test_run_retires_every_agent():
    cfg = swarm_config(swarm_max_iterations=5, min_line_length=1)
    sim = _simulation(cfg)
    lines = sim.run()
    assert sim.iterations <= 5
    assert not any(agent.alive for agent in sim.agents.values())
    assert lines


def test_long_spawning_run_keeps_bookkeeping_in_step():
    cfg = swarm_config(
        line_count=100000,
        swarm_spawn_rate=1.0,
        swarm_spawn_cost=0.0,
        swarm_energy=150,
        swarm_max_agents=40,
    )
    sim = _simulation(cfg)
    sim.spawn_initial()
    while sim.alive_count() and sim.iterations < 400:
        sim.tick()
        alive = [agent for agent in sim.agents.values() if agent.alive]
        assert sim.alive_count() == len(alive) <= 40
        assert list(sim.living.values()) == alive

    assert len(sim.agents) > cfg.swarm_agents
    retired = [agent for agent in sim.agents.values() if not agent.alive]
    assert retired
    assert all(agent.trail == [] for agent in retired)


def test_agent_in_a_deep_void_retires_after_one_tick():
    cfg = swarm_config(swarm_void_threshold=2.0, swarm_void_depth=0.3, min_line_length=1)
    sim = _simulation(cfg)
    agent = sim._new_agent(150.0, 150.0, 100.0, 0.0, 1.0, 0.0)

    sim.tick()

    assert not agent.alive
    assert sim.alive_count() == 0
    assert len(sim.lines) == 1
    assert len(sim.lines[0]) == 2


def test_agent_outside_voids_keeps_moving():
    cfg = swarm_config(swarm_void_threshold=-5.0, swarm_spawn_rate=0.0)
    sim = _simulation(cfg)
    agent = sim._new_agent(150.0, 150.0, 100.0, 0.0, 1.0, 0.0)

    sim.tick()

    assert agent.alive
    assert len(agent.trail) == 2


def test_void_repulsion_steers_up_the_density_gradient():
    cfg = swarm_config(
        swarm_void_threshold=2.0,
        swarm_void_repulsion=50.0,
        swarm_form_strength=0.0,
        swarm_cluster_attraction=0.0,
    )
    sim = _simulation(cfg)
    agent = sim._new_agent(150.0, 150.0, 100.0, 0.0, 1.0, 0.0)

    dx, dy = sim._steer(agent, SpatialGrid(cfg.swarm_cluster_radius))

    gx, gy = sim._density_gradient(150.0, 150.0)
    length = math.hypot(gx, gy)
    assert dx * gx / length + dy * gy / length > 0.99


def test_spawning_costs_the_parent_energy():
    cfg = swarm_config(swarm_spawn_rate=100.0, swarm_spawn_cost=0.3, swarm_inherit=0.7)
    sim = _simulation(cfg)
    parent = sim._new_agent(150.0, 150.0, 100.0, 0.5, 1.0, 0.5)

    sim._maybe_reproduce(parent)

    assert parent.energy == pytest.approx(70.0)
    child = sim.agents[parent.id + 1]
    assert child.parent_id == parent.id
    assert child.generation == 1
    assert child.energy == pytest.approx(35.0)
    assert child.max_energy == pytest.approx(35.0)
    assert sim.alive_count() == 2
