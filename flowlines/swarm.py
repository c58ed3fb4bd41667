"""Agent-based swarm simulation: every agent leaves its trail as a line."""

import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .field import FlowField
from .models import FlowLine, FlowLinesConfig, Point
from .noise import (
    DENSITY_NOISE_OFFSET,
    FORM_NOISE_OFFSET,
    SWARM_WANDER_NOISE_OFFSET,
    SimplexNoise,
)
from .postprocess import smooth_line
from .spatial import SpatialGrid

TRAIL_CAP = 5000
SPAWN_TRIES = 10
WANDER_SCALE = 0.01


@dataclass
class Agent:
    id: int
    x: float
    y: float
    vx: float
    vy: float
    energy: float
    max_energy: float

    # Personality
    wander_strength: float
    speed_multiplier: float
    cluster_affinity: float
    phase: float  # offsets the wander noise so agents don't all turn alike

    generation: int = 0
    parent_id: Optional[int] = None
    alive: bool = True
    trail: List[Point] = field(default_factory=list)


def _normalize(x: float, y: float) -> Tuple[float, float, float]:
    length = math.hypot(x, y)
    if length == 0:
        return 0.0, 0.0, 0.0
    return x / length, y / length, length


class SwarmSimulation:
    """Ticks a population of agents through the flow field.

    Agents are stored in an arena keyed by integer id. Children record their
    parent's id only; personality and energy are copied at spawn time.
    Retired agents stay in the arena with their trail released.
    """

    def __init__(self, cfg: FlowLinesConfig, field: FlowField, seed: int, rng: random.Random):
        self.cfg = cfg
        self.field = field
        self.rng = rng

        self.density_noise = SimplexNoise(seed + DENSITY_NOISE_OFFSET)
        self.form_noise = SimplexNoise(seed + FORM_NOISE_OFFSET)
        self.wander_noise = SimplexNoise(seed + SWARM_WANDER_NOISE_OFFSET)

        self.agents: Dict[int, Agent] = {}
        # agents still moving, in spawn order
        self.living: Dict[int, Agent] = {}
        self.lines: List[FlowLine] = []
        self.iterations = 0
        self._next_id = 0

    # -------------------------
    # Density landscape
    # -------------------------

    def density(self, x: float, y: float) -> float:
        s = self.cfg.swarm_density_scale
        return self.density_noise.fbm(x * s, y * s, 3, 0.5, 2)

    def _density_gradient(self, x: float, y: float) -> Tuple[float, float]:
        s = self.cfg.swarm_density_scale
        return self.density_noise.gradient2d(x * s, y * s, 3, 0.5, 2)

    # -------------------------
    # Population
    # -------------------------

    def _new_agent(
        self,
        x: float,
        y: float,
        energy: float,
        wander: float,
        speed: float,
        affinity: float,
        generation: int = 0,
        parent_id: Optional[int] = None,
    ) -> Agent:
        vx, vy = self.field.vector(x, y, self.cfg.attractors)
        agent = Agent(
            id=self._next_id,
            x=x,
            y=y,
            vx=vx,
            vy=vy,
            energy=energy,
            max_energy=energy,
            wander_strength=wander,
            speed_multiplier=speed,
            cluster_affinity=affinity,
            phase=self.rng.random() * 100.0,
            generation=generation,
            parent_id=parent_id,
            trail=[(x, y)],
        )
        self.agents[agent.id] = agent
        self.living[agent.id] = agent
        self._next_id += 1
        return agent

    def _random_personality(self) -> Tuple[float, float, float]:
        cfg = self.cfg
        wander = cfg.swarm_wander * (0.5 + self.rng.random())
        speed = 0.6 + self.rng.random() * 0.8
        affinity = self.rng.random()
        return wander, speed, affinity

    def spawn_initial(self) -> None:
        cfg = self.cfg
        for _ in range(cfg.swarm_agents):
            x = y = 0.0
            for _try in range(SPAWN_TRIES):
                x = cfg.margin + self.rng.random() * (cfg.width - 2 * cfg.margin)
                y = cfg.margin + self.rng.random() * (cfg.height - 2 * cfg.margin)
                if self.density(x, y) >= cfg.swarm_void_threshold:
                    break
            wander, speed, affinity = self._random_personality()
            energy = cfg.swarm_energy * (0.5 + self.rng.random() * 0.5)
            self._new_agent(x, y, energy, wander, speed, affinity)

    def alive_count(self) -> int:
        return len(self.living)

    def _maybe_reproduce(self, parent: Agent) -> None:
        cfg = self.cfg
        if parent.energy <= parent.max_energy * 0.5:
            return
        if self.alive_count() >= cfg.swarm_max_agents:
            return

        density01 = (self.density(parent.x, parent.y) + 1) / 2
        if self.rng.random() >= cfg.swarm_spawn_rate * (0.5 + density01):
            return

        side = 1 if self.rng.random() < 0.5 else -1
        dx, dy, speed = _normalize(parent.vx, parent.vy)
        if speed == 0:
            return
        offset = 2 * cfg.step_length
        cx = parent.x - side * dy * offset
        cy = parent.y + side * dx * offset
        if not self.field.in_bounds(cx, cy, cfg.margin):
            return

        inherit = cfg.swarm_inherit
        wander, speed_mult, affinity = self._random_personality()
        child_energy = parent.energy * inherit * 0.5
        parent.energy -= parent.energy * cfg.swarm_spawn_cost
        self._new_agent(
            cx,
            cy,
            child_energy,
            inherit * parent.wander_strength + (1 - inherit) * wander,
            inherit * parent.speed_multiplier + (1 - inherit) * speed_mult,
            inherit * parent.cluster_affinity + (1 - inherit) * affinity,
            generation=parent.generation + 1,
            parent_id=parent.id,
        )

    # -------------------------
    # Steering
    # -------------------------

    def _steer(self, agent: Agent, neighbors: SpatialGrid) -> Tuple[float, float]:
        cfg = self.cfg
        x, y = agent.x, agent.y
        base_x, base_y = self.field.vector(x, y, cfg.attractors)

        # wander: rotate the field direction by a noise driven angle
        wn = self.wander_noise.noise2d(
            x * WANDER_SCALE + agent.phase, y * WANDER_SCALE + self.iterations * 0.01
        )
        angle = wn * math.pi * agent.wander_strength
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        dx = base_x * cos_a - base_y * sin_a
        dy = base_x * sin_a + base_y * cos_a

        # clustering toward the inverse-distance weighted centroid
        pull = cfg.swarm_cluster_attraction * agent.cluster_affinity
        if pull > 0 and cfg.swarm_cluster_radius > 0:
            sum_w = sum_x = sum_y = 0.0
            for px, py in neighbors.query(x, y, cfg.swarm_cluster_radius):
                dist = math.hypot(px - x, py - y)
                if dist < 1e-9:
                    continue
                w = 1.0 / dist
                sum_w += w
                sum_x += px * w
                sum_y += py * w
            if sum_w > 0:
                tx, ty, _ = _normalize(sum_x / sum_w - x, sum_y / sum_w - y)
                dx += tx * pull
                dy += ty * pull

        # form: wrap around the implied surface of the form noise
        if cfg.swarm_form_strength > 0:
            s = cfg.swarm_form_scale
            gx, gy = self.form_noise.gradient2d(x * s, y * s, 3, 0.5, 2)
            fx, fy, _ = _normalize(gy, -gx)
            dx += fx * cfg.swarm_form_strength
            dy += fy * cfg.swarm_form_strength

        # voids push agents back toward denser territory
        d = self.density(x, y)
        if d < cfg.swarm_void_threshold and cfg.swarm_void_repulsion > 0:
            gx, gy = self._density_gradient(x, y)
            ux, uy, _ = _normalize(gx, gy)
            depth = cfg.swarm_void_threshold - d
            dx += ux * cfg.swarm_void_repulsion * depth
            dy += uy * cfg.swarm_void_repulsion * depth

        nx, ny, length = _normalize(dx, dy)
        if length > 0:
            return nx, ny
        px, py, plen = _normalize(agent.vx, agent.vy)
        if plen > 0:
            return px, py
        return base_x, base_y

    # -------------------------
    # Simulation
    # -------------------------

    def _retire(self, agent: Agent) -> None:
        agent.alive = False
        del self.living[agent.id]
        cfg = self.cfg
        trail, agent.trail = agent.trail, []
        if len(trail) < cfg.min_line_length or len(self.lines) >= cfg.line_count:
            return
        if cfg.smoothing > 0 and len(trail) > 2:
            trail = smooth_line(trail, cfg.smoothing)
        self.lines.append(FlowLine(tuple(trail)))

    def _advance(self, agent: Agent, neighbors: SpatialGrid) -> None:
        cfg = self.cfg
        dx, dy = self._steer(agent, neighbors)

        speed = cfg.step_length * agent.speed_multiplier
        if cfg.swarm_energy_slowdown and agent.max_energy > 0:
            speed *= 0.4 + 0.6 * max(0.0, agent.energy) / agent.max_energy

        nx = agent.x + dx * speed
        ny = agent.y + dy * speed
        agent.energy -= 1

        if not self.field.in_bounds(nx, ny, cfg.margin):
            self._retire(agent)
            return

        agent.x, agent.y = nx, ny
        agent.vx, agent.vy = dx * speed, dy * speed
        agent.trail.append((nx, ny))

        if (
            agent.energy <= 0
            or self.density(nx, ny) < cfg.swarm_void_threshold - cfg.swarm_void_depth
            or len(agent.trail) >= TRAIL_CAP
        ):
            self._retire(agent)
            return

        self._maybe_reproduce(agent)

    def tick(self) -> None:
        cfg = self.cfg
        living = list(self.living.values())

        neighbors = SpatialGrid(max(cfg.swarm_cluster_radius, 1.0))
        for agent in living:
            neighbors.add((agent.x, agent.y))

        for agent in living:
            if len(self.lines) >= cfg.line_count:
                break
            self._advance(agent, neighbors)

        self.iterations += 1

    def run(self) -> List[FlowLine]:
        cfg = self.cfg
        self.spawn_initial()

        while (
            self.alive_count() > 0
            and len(self.lines) < cfg.line_count
            and self.iterations < cfg.swarm_max_iterations
        ):
            self.tick()

        for agent in list(self.living.values()):
            self._retire(agent)

        return self.lines


def simulate_swarm(
    cfg: FlowLinesConfig, field: FlowField, seed: int, rng: random.Random
) -> List[FlowLine]:
    return SwarmSimulation(cfg, field, seed, rng).run()
