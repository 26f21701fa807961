"""Rocket spawner — budget, target selection, and difficulty ramp.

A session launches at most ``ROCKET_BUDGET`` rockets.  Each rocket picks a
live city or battery at random as its aim point; once every asset is
gone it aims at a random ground point instead, so spawning continues and
loss is decided by the game mode rather than by a stalled spawner.

Difficulty rises with score along one linear curve: rocket speed grows by
1/3000 per point and the spawn interval shrinks by 1.2 ms per point down
to a 300 ms floor.  The interval is enforced by the driver's spawn timer;
this module only computes it.
"""

from __future__ import annotations

import random
from typing import Sequence

from .entities import (
    CANVAS_WIDTH,
    GROUND_Y,
    Battery,
    City,
    Rocket,
    new_entity_id,
)
from .geometry import Point

ROCKET_BUDGET = 50

BASE_ROCKET_SPEED = 0.2
ROCKET_SPEED_JITTER = 0.2
SCORE_SPEED_DIVISOR = 3000.0

BASE_SPAWN_INTERVAL_MS = 1200.0
MIN_SPAWN_INTERVAL_MS = 300.0
SPAWN_INTERVAL_PER_POINT_MS = 1.2


def spawn_interval(score: int) -> float:
    """Milliseconds between spawns at the given score."""
    return max(MIN_SPAWN_INTERVAL_MS, BASE_SPAWN_INTERVAL_MS - score * SPAWN_INTERVAL_PER_POINT_MS)


def rocket_speed(score: int, rng: random.Random | None = None) -> float:
    rng = rng or random
    return BASE_ROCKET_SPEED + rng.uniform(0, ROCKET_SPEED_JITTER) + score / SCORE_SPEED_DIVISOR


def spawn_rocket(
    total_spawned: int,
    score: int,
    cities: Sequence[City],
    batteries: Sequence[Battery],
    rng: random.Random | None = None,
) -> Rocket | None:
    """Create the next rocket, or None once the session budget is spent."""
    if total_spawned >= ROCKET_BUDGET:
        return None
    rng = rng or random

    live_targets = [c for c in cities if c.alive] + [b for b in batteries if b.alive]
    if live_targets:
        aim_x = rng.choice(live_targets).x
    else:
        aim_x = rng.uniform(0, CANVAS_WIDTH)

    start = Point(rng.uniform(0, CANVAS_WIDTH), 0.0)
    return Rocket(
        id=new_entity_id(),
        start=start,
        current=start.copy(),
        target=Point(aim_x, GROUND_Y),
        speed=rocket_speed(score, rng),
    )
