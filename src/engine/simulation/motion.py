"""Motion integrator — straight-line flight for rockets and interceptors.

Speeds are displacements per tick, not per second: the driver calls this
once per frame and the feel of the game depends on a roughly constant
frame rate.  An entity within ``ARRIVAL_RADIUS`` of its target is reported
as arrived and is not stepped, which avoids both the zero-length
direction vector and oscillation around the target.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .entities import Interceptor, InterceptorState, Rocket
from .geometry import Point, direction, distance

ARRIVAL_RADIUS = 5.0


def advance(current: Point, target: Point, speed: float) -> bool:
    """Step *current* toward *target* in place.  Returns True on arrival."""
    if distance(current, target) < ARRIVAL_RADIUS:
        return True
    step = direction(current, target)
    current.x += step.x * speed
    current.y += step.y * speed
    return False


@dataclass
class Arrivals:
    """Entities that reached their target during one motion pass."""

    rockets: list[Rocket] = field(default_factory=list)
    interceptors: list[Interceptor] = field(default_factory=list)


class MotionIntegrator:
    """Advances every active projectile by one tick."""

    def tick(
        self,
        rockets: Iterable[Rocket],
        interceptors: Iterable[Interceptor],
    ) -> Arrivals:
        arrivals = Arrivals()
        for rocket in rockets:
            if advance(rocket.current, rocket.target, rocket.speed):
                arrivals.rockets.append(rocket)
        for interceptor in interceptors:
            if interceptor.state is not InterceptorState.FLYING:
                continue
            if advance(interceptor.current, interceptor.target, interceptor.speed):
                arrivals.interceptors.append(interceptor)
        return arrivals
