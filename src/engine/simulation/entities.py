"""Entity model — rockets, interceptors, explosions, cities, batteries.

Architecture
------------
Every entity is a *flat dataclass* with no behaviour beyond trivial
derived values.  The per-tick logic (motion, collisions, scoring) lives in
the systems that operate on collections of these records, so the same
records can be serialized for the API without any translation layer.

All coordinates are in a fixed logical canvas of 800 x 600 units with the
origin in the top-left corner; rockets descend from y=0 toward the ground
band at ``GROUND_Y``.

Ownership: the SimulationEngine owns every collection for the lifetime of
one session.  Cities and batteries are rebuilt from the fixed layouts
below when a new session starts; the dynamic collections are cleared.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass

from .geometry import Point

CANVAS_WIDTH = 800.0
CANVAS_HEIGHT = 600.0

# Rockets aim here; cities and batteries sit on this line
GROUND_Y = CANVAS_HEIGHT - 20

# Interceptors leave the battery at this height
LAUNCH_Y = CANVAS_HEIGHT - 30

ROCKET_COLOR = "#ef4444"

INTERCEPTOR_SPEED = 4.0
INTERCEPTOR_EXPLOSION_RADIUS = 40.0
ROCKET_EXPLOSION_RADIUS = 30.0

# Life lost per tick; a fresh explosion lasts ceil(1 / 0.015) = 67 ticks
EXPLOSION_DECAY = 0.015

CITY_COUNT = 6

# (x, ammo) for the left, center and right batteries
BATTERY_LAYOUT: list[tuple[float, int]] = [
    (40.0, 15),
    (CANVAS_WIDTH / 2, 20),
    (CANVAS_WIDTH - 40.0, 15),
]


def new_entity_id() -> str:
    return uuid.uuid4().hex[:9]


class GameState(str, enum.Enum):
    """Top-level session state machine."""

    START = "START"
    PLAYING = "PLAYING"
    WON = "WON"
    LOST = "LOST"


class InterceptorState(str, enum.Enum):
    FLYING = "FLYING"
    EXPLODING = "EXPLODING"


@dataclass
class Rocket:
    """An enemy projectile descending toward a ground point."""

    id: str
    start: Point
    current: Point
    target: Point
    speed: float
    color: str = ROCKET_COLOR

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start": self.start.to_dict(),
            "current": self.current.to_dict(),
            "target": self.target.to_dict(),
            "speed": self.speed,
            "color": self.color,
        }


@dataclass
class Interceptor:
    """A player-fired projectile flying to the commanded point."""

    id: str
    start: Point
    current: Point
    target: Point
    speed: float = INTERCEPTOR_SPEED
    state: InterceptorState = InterceptorState.FLYING
    max_explosion_radius: float = INTERCEPTOR_EXPLOSION_RADIUS

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start": self.start.to_dict(),
            "current": self.current.to_dict(),
            "target": self.target.to_dict(),
            "speed": self.speed,
            "state": self.state.value,
            "max_explosion_radius": self.max_explosion_radius,
        }


@dataclass
class Explosion:
    """A growing-then-fading kill zone.

    ``radius`` is derived from ``life`` with an ease-out curve so most of
    the area is covered right after detonation.  ``is_heart`` only selects
    the cosmetic variant drawn for player detonations.
    """

    id: str
    x: float
    y: float
    max_radius: float
    radius: float = 0.0
    life: float = 1.0
    is_heart: bool = False

    @property
    def alive(self) -> bool:
        return self.life > 0

    @property
    def center(self) -> Point:
        return Point(self.x, self.y)

    def decay(self) -> None:
        self.life -= EXPLOSION_DECAY

    def update_radius(self) -> None:
        self.radius = self.max_radius * (1 - (1 - self.life) ** 2)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "radius": self.radius,
            "max_radius": self.max_radius,
            "life": self.life,
            "is_heart": self.is_heart,
        }


@dataclass
class City:
    id: int
    x: float
    alive: bool = True

    def to_dict(self) -> dict:
        return {"id": self.id, "x": self.x, "alive": self.alive}


@dataclass
class Battery:
    """A defense installation.  Dead batteries keep their ammo count but never fire."""

    id: int
    x: float
    ammo: int
    max_ammo: int
    alive: bool = True

    @property
    def can_fire(self) -> bool:
        return self.alive and self.ammo > 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.x,
            "ammo": self.ammo,
            "max_ammo": self.max_ammo,
            "alive": self.alive,
        }


def build_cities() -> list[City]:
    """Six cities evenly spaced across the band between the outer batteries."""
    spacing = (CANVAS_WIDTH - 200) / 7
    return [City(id=i, x=100 + (i + 1) * spacing) for i in range(CITY_COUNT)]


def build_batteries() -> list[Battery]:
    return [
        Battery(id=i, x=x, ammo=ammo, max_ammo=ammo)
        for i, (x, ammo) in enumerate(BATTERY_LAYOUT)
    ]

