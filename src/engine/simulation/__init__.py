"""Simulation subsystem — entities, spawner, motion, combat, game mode."""
from .combat import CombatSystem, select_battery
from .engine import SimulationEngine
from .entities import (
    Battery,
    City,
    Explosion,
    GameState,
    Interceptor,
    InterceptorState,
    Rocket,
    build_batteries,
    build_cities,
)
from .game_mode import GameMode
from .geometry import Point, direction, distance
from .motion import Arrivals, MotionIntegrator, advance
from .spawner import spawn_interval, spawn_rocket
from .tips import TipsService

__all__ = [
    "Arrivals",
    "Battery",
    "City",
    "CombatSystem",
    "Explosion",
    "GameMode",
    "GameState",
    "Interceptor",
    "InterceptorState",
    "MotionIntegrator",
    "Point",
    "Rocket",
    "SimulationEngine",
    "TipsService",
    "advance",
    "build_batteries",
    "build_cities",
    "direction",
    "distance",
    "select_battery",
    "spawn_interval",
    "spawn_rocket",
]
