"""SimulationEngine — authoritative per-frame driver for a defense session.

Architecture
------------
The engine is the sole owner of the five entity collections (rockets,
interceptors, explosions, cities, batteries) and of the GameMode that
holds the session counters.  Each ``tick(delta_ms)`` runs a fixed
pipeline while the session is PLAYING:

  1. spawn    — advance the spawn timer by ``delta_ms``; when it passes
                the score-dependent interval, try to spawn a rocket and
                reset the timer
  2. move     — MotionIntegrator steps every rocket and interceptor
  3. collide  — rocket ground impacts, interceptor detonations, then the
                explosion kill test (CombatSystem)
  4. evaluate — score kills, then GameMode checks the loss conditions

Timing: ``delta_ms`` only gates the spawn cadence.  Motion and explosion
decay are fixed per call, so the caller is expected to tick at a roughly
constant frame rate.  ``start()`` runs such a loop on a daemon thread for
headless/API use; presentation clients may instead call ``tick()``
directly from their own frame callback.

Thread safety: ``tick``, ``fire`` and ``init_session`` serialize on one
lock, so the HTTP layer and the frame loop never mutate state at the same
time.  Snapshot properties return tuples taken under the same lock.
"""

from __future__ import annotations

import random
import threading
import time
from typing import TYPE_CHECKING

from loguru import logger

from .combat import CombatSystem
from .entities import (
    Battery,
    City,
    Explosion,
    GameState,
    Interceptor,
    Rocket,
    build_batteries,
    build_cities,
)
from .game_mode import GameMode
from .motion import MotionIntegrator
from .spawner import spawn_interval, spawn_rocket

if TYPE_CHECKING:
    from engine.comms.event_bus import EventBus

DEFAULT_FPS = 60


class SimulationEngine:
    """Owns all session state and drives it one frame at a time."""

    def __init__(self, event_bus: EventBus | None = None,
                 rng: random.Random | None = None) -> None:
        self._event_bus = event_bus
        self._rng = rng
        self._lock = threading.RLock()

        self._rockets: list[Rocket] = []
        self._interceptors: list[Interceptor] = []
        self._explosions: list[Explosion] = []
        self._cities: list[City] = []
        self._batteries: list[Battery] = []

        self.combat = CombatSystem(event_bus)
        self.motion = MotionIntegrator()
        self.game_mode = GameMode(event_bus)

        self._running = False
        self._thread: threading.Thread | None = None
        self._fps = DEFAULT_FPS
        self._tick_counter = 0

    @property
    def event_bus(self) -> EventBus | None:
        return self._event_bus

    def set_event_bus(self, event_bus: EventBus | None) -> None:
        """Rewire the engine and its subsystems to a different bus."""
        self._event_bus = event_bus
        self.combat.set_event_bus(event_bus)
        self.game_mode.set_event_bus(event_bus)

    # -- Session control --------------------------------------------------------

    def init_session(self) -> None:
        """Start (or restart) a session from the fixed initial layout."""
        with self._lock:
            self._rockets.clear()
            self._interceptors.clear()
            self._explosions.clear()
            self._cities = build_cities()
            self._batteries = build_batteries()
            self._tick_counter = 0
            self.game_mode.begin_session()

    def fire(self, x: float, y: float) -> Interceptor | None:
        """Player intent: launch an interceptor at (x, y).  No-op unless PLAYING."""
        with self._lock:
            if not self.game_mode.is_playing:
                return None
            return self.combat.fire(x, y, self._batteries, self._interceptors)

    def tick(self, delta_ms: float) -> GameState:
        """Run one simulation step.  Returns the state after the step."""
        with self._lock:
            if not self.game_mode.is_playing:
                return self.game_mode.state
            self._tick_counter += 1

            self._tick_spawner(delta_ms)

            arrivals = self.motion.tick(self._rockets, self._interceptors)
            self.combat.resolve_rocket_impacts(
                arrivals.rockets, self._rockets,
                self._cities, self._batteries, self._explosions,
            )
            self.combat.detonate_interceptors(
                arrivals.interceptors, self._interceptors, self._explosions,
            )
            kills = self.combat.tick_explosions(self._explosions, self._rockets)

            self.game_mode.award_kills(kills)
            return self.game_mode.evaluate(self._batteries, self._rockets)

    def _tick_spawner(self, delta_ms: float) -> None:
        gm = self.game_mode
        gm.spawn_timer += delta_ms
        if gm.spawn_timer <= spawn_interval(gm.score):
            return
        gm.spawn_timer = 0.0
        rocket = spawn_rocket(
            gm.total_spawned, gm.score, self._cities, self._batteries, rng=self._rng,
        )
        if rocket is None:
            return
        self._rockets.append(rocket)
        gm.record_spawn()
        logger.debug(f"Rocket {rocket.id} launched ({gm.total_spawned} spawned)")

    # -- Direct entity placement (scenario setup) -------------------------------

    def add_rocket(self, rocket: Rocket) -> None:
        with self._lock:
            self._rockets.append(rocket)

    def add_interceptor(self, interceptor: Interceptor) -> None:
        with self._lock:
            self._interceptors.append(interceptor)

    def add_explosion(self, explosion: Explosion) -> None:
        with self._lock:
            self._explosions.append(explosion)

    # -- Read-only snapshots ----------------------------------------------------

    @property
    def state(self) -> GameState:
        return self.game_mode.state

    @property
    def score(self) -> int:
        return self.game_mode.score

    @property
    def remaining_rockets(self) -> int:
        return self.game_mode.remaining_rockets

    @property
    def total_ammo(self) -> int:
        with self._lock:
            return sum(b.ammo for b in self._batteries if b.alive)

    @property
    def rockets(self) -> tuple[Rocket, ...]:
        with self._lock:
            return tuple(self._rockets)

    @property
    def interceptors(self) -> tuple[Interceptor, ...]:
        with self._lock:
            return tuple(self._interceptors)

    @property
    def explosions(self) -> tuple[Explosion, ...]:
        with self._lock:
            return tuple(self._explosions)

    @property
    def cities(self) -> tuple[City, ...]:
        with self._lock:
            return tuple(self._cities)

    @property
    def batteries(self) -> tuple[Battery, ...]:
        with self._lock:
            return tuple(self._batteries)

    def get_state(self) -> dict:
        """Serializable snapshot of the whole board for API/frontend."""
        with self._lock:
            state = self.game_mode.get_state()
            state.update({
                "tick": self._tick_counter,
                "total_ammo": sum(b.ammo for b in self._batteries if b.alive),
                "rockets": [r.to_dict() for r in self._rockets],
                "interceptors": [i.to_dict() for i in self._interceptors],
                "explosions": [e.to_dict() for e in self._explosions],
                "cities": [c.to_dict() for c in self._cities],
                "batteries": [b.to_dict() for b in self._batteries],
            })
            return state

    # -- Frame loop -------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    def start(self, fps: int = DEFAULT_FPS) -> None:
        """Tick from a daemon thread at *fps* frames per second."""
        if self._running:
            return
        self._fps = max(1, fps)
        self._running = True
        self._thread = threading.Thread(
            target=self._tick_loop, name="sim-tick", daemon=True
        )
        self._thread.start()
        logger.info(f"Simulation engine started ({self._fps} fps)")

    def stop(self) -> None:
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
            logger.info("Simulation engine stopped")

    def _tick_loop(self) -> None:
        frame = 1.0 / self._fps
        last = time.monotonic()
        while self._running:
            time.sleep(frame)
            now = time.monotonic()
            self.tick((now - last) * 1000.0)
            last = now
