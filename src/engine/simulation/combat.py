"""CombatSystem — interceptor launches, detonations, impacts, and kills.

Architecture
------------
CombatSystem holds no entity state of its own.  The SimulationEngine owns
the collections and hands them in on each call, so a test can set up any
board position with plain lists.

  1. ``fire()`` picks the closest alive battery with ammo to the commanded
     x coordinate, spends one round, and appends a FLYING Interceptor.

  2. ``resolve_rocket_impacts()`` handles rockets the motion pass reported
     as arrived: a 30-unit explosion at the impact point, then every alive
     city and battery within 25 units (x only) is destroyed.  One impact
     can take out a city and a battery together.

  3. ``detonate_interceptors()`` replaces each arrived interceptor with a
     heart explosion at its commanded point.  The EXPLODING state is set
     and the interceptor leaves the collection in the same call, so it is
     never observed from outside.

  4. ``tick_explosions()`` decays every explosion, drops the spent ones,
     and tests the rest against live rockets.  A rocket is destroyed by
     the first explosion that covers it; later explosions skip it.

Every pass marks entities first and compacts the collection afterwards,
so no element is skipped by removal during iteration.

Events are published on the EventBus for the frontend:
  - ``interceptor_fired``: a battery launched an interceptor
  - ``interceptor_detonated``: an interceptor reached its point
  - ``rocket_impact``: a rocket reached the ground
  - ``city_destroyed`` / ``battery_destroyed``: an asset was hit
  - ``rocket_destroyed``: an explosion killed a rocket
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from loguru import logger

from .entities import (
    LAUNCH_Y,
    ROCKET_EXPLOSION_RADIUS,
    Battery,
    City,
    Explosion,
    Interceptor,
    InterceptorState,
    Rocket,
    new_entity_id,
)
from .geometry import Point, distance, is_finite_point

if TYPE_CHECKING:
    from engine.comms.event_bus import EventBus

# Ground damage band around an impact, measured along x only
IMPACT_RADIUS = 25.0


def select_battery(x: float, batteries: Sequence[Battery]) -> Battery | None:
    """Closest battery able to fire; ties go to the earliest in the list."""
    best: Battery | None = None
    best_dist = 0.0
    for battery in batteries:
        if not battery.can_fire:
            continue
        dist = abs(battery.x - x)
        if best is None or dist < best_dist:
            best = battery
            best_dist = dist
    return best


class CombatSystem:
    """Resolves launches, detonations, ground impacts, and explosion kills."""

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self._event_bus = event_bus

    def set_event_bus(self, event_bus: EventBus | None) -> None:
        self._event_bus = event_bus

    # -- Player intent ----------------------------------------------------------

    def fire(
        self,
        x: float,
        y: float,
        batteries: Sequence[Battery],
        interceptors: list[Interceptor],
    ) -> Interceptor | None:
        """Launch an interceptor toward (x, y).

        Returns the Interceptor, or None when the coordinates are not
        finite or no battery can fire.  Neither case is an error.
        """
        if not is_finite_point(x, y):
            logger.debug(f"Ignoring fire command with non-finite point ({x}, {y})")
            return None

        battery = select_battery(x, batteries)
        if battery is None:
            return None
        battery.ammo -= 1

        start = Point(battery.x, LAUNCH_Y)
        interceptor = Interceptor(
            id=new_entity_id(),
            start=start,
            current=start.copy(),
            target=Point(float(x), float(y)),
        )
        interceptors.append(interceptor)

        self._publish("interceptor_fired", {
            "id": interceptor.id,
            "battery_id": battery.id,
            "ammo_remaining": battery.ammo,
            "target": interceptor.target.to_dict(),
        })
        return interceptor

    # -- Arrivals ---------------------------------------------------------------

    def resolve_rocket_impacts(
        self,
        arrived: Sequence[Rocket],
        rockets: list[Rocket],
        cities: Sequence[City],
        batteries: Sequence[Battery],
        explosions: list[Explosion],
    ) -> None:
        """Detonate arrived rockets on the ground and destroy nearby assets."""
        if not arrived:
            return
        landed: set[str] = set()
        for rocket in arrived:
            landed.add(rocket.id)
            impact = rocket.current
            explosions.append(Explosion(
                id=f"exp-{rocket.id}",
                x=impact.x,
                y=impact.y,
                max_radius=ROCKET_EXPLOSION_RADIUS,
            ))
            self._publish("rocket_impact", {"id": rocket.id, "position": impact.to_dict()})

            for city in cities:
                if city.alive and abs(city.x - impact.x) < IMPACT_RADIUS:
                    city.alive = False
                    logger.debug(f"City {city.id} destroyed by rocket {rocket.id}")
                    self._publish("city_destroyed", {"city_id": city.id, "rocket_id": rocket.id})
            for battery in batteries:
                if battery.alive and abs(battery.x - impact.x) < IMPACT_RADIUS:
                    battery.alive = False
                    logger.debug(f"Battery {battery.id} destroyed by rocket {rocket.id}")
                    self._publish("battery_destroyed", {
                        "battery_id": battery.id,
                        "rocket_id": rocket.id,
                        "ammo_lost": battery.ammo,
                    })

        rockets[:] = [r for r in rockets if r.id not in landed]

    def detonate_interceptors(
        self,
        arrived: Sequence[Interceptor],
        interceptors: list[Interceptor],
        explosions: list[Explosion],
    ) -> None:
        """Replace arrived interceptors with explosions at their commanded point."""
        if not arrived:
            return
        for interceptor in arrived:
            interceptor.state = InterceptorState.EXPLODING
            explosions.append(Explosion(
                id=f"exp-{interceptor.id}",
                x=interceptor.target.x,
                y=interceptor.target.y,
                max_radius=interceptor.max_explosion_radius,
                is_heart=True,
            ))
            self._publish("interceptor_detonated", {
                "id": interceptor.id,
                "position": interceptor.target.to_dict(),
            })

        interceptors[:] = [i for i in interceptors if i.state is InterceptorState.FLYING]

    # -- Explosions -------------------------------------------------------------

    def tick_explosions(self, explosions: list[Explosion], rockets: list[Rocket]) -> int:
        """Decay explosions and destroy the rockets inside them.

        Returns the number of rockets destroyed this tick.
        """
        destroyed: set[str] = set()
        for explosion in explosions:
            explosion.decay()
            if not explosion.alive:
                continue
            explosion.update_radius()
            center = explosion.center
            for rocket in rockets:
                if rocket.id in destroyed:
                    continue
                if distance(rocket.current, center) < explosion.radius:
                    destroyed.add(rocket.id)
                    self._publish("rocket_destroyed", {
                        "id": rocket.id,
                        "explosion_id": explosion.id,
                        "position": rocket.current.to_dict(),
                    })

        explosions[:] = [e for e in explosions if e.alive]
        if destroyed:
            rockets[:] = [r for r in rockets if r.id not in destroyed]
        return len(destroyed)

    # -- Event publishing -------------------------------------------------------

    def _publish(self, event_type: str, data: dict) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event_type, data)
