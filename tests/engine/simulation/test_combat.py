"""Unit tests for CombatSystem — fire, impacts, detonations, explosion kills."""

from __future__ import annotations

import pytest

from engine.comms.event_bus import EventBus
from engine.simulation.combat import IMPACT_RADIUS, CombatSystem, select_battery
from engine.simulation.entities import (
    LAUNCH_Y,
    Battery,
    City,
    Explosion,
    Interceptor,
    InterceptorState,
    Rocket,
    build_batteries,
    build_cities,
)
from engine.simulation.geometry import Point


pytestmark = pytest.mark.unit


def _rocket(rid: str, x: float, y: float) -> Rocket:
    return Rocket(id=rid, start=Point(x, 0), current=Point(x, y), target=Point(x, 580), speed=0.3)


def _interceptor(iid: str, target: tuple[float, float]) -> Interceptor:
    return Interceptor(id=iid, start=Point(400, LAUNCH_Y), current=Point(*target), target=Point(*target))


# --------------------------------------------------------------------------
# Battery selection and firing
# --------------------------------------------------------------------------

class TestSelectBattery:
    def test_closest_battery(self):
        batteries = build_batteries()
        assert select_battery(100, batteries).id == 0
        assert select_battery(420, batteries).id == 1
        assert select_battery(700, batteries).id == 2

    def test_tie_goes_to_lowest_index(self):
        batteries = build_batteries()
        # 220 is exactly 180 from both x=40 and x=400
        assert select_battery(220, batteries).id == 0

    def test_skips_dead_and_empty(self):
        batteries = build_batteries()
        batteries[1].alive = False
        batteries[0].ammo = 0
        assert select_battery(400, batteries).id == 2

    def test_none_available(self):
        batteries = build_batteries()
        for b in batteries:
            b.ammo = 0
        assert select_battery(400, batteries) is None


class TestFire:
    def test_fire_spends_one_round(self):
        combat = CombatSystem()
        batteries = build_batteries()
        interceptors: list[Interceptor] = []
        inter = combat.fire(400, 560, batteries, interceptors)
        assert inter is not None
        assert [b.ammo for b in batteries] == [15, 19, 15]
        assert interceptors == [inter]
        assert inter.target == Point(400, 560)
        assert inter.start == Point(400, LAUNCH_Y)
        assert inter.current == inter.start
        assert inter.speed == 4.0
        assert inter.state is InterceptorState.FLYING

    def test_never_draws_from_dead_battery(self):
        combat = CombatSystem()
        batteries = build_batteries()
        batteries[0].alive = False
        combat.fire(40, 300, batteries, [])
        assert batteries[0].ammo == 15
        assert batteries[1].ammo == 19

    def test_no_battery_is_silent_noop(self):
        combat = CombatSystem()
        batteries = [Battery(id=0, x=40, ammo=0, max_ammo=15)]
        interceptors: list[Interceptor] = []
        assert combat.fire(40, 300, batteries, interceptors) is None
        assert interceptors == []
        assert batteries[0].ammo == 0

    @pytest.mark.parametrize("x,y", [(float("nan"), 100), (100, float("inf"))])
    def test_non_finite_coordinates_ignored(self, x, y):
        combat = CombatSystem()
        batteries = build_batteries()
        interceptors: list[Interceptor] = []
        assert combat.fire(x, y, batteries, interceptors) is None
        assert interceptors == []
        assert sum(b.ammo for b in batteries) == 50

    def test_fire_publishes_event(self):
        bus = EventBus()
        sub = bus.subscribe("interceptor_fired")
        CombatSystem(bus).fire(760, 100, build_batteries(), [])
        event = sub.get(timeout=1.0)["data"]
        assert event["battery_id"] == 2
        assert event["ammo_remaining"] == 14


# --------------------------------------------------------------------------
# Rocket impacts
# --------------------------------------------------------------------------

class TestRocketImpacts:
    def test_impact_spawns_plain_explosion(self):
        combat = CombatSystem()
        rocket = _rocket("r1", 600, 578)
        rockets = [rocket]
        explosions: list[Explosion] = []
        combat.resolve_rocket_impacts([rocket], rockets, build_cities(), build_batteries(), explosions)
        assert rockets == []
        assert len(explosions) == 1
        exp = explosions[0]
        assert (exp.x, exp.y) == (600, 578)
        assert exp.max_radius == 30
        assert exp.is_heart is False
        assert exp.id == "exp-r1"

    def test_impact_destroys_city_within_band(self):
        combat = CombatSystem()
        cities = build_cities()
        target = cities[2]
        rocket = _rocket("r1", target.x + IMPACT_RADIUS - 1, 580)
        combat.resolve_rocket_impacts([rocket], [rocket], cities, build_batteries(), [])
        assert target.alive is False
        assert sum(c.alive for c in cities) == 5

    def test_impact_outside_band_spares_city(self):
        combat = CombatSystem()
        cities = [City(id=0, x=300)]
        rocket = _rocket("r1", 300 + IMPACT_RADIUS, 580)
        combat.resolve_rocket_impacts([rocket], [rocket], cities, [], [])
        assert cities[0].alive is True

    def test_impact_can_kill_city_and_battery_together(self):
        combat = CombatSystem()
        cities = [City(id=0, x=390)]
        batteries = [Battery(id=0, x=400, ammo=20, max_ammo=20)]
        rocket = _rocket("r1", 395, 580)
        combat.resolve_rocket_impacts([rocket], [rocket], cities, batteries, [])
        assert cities[0].alive is False
        assert batteries[0].alive is False
        # Dead battery keeps its residual ammo
        assert batteries[0].ammo == 20

    def test_consecutive_arrivals_all_removed(self):
        combat = CombatSystem()
        r1, r2, r3 = _rocket("a", 100, 580), _rocket("b", 200, 580), _rocket("c", 300, 100)
        rockets = [r1, r2, r3]
        combat.resolve_rocket_impacts([r1, r2], rockets, [], [], [])
        assert rockets == [r3]

    def test_impact_events(self):
        bus = EventBus()
        impacts = bus.subscribe("rocket_impact")
        lost = bus.subscribe("battery_destroyed")
        combat = CombatSystem(bus)
        batteries = build_batteries()
        rocket = _rocket("r1", 40, 580)
        combat.resolve_rocket_impacts([rocket], [rocket], [], batteries, [])
        assert impacts.get(timeout=1.0)["data"]["id"] == "r1"
        assert lost.get(timeout=1.0)["data"]["battery_id"] == 0


# --------------------------------------------------------------------------
# Interceptor detonation
# --------------------------------------------------------------------------

class TestDetonation:
    def test_interceptor_replaced_by_heart_explosion(self):
        combat = CombatSystem()
        inter = _interceptor("i1", (250, 300))
        interceptors = [inter]
        explosions: list[Explosion] = []
        combat.detonate_interceptors([inter], interceptors, explosions)
        assert interceptors == []
        assert inter.state is InterceptorState.EXPLODING
        assert len(explosions) == 1
        exp = explosions[0]
        assert (exp.x, exp.y) == (250, 300)
        assert exp.max_radius == 40
        assert exp.is_heart is True

    def test_only_arrived_interceptors_removed(self):
        combat = CombatSystem()
        a, b, c = _interceptor("a", (1, 1)), _interceptor("b", (2, 2)), _interceptor("c", (3, 3))
        interceptors = [a, b, c]
        combat.detonate_interceptors([a, b], interceptors, [])
        assert interceptors == [c]


# --------------------------------------------------------------------------
# Explosion kill test
# --------------------------------------------------------------------------

class TestExplosions:
    def test_rocket_inside_explosion_destroyed(self):
        combat = CombatSystem()
        rockets = [_rocket("r1", 100, 100)]
        explosions = [Explosion(id="e1", x=100, y=110, max_radius=40)]
        kills = combat.tick_explosions(explosions, rockets)
        assert kills == 1
        assert rockets == []

    def test_rocket_outside_explosion_survives(self):
        combat = CombatSystem()
        rockets = [_rocket("r1", 100, 100)]
        explosions = [Explosion(id="e1", x=100, y=200, max_radius=40)]
        assert combat.tick_explosions(explosions, rockets) == 0
        assert len(rockets) == 1

    def test_overlapping_explosions_count_rocket_once(self):
        combat = CombatSystem()
        rockets = [_rocket("r1", 100, 100)]
        explosions = [
            Explosion(id="e1", x=100, y=100, max_radius=40),
            Explosion(id="e2", x=105, y=100, max_radius=40),
            Explosion(id="e3", x=95, y=100, max_radius=30),
        ]
        assert combat.tick_explosions(explosions, rockets) == 1
        assert rockets == []

    def test_adjacent_rockets_all_destroyed(self):
        combat = CombatSystem()
        rockets = [_rocket(f"r{i}", 100 + i, 100) for i in range(4)]
        explosions = [Explosion(id="e1", x=100, y=100, max_radius=40)]
        assert combat.tick_explosions(explosions, rockets) == 4
        assert rockets == []

    def test_decay_and_removal(self):
        combat = CombatSystem()
        explosions = [Explosion(id="e1", x=0, y=0, max_radius=40, life=0.01)]
        combat.tick_explosions(explosions, [])
        assert explosions == []

    def test_life_strictly_decreases_until_removed(self):
        combat = CombatSystem()
        exp = Explosion(id="e1", x=0, y=0, max_radius=40)
        explosions = [exp]
        lives = []
        while explosions:
            combat.tick_explosions(explosions, [])
            lives.append(exp.life)
        assert all(b < a for a, b in zip(lives, lives[1:]))
        assert lives[-1] <= 0
        assert len(lives) == 67

    def test_radius_follows_life_curve(self):
        combat = CombatSystem()
        exp = Explosion(id="e1", x=0, y=0, max_radius=40)
        explosions = [exp]
        while explosions:
            combat.tick_explosions(explosions, [])
            if exp.alive:
                assert exp.radius == pytest.approx(40 * (1 - (1 - exp.life) ** 2))
                assert 0 < exp.radius <= 40

    def test_kill_event(self):
        bus = EventBus()
        sub = bus.subscribe("rocket_destroyed")
        combat = CombatSystem(bus)
        combat.tick_explosions([Explosion(id="e9", x=0, y=0, max_radius=40)], [_rocket("r1", 0, 0)])
        event = sub.get(timeout=1.0)["data"]
        assert event == {"id": "r1", "explosion_id": "e9", "position": {"x": 0, "y": 0}}
