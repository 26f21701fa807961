"""GameMode — session state machine, scoring, and terminal conditions.

Architecture
------------
GameMode manages the flow of a defense session through a small state
machine:

  START -> PLAYING -> WON | LOST -> (restart) PLAYING

A restart is the only way out of WON or LOST.  All session counters live
here (score, rockets spawned, spawn timer) rather than in module globals,
so every test can build a fresh session.

Scoring:
  - 20 points per rocket destroyed by an explosion
  - Victory the moment the score reaches 1000, inside the tick of the kill

Defeat, evaluated once per tick while PLAYING:
  A. every battery has been destroyed
  B. the rocket budget is spent, no rocket is in flight, and the score is
     still below the victory threshold

Events published on EventBus for the frontend:
  - ``game_state_change``: any state transition
  - ``game_over``: victory or defeat, with the final score
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from loguru import logger

from .entities import Battery, GameState, Rocket
from .spawner import ROCKET_BUDGET

if TYPE_CHECKING:
    from engine.comms.event_bus import EventBus

KILL_SCORE = 20
WIN_SCORE = 1000


class GameMode:
    """Session state machine + scoring + win/loss evaluation."""

    STATES = tuple(GameState)

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self._event_bus = event_bus

        self.state: GameState = GameState.START
        self.score: int = 0
        self.kills: int = 0
        self.total_spawned: int = 0
        self.spawn_timer: float = 0.0
        self.loss_reason: str | None = None

    def set_event_bus(self, event_bus: EventBus | None) -> None:
        self._event_bus = event_bus

    # -- Public interface -------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self.state is GameState.PLAYING

    @property
    def remaining_rockets(self) -> int:
        return ROCKET_BUDGET - self.total_spawned

    @property
    def budget_spent(self) -> bool:
        return self.total_spawned >= ROCKET_BUDGET

    def begin_session(self) -> None:
        """Reset all counters and enter PLAYING.  Valid from any state."""
        self.score = 0
        self.kills = 0
        self.total_spawned = 0
        self.spawn_timer = 0.0
        self.loss_reason = None
        self.state = GameState.PLAYING
        logger.info("Session started")
        self._publish_state_change()

    def award_kills(self, count: int) -> None:
        """Credit *count* destroyed rockets.

        The victory threshold is checked after each single increment, so
        the transition happens within the tick that crosses it.
        """
        for _ in range(count):
            self.kills += 1
            self.score += KILL_SCORE
            if self.is_playing and self.score >= WIN_SCORE:
                self._finish(GameState.WON)

    def record_spawn(self) -> None:
        self.total_spawned += 1

    def evaluate(self, batteries: Sequence[Battery], rockets: Sequence[Rocket]) -> GameState:
        """Check the loss conditions.  Inert unless PLAYING."""
        if not self.is_playing:
            return self.state
        if all(not b.alive for b in batteries):
            self._finish(GameState.LOST, reason="batteries_destroyed")
        elif self.budget_spent and not rockets and self.score < WIN_SCORE:
            self._finish(GameState.LOST, reason="rockets_exhausted")
        return self.state

    def get_state(self) -> dict:
        """Return serializable session state for API/frontend."""
        return {
            "state": self.state.value,
            "score": self.score,
            "kills": self.kills,
            "total_spawned": self.total_spawned,
            "remaining_rockets": self.remaining_rockets,
            "loss_reason": self.loss_reason,
        }

    # -- Transitions ------------------------------------------------------------

    def _finish(self, result: GameState, reason: str | None = None) -> None:
        self.state = result
        self.loss_reason = reason
        logger.info(f"Game over: {result.value} (score={self.score}, reason={reason})")
        self._publish("game_over", {
            "result": result.value,
            "final_score": self.score,
            "kills": self.kills,
            "reason": reason,
        })
        self._publish_state_change()

    # -- Event publishing -------------------------------------------------------

    def _publish(self, event_type: str, data: dict) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event_type, data)

    def _publish_state_change(self) -> None:
        self._publish("game_state_change", self.get_state())
