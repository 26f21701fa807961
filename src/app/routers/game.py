"""Game control API — start a session, fire, step, and read the board."""

from __future__ import annotations

import math

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field, field_validator

from engine.simulation.entities import GameState
from engine.simulation.tips import FALLBACK_TIPS, normalize_language

router = APIRouter(prefix="/api/game", tags=["game"])


class FireCommand(BaseModel):
    x: float
    y: float

    @field_validator("x", "y")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("coordinate must be finite")
        return v


class TickCommand(BaseModel):
    delta_ms: float = Field(default=16.7, ge=0)


def _get_engine(request: Request):
    """Retrieve the SimulationEngine from app state."""
    sim = getattr(request.app.state, "simulation_engine", None)
    if sim is None:
        raise HTTPException(503, "Simulation engine not available")
    return sim


@router.get("/state")
async def get_game_state(request: Request):
    """Get the full board: score, state, budget, ammo, and entities."""
    engine = _get_engine(request)
    return engine.get_state()


@router.post("/start")
async def start_session(request: Request):
    """Start a new session.  Also used to restart after victory or defeat."""
    engine = _get_engine(request)
    engine.init_session()
    return {"status": "started", "state": engine.state.value}


@router.post("/fire")
async def fire(command: FireCommand, request: Request):
    """Launch an interceptor at (x, y) in logical canvas coordinates."""
    engine = _get_engine(request)
    if engine.state is not GameState.PLAYING:
        raise HTTPException(409, f"Cannot fire in state: {engine.state.value}")
    interceptor = engine.fire(command.x, command.y)
    if interceptor is None:
        return {"status": "no_battery", "interceptor": None}
    return {"status": "fired", "interceptor": interceptor.to_dict()}


@router.post("/tick")
async def tick(command: TickCommand, request: Request):
    """Advance the simulation by one step (manual stepping / debugging)."""
    engine = _get_engine(request)
    state = engine.tick(command.delta_ms)
    return {"state": state.value, "score": engine.score}


@router.get("/tips")
async def get_tips(request: Request, lang: str = "en"):
    """Cached tactical tips for *lang*, or the static fallback text.

    A language not yet in the cache is fetched in the background; the
    fallback is returned until that fetch lands.
    """
    lang = normalize_language(lang)
    tips = getattr(request.app.state, "tips_service", None)
    if tips is None:
        return {"lang": lang, "tips": FALLBACK_TIPS[lang]}
    tips.refresh(lang)
    return {"lang": lang, "tips": tips.get_cached(lang)}
