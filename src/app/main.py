"""NOVA DEFENSE - headless simulation server.

Main FastAPI application.  Run with:

    python -m uvicorn app.main:app --app-dir src
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import settings
from app.routers.game import router as game_router


# ---------------------------------------------------------------------------
# Subsystem startup helpers
# ---------------------------------------------------------------------------

def _create_simulation_engine():
    """Create the SimulationEngine on a fresh EventBus. Returns engine or None."""
    if not settings.simulation_enabled:
        return None

    from engine.comms.event_bus import EventBus
    from engine.simulation import SimulationEngine

    engine = SimulationEngine(EventBus())
    if settings.simulation_autostart:
        engine.init_session()
        logger.info("Simulation: session auto-started")

    logger.info("Simulation engine created")
    return engine


def _create_tips_service():
    """Create the tips client and warm its cache in the background."""
    from engine.simulation.tips import TipsService

    tips = TipsService(
        host=settings.ollama_host,
        model=settings.ollama_model,
        timeout=settings.tips_timeout,
        enabled=settings.tips_enabled,
    )
    if settings.tips_enabled:
        tips.refresh(settings.tips_language)
        logger.info(f"Tips: fetching from {settings.ollama_host} ({settings.ollama_model})")
    else:
        logger.info("Tips: disabled, using static text")
    return tips


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} v0.1.0 - INITIALIZING")
    logger.info("=" * 60)

    sim_engine = _create_simulation_engine()
    app.state.simulation_engine = sim_engine
    app.state.tips_service = _create_tips_service()

    if sim_engine is not None:
        sim_engine.start(fps=settings.simulation_fps)
    else:
        logger.warning("Simulation disabled (SIMULATION_ENABLED=false)")

    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} ONLINE")
    logger.info("=" * 60)

    yield

    if sim_engine is not None:
        logger.info("Stopping simulation engine...")
        sim_engine.stop()
    logger.info(f"{settings.app_name} shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(game_router)


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok", "app": settings.app_name}
