"""Communication primitives shared by the simulation and the API layer."""

from .event_bus import EventBus

__all__ = ["EventBus"]
