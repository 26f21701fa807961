"""NOVA DEFENSE - FastAPI surface for the simulation engine."""
