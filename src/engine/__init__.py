"""Engine — simulation core for Nova Defense.

This package contains the per-tick simulation (rockets, interceptors,
explosions, cities, batteries), its event bus, and the optional tips
advisory client.  The FastAPI surface lives in the separate ``app`` package.
"""

__version__ = "0.1.0"
