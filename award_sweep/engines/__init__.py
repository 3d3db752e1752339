"""Airline website engines.

Engines are distributed separately and register themselves under the
``award_sweep.engines`` entry-point group, keyed by airline code::

    [project.entry-points."award_sweep.engines"]
    SQ = "award_sweep_sq:SingaporeEngine"
"""

import logging
from importlib.metadata import entry_points
from typing import Optional

from .assets import AssetWriter
from .base import Engine, EngineConfig

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "award_sweep.engines"

_registry: dict[str, type] = {}


def register(engine_id: str, engine_cls: type) -> None:
    """Register an engine class under an airline code."""
    _registry[engine_id.upper()] = engine_cls


def _discover() -> dict[str, type]:
    engines = dict(_registry)
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        key = ep.name.upper()
        if key in engines:
            continue
        try:
            engines[key] = ep.load()
        except Exception as e:
            logger.warning(f"Failed to load engine {ep.name} ({ep.value}): {e}")
    return engines


def supported(engine_id: Optional[str] = None):
    """Sorted list of engine ids, or whether a given id is supported."""
    engines = _discover()
    if engine_id is None:
        return sorted(engines)
    return engine_id.upper() in engines


def load_engine(engine_id: str) -> Engine:
    """Instantiate the engine registered for an airline code."""
    engines = _discover()
    try:
        engine_cls = engines[engine_id.upper()]
    except KeyError:
        raise KeyError(f"Unsupported airline website: {engine_id}") from None
    return engine_cls()


__all__ = [
    "AssetWriter",
    "Engine",
    "EngineConfig",
    "load_engine",
    "register",
    "supported",
]
