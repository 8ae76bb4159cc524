# visual/hazard/__init__.py
"""
Hazard - Subsistema Visual del bastón inteligente
Detección de desniveles (escalones, bordillos) y obstáculos con cámara de profundidad.
"""

from .hazard_system import HazardSystem
from .config import (
    PROBE_LAYOUTS,
    DROPOFF_CONFIG,
    OBSTACLE_CONFIG,
    ALERT_CONFIG,
    HAZARD_MESSAGES,
    OPERATION_MODES,
)

__all__ = [
    "HazardSystem",
    "PROBE_LAYOUTS",
    "DROPOFF_CONFIG",
    "OBSTACLE_CONFIG",
    "ALERT_CONFIG",
    "HAZARD_MESSAGES",
    "OPERATION_MODES",
]
