from .hazard_config import (
    PROBE_LAYOUTS,
    RAYCAST_CONFIG,
    BASELINE_CONFIG,
    DROPOFF_CONFIG,
    OBSTACLE_CONFIG,
    PROBE_STATE_COLORS,
    ALERT_CONFIG,
    SCAN_CONFIG,
    HAZARD_MESSAGES,
    OPERATION_MODES,
    DEFAULT_MODE,
    get_mode_config,
)

__all__ = [
    "PROBE_LAYOUTS",
    "RAYCAST_CONFIG",
    "BASELINE_CONFIG",
    "DROPOFF_CONFIG",
    "OBSTACLE_CONFIG",
    "PROBE_STATE_COLORS",
    "ALERT_CONFIG",
    "SCAN_CONFIG",
    "HAZARD_MESSAGES",
    "OPERATION_MODES",
    "DEFAULT_MODE",
    "get_mode_config",
]
