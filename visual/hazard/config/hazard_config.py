"""
HazardSystem Configuration
Contiene todos los thresholds, layouts de sondas, tiempos y modos de operación
del pipeline de detección de desniveles y obstáculos.
"""

# ============================================================================
# LAYOUTS DE SONDAS (coordenadas de pantalla normalizadas 0-1)
# ============================================================================

PROBE_LAYOUTS = {
    # Sonda de pie: única fuente del piso base
    "baseline": (0.5, 0.95),
    # Referencia de profundidad cercana para el fallback de desnivel
    "depth_near_foot": (0.5, 0.90),
    # Desnivel amplio: centro / izquierda / derecha
    "dropoff": [
        (0.5, 0.65),
        (0.2, 0.65),
        (0.8, 0.65),
    ],
    # Obstáculos: tres frontales y dos cercanos
    "obstacle": [
        (0.5, 0.50),
        (0.3, 0.50),
        (0.7, 0.50),
        (0.35, 0.85),
        (0.65, 0.85),
    ],
}

# ============================================================================
# RAYCAST (objetivo y alineación por tipo de sonda)
# ============================================================================

RAYCAST_CONFIG = {
    "floor": {"target": "existing_plane_geometry", "alignment": "horizontal"},
    "obstacle": {"target": "estimated_plane", "alignment": "any"},
    "orientation": "portrait",
    "handoff_timeout": 1.0,  # Espera máxima del hilo principal (segundos)
}

# ============================================================================
# PISO BASE
# ============================================================================

BASELINE_CONFIG = {
    "alpha": 0.30,  # Adaptación lenta: un frame ruidoso no mueve el piso
}

# ============================================================================
# DESNIVEL (DROP-OFF)
# ============================================================================

DROPOFF_CONFIG = {
    "pitch_threshold": -0.05,       # rad; por debajo = mirando hacia abajo
    "danger_height": 0.10,          # m
    "max_check_distance": 1.5,      # m; ignora detecciones de piso lejanas
    "depth_forward_threshold": 0.6, # m; salto de profundidad hacia adelante
    "depth_kernel_radius": 1,       # ventana 3x3 para la mediana
    "ema_rise_weight": 0.5,         # subida rápida
    "ema_fall_weight": 0.2,         # bajada lenta
}

# ============================================================================
# OBSTÁCULOS
# ============================================================================

OBSTACLE_CONFIG = {
    "max_distance": 1.2,            # m
    "depth_match_tolerance": 0.28,  # m; rayo vs profundidad
    "min_votes": 2,                 # quórum de sondas
    "width_scan_radius_px": 12,
    "width_scan_stride": 2,
    "width_depth_tolerance": 0.20,  # m
    "person_height": 1.2,           # m
    "person_height_with_width": 0.8,
    "person_width": 0.35,
    "wide_person_width": 0.55,
    "wide_person_height": 0.5,
}

# Color por veredicto de sonda (overlay y log de depuración)
PROBE_STATE_COLORS = {
    "no_hit": "LIGHTBLACK_EX",
    "out_of_range": "BLUE",
    "no_depth": "MAGENTA",
    "inconsistent": "YELLOW",
    "person": "GREEN",
    "obstacle": "RED",
}

# ============================================================================
# ALERTAS (HISTÉRESIS + COOLDOWN)
# ============================================================================

ALERT_CONFIG = {
    "min_frames_drop_off": 2,
    "min_frames_obstacle": 2,
    "cooldown_s": 1.5,
}

# ============================================================================
# ESCANEO
# ============================================================================

SCAN_CONFIG = {
    "scan_interval": 0.08,  # Mínimo entre escaneos (segundos)
    "host_fps": 60,         # Callbacks de frame emulados por el polling
}

# ============================================================================
# MENSAJES
# ============================================================================

HAZARD_MESSAGES = {
    "drop_off": "Cuidado, desnivel adelante",
    "obstacle": "Obstáculo al frente",
    "startup": "Bastón inteligente, modo de desnivel amplio iniciado.",
}

# ============================================================================
# MODOS DE OPERACIÓN
# ============================================================================

OPERATION_MODES = {
    "debug": {
        "verbose": True,
        "log_narrative": True,
        "scan_interval": SCAN_CONFIG["scan_interval"],
    },
    "production": {
        "verbose": False,
        "log_narrative": False,
        "scan_interval": SCAN_CONFIG["scan_interval"],
    },
    "battery_saver": {
        "verbose": False,
        "log_narrative": False,
        "scan_interval": SCAN_CONFIG["scan_interval"] * 2.0,  # Escaneo a la mitad
    },
}

DEFAULT_MODE = "production"


def get_mode_config(mode: str) -> dict:
    """Retorna la configuración del modo o lanza ValueError si no existe."""
    if mode not in OPERATION_MODES:
        raise ValueError(f"Modo de operación desconocido: '{mode}' (disponibles: {list(OPERATION_MODES)})")
    return OPERATION_MODES[mode]
