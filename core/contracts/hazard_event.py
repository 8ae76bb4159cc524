# core/contracts/hazard_event.py
from dataclasses import dataclass, field
import time
from typing import Dict, Optional

DROP_OFF = "drop_off"
OBSTACLE = "obstacle"

HAZARD_CATEGORIES = (DROP_OFF, OBSTACLE)


@dataclass(frozen=True)
class HazardDecision:
    """
    Resultado de un ciclo de detección (un frame).
    - is_drop_off / is_obstacle: señales crudas del frame (antes de histéresis)
    - debug_narrative: texto de diagnóstico para el overlay, no participa en decisiones
    - baseline / max_drop / smoothed_drop: valores de la estimación de desnivel
    - obstacle_votes: votos de obstáculo (sondas no-persona consistentes)
    - probe_states: veredicto por sonda de obstáculo ('no_hit', 'person', ...)
    """
    is_drop_off: bool
    is_obstacle: bool
    debug_narrative: str
    frame_id: Optional[str] = None
    timestamp: float = 0.0
    baseline: Optional[float] = None
    max_drop: float = 0.0
    smoothed_drop: float = 0.0
    obstacle_votes: int = 0
    probe_states: Dict[int, str] = field(default_factory=dict)


@dataclass
class HazardAlertEvent:
    """
    Payload que publica el HazardSystem hacia el Orchestrator.
    - category: 'drop_off' | 'obstacle'
    - message: texto directo para TTS
    - priority: 'urgent' | 'normal'
    - frame_id: id del frame que disparó la alerta
    - meta: dict adicional (streak, smoothed_drop, votes...)
    - timestamp: epoch
    """
    category: str
    message: str
    priority: str = "urgent"
    frame_id: Optional[str] = None
    meta: dict = field(default_factory=dict)
    timestamp: float = field(default_factory=lambda: time.time())
