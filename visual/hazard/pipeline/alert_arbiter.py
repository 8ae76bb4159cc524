from dataclasses import dataclass
from typing import Optional

from core.contracts.hazard_event import DROP_OFF, OBSTACLE, HazardDecision
from ..config import ALERT_CONFIG


@dataclass
class AlertState:
    """Rachas por categoría y momento de la última alerta emitida."""
    drop_off_streak: int = 0
    obstacle_streak: int = 0
    last_alert_time: Optional[float] = None


class AlertArbiter:
    """
    Histéresis por categoría + cooldown global.

    Una categoría dispara cuando su racha de frames consecutivos alcanza el
    mínimo y el cooldown ya pasó. El desnivel se evalúa antes que el obstáculo.
    """

    def __init__(self,
                 min_frames_drop_off: int = ALERT_CONFIG["min_frames_drop_off"],
                 min_frames_obstacle: int = ALERT_CONFIG["min_frames_obstacle"],
                 cooldown_s: float = ALERT_CONFIG["cooldown_s"]):
        self.min_frames_drop_off = min_frames_drop_off
        self.min_frames_obstacle = min_frames_obstacle
        self.cooldown_s = cooldown_s
        self.state = AlertState()

    def can_warn(self, timestamp: float) -> bool:
        last = self.state.last_alert_time
        return last is None or (timestamp - last) > self.cooldown_s

    def decide(self, decision: HazardDecision, timestamp: float) -> Optional[str]:
        """Actualiza rachas y retorna la categoría a emitir, o None."""
        state = self.state
        state.drop_off_streak = state.drop_off_streak + 1 if decision.is_drop_off else 0
        state.obstacle_streak = state.obstacle_streak + 1 if decision.is_obstacle else 0

        if not self.can_warn(timestamp):
            return None

        if state.drop_off_streak >= self.min_frames_drop_off:
            state.drop_off_streak = 0
            state.last_alert_time = timestamp
            return DROP_OFF

        if state.obstacle_streak >= self.min_frames_obstacle:
            state.obstacle_streak = 0
            state.last_alert_time = timestamp
            return OBSTACLE

        return None

    def reset(self):
        self.state = AlertState()
