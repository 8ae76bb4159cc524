from typing import Optional

from core.contracts.sensing_contract import GeometryHit
from ..config import BASELINE_CONFIG


class BaselineTracker:
    """
    Estimación lenta de la altura del piso frente al usuario.
    Solo se alimenta de la sonda de pie; ninguna otra sonda la modifica.
    """

    def __init__(self, alpha: float = BASELINE_CONFIG["alpha"]):
        self.alpha = alpha
        self._floor_y: Optional[float] = None

    @property
    def floor_y(self) -> Optional[float]:
        return self._floor_y

    def update(self, near_foot_hit: Optional[GeometryHit]) -> Optional[float]:
        """Actualiza con el impacto de la sonda de pie y retorna el piso actual."""
        if near_foot_hit is None:
            return self._floor_y

        if self._floor_y is None:
            self._floor_y = near_foot_hit.y
        else:
            self._floor_y = self._floor_y * (1.0 - self.alpha) + near_foot_hit.y * self.alpha
        return self._floor_y

    def reset(self):
        self._floor_y = None
