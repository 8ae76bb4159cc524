from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class CoreContext:
    """
    Estado global del bastón inteligente.
    Gestiona si el escaneo está activo, la última alerta emitida
    y los bloqueos temporales de recursos (ej. TTS activo).
    """
    scanning_enabled: bool = False
    last_alert_category: Optional[str] = None
    active_locks: dict = field(default_factory=dict)

    # ------------------------------------------------------------------
    def record_alert(self, category: str):
        """Actualiza la última categoría de peligro anunciada."""
        self.last_alert_category = category

    # ------------------------------------------------------------------
    def lock_input(self, key: str, timeout: float = 3.0):
        """Bloquea temporalmente un recurso."""
        self.active_locks[key] = time.time() + timeout

    def is_locked(self, key: str) -> bool:
        """Verifica si un recurso está bloqueado."""
        expiry = self.active_locks.get(key)
        if not expiry:
            return False
        if time.time() > expiry:
            self.active_locks.pop(key, None)
            return False
        return True

    def unlock(self, key: str):
        """Desbloquea manualmente un recurso."""
        self.active_locks.pop(key, None)
