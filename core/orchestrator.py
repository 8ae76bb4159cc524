# core/orchestrator.py

from colorama import Fore
from core.core_context import CoreContext
from visual.hazard.config import HAZARD_MESSAGES


class Orchestrator:
    """
    Núcleo central del bastón inteligente.
    Controla el escaneo, transforma alertas de peligro en voz y sincroniza el estado global.
    """

    def __init__(self, event_bus):
        self.event_bus = event_bus
        self.ctx = CoreContext()

        # Suscripciones principales
        self.event_bus.subscribe("hazard_alert", self.on_hazard_alert)

        # TTS bloqueo sincronizado
        self.event_bus.subscribe("tts_start", self._on_tts_start)
        self.event_bus.subscribe("tts_end", self._on_tts_end)

        self.hazard_system = None

    def set_hazard_system(self, hazard_system):
        """Registrar instancia de HazardSystem para que el orquestador pueda controlarla."""
        self.hazard_system = hazard_system
        print(Fore.LIGHTGREEN_EX + "[Orchestrator] HazardSystem registrado.")

    # ------------------------------------------------------------------
    def _on_tts_start(self, text):
        self.ctx.lock_input("tts_playing", timeout=5.0)

    def _on_tts_end(self, text):
        self.ctx.unlock("tts_playing")

    # ------------------------------------------------------------------
    def _publish_tts(self, text: str, urgent: bool = False):
        if not text:
            return

        # mientras se habla, solo un peligro puede interrumpir
        if not urgent and self.ctx.is_locked("tts_playing"):
            print(Fore.LIGHTBLACK_EX + f"[Orchestrator] TTS en curso, se omite aviso normal: {text}")
            return

        payload = {
            "text": text,
            "priority": "urgent" if urgent else "normal",
            "source": "orchestrator"
        }

        event = "tts_request_urgent" if urgent else "tts_request"
        self.event_bus.publish(event, payload)

        color = Fore.RED if urgent else Fore.CYAN
        tag = "(URGENTE)" if urgent else "(normal)"
        print(color + f"[Orchestrator] Emite TTS {tag}: {text}")

    # ------------------------------------------------------------------
    def enable_scanning(self):
        if self.ctx.scanning_enabled:
            print(Fore.YELLOW + "[Orchestrator] El escaneo ya está activo.")
            return

        self.ctx.scanning_enabled = True
        if self.hazard_system is not None:
            self.hazard_system.start()
        self._publish_tts(HAZARD_MESSAGES["startup"])

    def disable_scanning(self):
        if not self.ctx.scanning_enabled:
            print(Fore.YELLOW + "[Orchestrator] El escaneo ya estaba desactivado.")
            return

        self.ctx.scanning_enabled = False
        if self.hazard_system is not None:
            self.hazard_system.stop()

    # ------------------------------------------------------------------
    def on_hazard_alert(self, alert_event):
        """
        Recibe HazardAlertEvent y lo transforma en TTS urgente.
        La frecuencia ya la limita el árbitro (cooldown), no se filtra aquí.
        """
        message = getattr(alert_event, "message", None)
        if not message:
            return

        self.ctx.record_alert(getattr(alert_event, "category", None))
        self._publish_tts(message, urgent=getattr(alert_event, "priority", "urgent") == "urgent")
