import pyttsx3
import threading
import queue
import time
from colorama import Fore


class TTSManager:
    """
    Gestor de síntesis de voz con prioridad para los avisos del bastón.
    - Suscrito a 'tts_request' y 'tts_request_urgent'.
    - Un aviso urgente interrumpe el mensaje en curso (el peligro más reciente manda).
    - Publica 'tts_start' y 'tts_end' para que el Orchestrator sepa cuándo se habla.
    """
    PRIORITY_LEVELS = {"urgent": 0, "normal": 1, "low": 2}

    def __init__(self, event_bus, rate: int = 175, language_hint: str = "spanish"):
        self.event_bus = event_bus
        self.rate = rate
        self.language_hint = language_hint
        self.queue = queue.PriorityQueue()
        self._stop = False
        self._engine = None
        self._engine_lock = threading.Lock()

        # Subscripción a eventos de TTS
        self.event_bus.subscribe("tts_request", self._on_tts_request)
        self.event_bus.subscribe("tts_request_urgent", self._on_tts_request)

        # iniciar hilo consumidor
        self.thread = threading.Thread(target=self._worker, daemon=True)
        self.thread.start()

        print(Fore.GREEN + "[TTSManager] Inicializado y suscrito a eventos de TTS.")

    # ------------------------------------------------------------------
    def _normalize_payload(self, payload):
        """Normaliza payload recibido (string o dict)."""
        if isinstance(payload, str):
            return (self.PRIORITY_LEVELS["normal"], payload)
        if isinstance(payload, dict):
            text = payload.get("text", "")
            priority = payload.get("priority", "normal").lower()
            level = self.PRIORITY_LEVELS.get(priority, 1)
            return (level, text)
        return (self.PRIORITY_LEVELS["normal"], str(payload))

    def _on_tts_request(self, payload):
        level, text = self._normalize_payload(payload)
        if not text or not text.strip():
            return

        if level == self.PRIORITY_LEVELS["urgent"]:
            self._interrupt()

        # prioridad, timestamp, texto (timestamp para orden FIFO en mismo nivel)
        self.queue.put((level, time.time(), text.strip()))
        color = {0: Fore.RED, 1: Fore.CYAN, 2: Fore.LIGHTBLACK_EX}.get(level, Fore.CYAN)
        tag = {0: "(URGENTE)", 1: "(normal)", 2: "(baja)"}.get(level, "(normal)")
        print(color + f"[TTSManager] {tag} → {text}")

    def _interrupt(self):
        """Corta el mensaje en curso y descarta los avisos pendientes ya obsoletos."""
        with self._engine_lock:
            engine = self._engine
        if engine is not None:
            engine.stop()

        while True:
            try:
                self.queue.get_nowait()
            except queue.Empty:
                break

    # ------------------------------------------------------------------
    def _create_engine(self):
        engine = pyttsx3.init()
        engine.setProperty("rate", self.rate)
        for v in engine.getProperty("voices"):
            if self.language_hint in v.name.lower():
                engine.setProperty("voice", v.id)
                break
        return engine

    def _speak_once(self, text: str):
        """Habla y notifica start/end."""
        try:
            self.event_bus.publish("tts_start", text)

            engine = self._create_engine()
            with self._engine_lock:
                self._engine = engine

            print(Fore.LIGHTYELLOW_EX + f"[TTS] Hablando: {text}")
            engine.say(text)
            engine.runAndWait()

        except Exception as e:
            print(Fore.RED + f"[TTS ERROR] {e}")
        finally:
            with self._engine_lock:
                self._engine = None
            self.event_bus.publish("tts_end", text)

    # ------------------------------------------------------------------
    def _worker(self):
        while not self._stop:
            level, _, text = self.queue.get()
            if text:
                self._speak_once(text)

    def stop(self):
        self._stop = True
        self.queue.put((99, time.time(), ""))
        self.thread.join(timeout=1)
