import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from colorama import Fore


class EventBus:
    """
    Sistema de publicación/suscripción simple (thread-safe).
    Entrega asíncrona de eventos del pipeline de peligros hacia las salidas
    (overlay, voz) sin bloquear al worker de escaneo.
    """

    def __init__(self, max_workers: int = 4):
        self.subscribers = defaultdict(list)
        self._lock = threading.Lock()
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="eventbus")

    def subscribe(self, event_name: str, callback):
        """Registra una función que será llamada cuando ocurra el evento."""
        with self._lock:
            self.subscribers[event_name].append(callback)

    def unsubscribe(self, event_name: str, callback):
        with self._lock:
            if callback in self.subscribers.get(event_name, []):
                self.subscribers[event_name].remove(callback)

    def publish(self, event_name: str, payload=None):
        """Publica el evento; cada callback corre en el pool. Retorna los futures."""
        with self._lock:
            callbacks = list(self.subscribers.get(event_name, []))
        futures = []
        for cb in callbacks:
            futures.append(self.executor.submit(self._deliver, event_name, cb, payload))
        return futures

    @staticmethod
    def _deliver(event_name, callback, payload):
        try:
            callback(payload)
        except Exception as e:
            print(Fore.RED + f"[EventBus] Error en suscriptor de '{event_name}': {e}")
            raise

    def shutdown(self, wait: bool = False):
        """Cierra el pool de hilos correctamente."""
        print(Fore.LIGHTBLACK_EX + "[EventBus] Apagando EventBus...")
        self.executor.shutdown(wait=wait)
