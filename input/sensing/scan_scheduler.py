import threading
import time
from concurrent.futures import ThreadPoolExecutor
from colorama import Fore


class ScanScheduler:
    """
    Controla la cadencia de escaneo del pipeline de peligros.

    Cada callback de frame del host pasa por tick(): si no transcurrió el
    intervalo mínimo, o si todavía hay un escaneo en curso, el frame se
    descarta (sin cola: solo importa el frame más reciente). El trabajo
    pesado corre en un único worker de fondo, lo que garantiza que los
    frames se procesan de a uno.
    """

    def __init__(self, session, callback_fn, scan_interval=0.08, host_fps=60,
                 clock=time.monotonic, orientation="portrait"):
        """
        :param session: SensingSession de donde se toma el frame actual
        :param callback_fn: función que recibe cada SensingFrame aceptado
        :param scan_interval: segundos mínimos entre escaneos
        :param host_fps: frecuencia de los callbacks emulados por el polling
        :param orientation: orientación de pantalla para la transformada del frame
        """
        self.session = session
        self.callback_fn = callback_fn
        self.scan_interval = scan_interval
        self.host_fps = host_fps
        self.clock = clock
        self.orientation = orientation

        self.active = False
        self.thread = None
        self._lock = threading.Lock()
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="hazard-scan")
        self._in_flight = None
        self._last_scan_time = None

        self.stats = {"ticks": 0, "scans": 0, "dropped_throttle": 0, "dropped_busy": 0, "errors": 0}

    # -----------------------------
    def tick(self, now=None):
        """Callback de frame del host. Retorna True si se lanzó un escaneo."""
        now = self.clock() if now is None else now
        with self._lock:
            self.stats["ticks"] += 1
            if self._last_scan_time is not None and now - self._last_scan_time < self.scan_interval:
                self.stats["dropped_throttle"] += 1
                return False
            if self._in_flight is not None and not self._in_flight.done():
                self.stats["dropped_busy"] += 1
                return False
            self._last_scan_time = now

        frame = self.session.current_frame(self.orientation)
        if frame is None:
            return False

        with self._lock:
            self.stats["scans"] += 1
            self._in_flight = self._worker.submit(self._run_callback, frame)
        return True

    def is_busy(self) -> bool:
        future = self._in_flight
        return future is not None and not future.done()

    def wait_idle(self, timeout=None):
        """
        Espera a que termine el escaneo en curso (si lo hay).
        No llamar desde el hilo de la cola principal si el callback usa run_sync.
        """
        future = self._in_flight
        if future is not None:
            future.result(timeout=timeout)

    # -----------------------------
    def _run_callback(self, frame):
        try:
            self.callback_fn(frame)
        except Exception as e:
            self.stats["errors"] += 1
            print(Fore.RED + f"[ScanScheduler] Error en callback de escaneo: {e}")

    # -----------------------------
    def start(self):
        """Inicia el polling en background (emula los callbacks de frame del host)."""
        with self._lock:
            if self.active:
                print(Fore.YELLOW + "[ScanScheduler] Escaneo ya está activo.")
                return

            self.active = True
            self.thread = threading.Thread(target=self._run_loop, daemon=True)
            self.thread.start()
            print(Fore.GREEN + f"[ScanScheduler] Escaneo iniciado (intervalo {self.scan_interval * 1000:.0f} ms).")

    def stop(self):
        """Detiene el polling."""
        with self._lock:
            if not self.active:
                print(Fore.YELLOW + "[ScanScheduler] Escaneo ya estaba detenido.")
                return

            self.active = False
            thread = self.thread

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)
        print(Fore.RED + "[ScanScheduler] Escaneo detenido correctamente.")

    def shutdown(self):
        """Detiene el polling y libera el worker (espera el escaneo en curso)."""
        if self.active:
            self.stop()
        self._worker.shutdown(wait=True)

    # -----------------------------
    def _run_loop(self):
        frame_interval = 1.0 / self.host_fps

        while self.active:
            self.tick()
            time.sleep(frame_interval)

        print(Fore.LIGHTBLACK_EX + "[ScanScheduler] Loop de escaneo finalizado.")
