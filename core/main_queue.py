import queue
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as HandoffTimeout
from colorama import Fore


class MainQueue:
    """
    Cola de trabajo afín al hilo principal.

    Las llamadas de geometría del host (raycast contra la sesión) solo pueden
    ejecutarse en el contexto principal. Los workers usan run_sync() para
    entregar la tarea y bloquearse hasta tener el resultado; las
    actualizaciones de UI/salida usan run_async() sin bloquear.
    El hilo dueño debe bombear la cola con run_pending() o run_forever().
    """

    def __init__(self, default_timeout: float = None):
        self._queue = queue.Queue()
        self._owner_ident = threading.get_ident()
        self._running = False
        self.default_timeout = default_timeout

    # ------------------------------------------------------------------
    def bind_to_current_thread(self):
        """Declara el hilo actual como dueño de la cola."""
        self._owner_ident = threading.get_ident()

    def is_main_thread(self) -> bool:
        return threading.get_ident() == self._owner_ident

    # ------------------------------------------------------------------
    def run_sync(self, fn, *args, timeout: float = None, **kwargs):
        """
        Ejecuta fn en el hilo dueño y espera el resultado.
        Desde el propio hilo dueño se ejecuta en línea (evita deadlock).
        Lanza concurrent.futures.TimeoutError si el hilo dueño no responde;
        en ese caso la tarea queda cancelada y run_pending() la descarta.
        """
        if self.is_main_thread():
            return fn(*args, **kwargs)

        future = Future()
        self._queue.put((fn, args, kwargs, future))
        wait = self.default_timeout if timeout is None else timeout
        try:
            return future.result(timeout=wait)
        except HandoffTimeout:
            # el worker ya no espera: la tarea no debe correr después
            future.cancel()
            raise

    def run_async(self, fn, *args, **kwargs) -> Future:
        """Encola fn para el hilo dueño sin bloquear al llamador."""
        future = Future()
        self._queue.put((fn, args, kwargs, future))
        return future

    # ------------------------------------------------------------------
    def run_pending(self, max_tasks: int = None) -> int:
        """Ejecuta las tareas pendientes. Retorna cuántas se ejecutaron."""
        executed = 0
        while max_tasks is None or executed < max_tasks:
            try:
                task = self._queue.get_nowait()
            except queue.Empty:
                break
            self._execute(task)
            executed += 1
        return executed

    def run_forever(self, poll_interval: float = 0.01):
        """Bucle bloqueante del hilo principal hasta stop()."""
        self.bind_to_current_thread()
        self._running = True
        while self._running:
            try:
                task = self._queue.get(timeout=poll_interval)
            except queue.Empty:
                continue
            self._execute(task)
        # vaciar lo que quede para no dejar workers bloqueados
        self.run_pending()

    def stop(self):
        self._running = False

    def pending(self) -> int:
        return self._queue.qsize()

    # ------------------------------------------------------------------
    def _execute(self, task):
        fn, args, kwargs, future = task
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            print(Fore.RED + f"[MainQueue] Error en tarea {getattr(fn, '__name__', fn)}: {e}")
            future.set_exception(e)
