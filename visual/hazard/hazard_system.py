# visual/hazard/hazard_system.py
import time
from typing import Optional
from colorama import Fore

from core.contracts.hazard_event import DROP_OFF, HazardAlertEvent, HazardDecision
from core.contracts.sensing_contract import ScreenPoint, SensingFrame
from input.sensing.scan_scheduler import ScanScheduler
from .config import (
    DEFAULT_MODE,
    HAZARD_MESSAGES,
    PROBE_LAYOUTS,
    PROBE_STATE_COLORS,
    RAYCAST_CONFIG,
    SCAN_CONFIG,
    get_mode_config,
)
from .engine import DepthSampler, GeometryProbeAdapter
from .pipeline import AlertArbiter, BaselineTracker, DropOffEstimator, ObstacleClassifier


class HazardSystem:
    """
    Pipeline de detección de desniveles y obstáculos del bastón inteligente.

    Por frame: piso base -> desnivel -> obstáculos, en secuencia, y luego el
    árbitro de alertas. El estado (piso, EMA, rachas) solo lo escribe este
    pipeline, un frame a la vez.
    """

    def __init__(self, event_bus, session, main_queue,
                 mode: str = DEFAULT_MODE, verbose: bool = False):
        self.event_bus = event_bus
        self.session = session
        self.main_queue = main_queue
        self.mode = mode
        self.mode_config = get_mode_config(mode)
        self.verbose = verbose or self.mode_config.get("verbose", False)

        # Estado
        self.enabled = False
        self._scheduler: Optional[ScanScheduler] = None

        # Componentes
        self.depth_sampler = DepthSampler()
        self.probe_adapter = GeometryProbeAdapter(
            session, main_queue, handoff_timeout=RAYCAST_CONFIG["handoff_timeout"]
        )
        self.baseline_probe = ScreenPoint.from_tuple(PROBE_LAYOUTS["baseline"])
        self.baseline_tracker = BaselineTracker()
        self.dropoff_estimator = DropOffEstimator(self.probe_adapter, self.depth_sampler)
        self.obstacle_classifier = ObstacleClassifier(self.probe_adapter, self.depth_sampler)
        self.alert_arbiter = AlertArbiter()

        # Estadísticas
        self._stats = {
            "frames_processed": 0,
            "drop_off_frames": 0,
            "obstacle_frames": 0,
            "alerts_emitted": 0,
            "scan_time_avg_ms": 0.0,
        }

        print(Fore.CYAN + f"[HazardSystem] Inicializado en modo '{mode}'.")

    # ------------------------------------------------------------------
    def start(self):
        """Iniciar escaneo continuo"""
        if self.enabled:
            print(Fore.YELLOW + "[HazardSystem] Ya está activo.")
            return

        interval = self.mode_config.get("scan_interval", SCAN_CONFIG["scan_interval"])
        self._scheduler = ScanScheduler(
            self.session, self.process_frame,
            scan_interval=interval, host_fps=SCAN_CONFIG["host_fps"],
            orientation=RAYCAST_CONFIG["orientation"],
        )
        self._scheduler.start()
        self.enabled = True
        print(Fore.GREEN + "[HazardSystem] Detección de peligros ACTIVADA.")

    def stop(self):
        """Detener escaneo y limpiar el estado de la sesión"""
        if not self.enabled:
            print(Fore.YELLOW + "[HazardSystem] Ya está inactivo.")
            return

        self.enabled = False
        if self._scheduler is not None:
            self._scheduler.stop()
            # el escaneo en curso puede estar esperando raycasts del hilo principal
            if self.main_queue.is_main_thread():
                while self._scheduler.is_busy():
                    self.main_queue.run_pending()
                    time.sleep(0.001)
            self._scheduler.shutdown()
            self._scheduler = None
        self.reset_session()
        print(Fore.GREEN + "[HazardSystem] Detección de peligros DESACTIVADA.")

    def reset_session(self):
        """Reinicio de sesión: piso base, EMA y rachas vuelven a cero."""
        self.baseline_tracker.reset()
        self.dropoff_estimator.reset()
        self.alert_arbiter.reset()

    @property
    def scheduler(self) -> Optional[ScanScheduler]:
        return self._scheduler

    # ------------------------------------------------------------------
    def scan(self, frame: SensingFrame) -> HazardDecision:
        """Ejecuta las etapas de detección sobre un frame (sin arbitraje)."""
        narrative = []

        if self.dropoff_estimator.is_looking_down(frame):
            near_hit = self.probe_adapter.probe_floor(frame, self.baseline_probe)
            baseline = self.baseline_tracker.update(near_hit)
        else:
            baseline = self.baseline_tracker.floor_y

        drop_result = self.dropoff_estimator.estimate(frame, baseline)
        narrative.append(drop_result.note)

        obstacle_result = self.obstacle_classifier.classify(frame, baseline)
        if obstacle_result.note:
            narrative.append(obstacle_result.note)

        return HazardDecision(
            is_drop_off=drop_result.is_drop_off,
            is_obstacle=obstacle_result.is_obstacle,
            debug_narrative="\n".join(narrative),
            frame_id=frame.frame_id,
            timestamp=frame.timestamp,
            baseline=baseline,
            max_drop=drop_result.max_drop,
            smoothed_drop=drop_result.smoothed,
            obstacle_votes=obstacle_result.votes,
            probe_states=obstacle_result.probe_states,
        )

    def process_frame(self, frame: SensingFrame) -> HazardDecision:
        """Procesa un frame completo: detección, arbitraje y despacho de salidas."""
        t_start = time.perf_counter()

        decision = self.scan(frame)
        category = self.alert_arbiter.decide(decision, frame.timestamp)

        self.main_queue.run_async(self._deliver, decision, category)

        elapsed_ms = (time.perf_counter() - t_start) * 1000.0
        self._stats["frames_processed"] += 1
        self._stats["drop_off_frames"] += int(decision.is_drop_off)
        self._stats["obstacle_frames"] += int(decision.is_obstacle)
        self._stats["scan_time_avg_ms"] = (self._stats["scan_time_avg_ms"] + elapsed_ms) / 2.0
        if category is not None:
            self._stats["alerts_emitted"] += 1

        if self.verbose and self.mode_config.get("log_narrative", True):
            print(Fore.LIGHTBLACK_EX + f"[HazardSystem] {frame.describe()}\n{decision.debug_narrative}")
            if decision.probe_states:
                print(" ".join(
                    getattr(Fore, PROBE_STATE_COLORS.get(state, "WHITE")) + f"pt{idx}:{state}"
                    for idx, state in sorted(decision.probe_states.items())
                ))

        return decision

    # ------------------------------------------------------------------
    def _deliver(self, decision: HazardDecision, category: Optional[str]):
        """Corre en la cola principal: overlay de depuración y alerta (si hubo)."""
        self.event_bus.publish("hazard_frame", decision)
        if category is None:
            return

        alert_event = HazardAlertEvent(
            category=category,
            message=HAZARD_MESSAGES[category],
            priority="urgent",
            frame_id=decision.frame_id,
            meta={
                "smoothed_drop": decision.smoothed_drop,
                "max_drop": decision.max_drop,
                "obstacle_votes": decision.obstacle_votes,
                "baseline": decision.baseline,
            },
        )
        self.event_bus.publish("hazard_alert", alert_event)

        if self.verbose:
            color = Fore.LIGHTRED_EX if category == DROP_OFF else Fore.LIGHTYELLOW_EX
            print(f"{color}[ALERT] {alert_event.message} ({category})")

    def get_stats(self):
        """Obtener estadísticas del sistema"""
        return self._stats.copy()
