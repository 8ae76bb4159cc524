# visual/hazard/pipeline/dropoff_estimator.py
"""
Estimador de desnivel amplio (escalones, bordillos, cornisas).
Combina tres sondas de rayo contra el piso base con un fallback por
profundidad y suaviza el resultado con una EMA asimétrica.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from core.contracts.sensing_contract import ScreenPoint, SensingFrame
from ..config import DROPOFF_CONFIG, PROBE_LAYOUTS


@dataclass
class SmoothedMetric:
    """EMA asimétrica: sube rápido, baja lento."""
    value: float = 0.0

    def update(self, sample: float, rise_weight: float = 0.5, fall_weight: float = 0.2) -> float:
        sample = max(0.0, sample)
        if sample > self.value:
            self.value = self.value * (1.0 - rise_weight) + sample * rise_weight
        else:
            self.value = self.value * (1.0 - fall_weight) + sample * fall_weight
        return self.value

    def reset(self):
        self.value = 0.0


@dataclass
class DropOffResult:
    """Resultado de la estimación de desnivel para un frame."""
    is_drop_off: bool
    max_drop: float = 0.0
    ray_max_drop: float = 0.0
    depth_max_drop: float = 0.0
    depth_danger: bool = False
    smoothed: float = 0.0
    evaluated: bool = False
    note: str = ""


class DropOffEstimator:
    """Estimador de desnivel con sondas centro/izquierda/derecha."""

    def __init__(self, probe_adapter, depth_sampler, config: dict = None):
        self.probe_adapter = probe_adapter
        self.depth_sampler = depth_sampler
        self.config = dict(DROPOFF_CONFIG, **(config or {}))

        self.probes: List[ScreenPoint] = [ScreenPoint.from_tuple(p) for p in PROBE_LAYOUTS["dropoff"]]
        self.near_foot_depth_probe = ScreenPoint.from_tuple(PROBE_LAYOUTS["depth_near_foot"])
        self.smoothed = SmoothedMetric()

    # ------------------------------------------------------------------
    def is_looking_down(self, frame: SensingFrame) -> bool:
        return frame.pose.pitch < self.config["pitch_threshold"]

    def estimate(self, frame: SensingFrame, baseline: Optional[float]) -> DropOffResult:
        """
        Estima el desnivel del frame respecto al piso base.

        Args:
            frame: frame actual
            baseline: altura Y del piso (BaselineTracker) o None

        Returns:
            DropOffResult; sin evaluar si no mira hacia abajo o no hay piso base
        """
        if not self.is_looking_down(frame):
            return DropOffResult(is_drop_off=False, smoothed=self.smoothed.value,
                                 note="Pitch alto (no mira hacia abajo)")
        if baseline is None:
            return DropOffResult(is_drop_off=False, smoothed=self.smoothed.value,
                                 note="Baseline N/A")

        danger_height = self.config["danger_height"]

        # 1-2. Sondas de rayo: el peor caso manda
        hit_ys = self._probe_floor_heights(frame)
        ray_max_drop = 0.0
        for hit_y in hit_ys:
            ray_max_drop = max(ray_max_drop, baseline - hit_y)

        # 3-4. Fallback por profundidad si los rayos no ven peligro
        max_drop = ray_max_drop
        depth_danger, depth_max_drop = False, 0.0
        if (not hit_ys or ray_max_drop < danger_height) and frame.depth is not None:
            depth_danger, depth_max_drop = self.check_depth_drop(frame)
            if depth_danger:
                max_drop = max(max_drop, depth_max_drop)

        # 5-6. Suavizado asimétrico
        smoothed = self.smoothed.update(
            max_drop,
            rise_weight=self.config["ema_rise_weight"],
            fall_weight=self.config["ema_fall_weight"],
        )

        return DropOffResult(
            is_drop_off=smoothed > danger_height,
            max_drop=max_drop,
            ray_max_drop=ray_max_drop,
            depth_max_drop=depth_max_drop,
            depth_danger=depth_danger,
            smoothed=smoothed,
            evaluated=True,
            note=f"Base:{baseline:.3f} MaxDrop:{max_drop:.3f} EMA:{smoothed:.3f}",
        )

    # ------------------------------------------------------------------
    def _probe_floor_heights(self, frame: SensingFrame) -> List[float]:
        """Alturas Y de los impactos de piso dentro de la distancia de control."""
        heights = []
        for point in self.probes:
            hit = self.probe_adapter.probe_floor(frame, point)
            if hit is not None and hit.distance_from_camera < self.config["max_check_distance"]:
                heights.append(hit.y)
        return heights

    def check_depth_drop(self, frame: SensingFrame) -> Tuple[bool, float]:
        """
        Fallback por profundidad: cerca de una cornisa la profundidad de las
        sondas crece respecto a la del pie.

        Returns:
            (peligro, máximo salto hacia adelante en metros)
        """
        kernel = self.config["depth_kernel_radius"]
        near_depth = self.depth_sampler.sample(frame, self.near_foot_depth_probe, kernel)
        if near_depth is None:
            return False, 0.0

        max_forward = 0.0
        danger_count = 0
        for point in self.probes:
            probe_depth = self.depth_sampler.sample(frame, point, kernel)
            if probe_depth is None or probe_depth >= self.config["max_check_distance"]:
                continue
            forward_far = probe_depth - near_depth
            max_forward = max(max_forward, forward_far)
            if forward_far > self.config["depth_forward_threshold"]:
                danger_count += 1

        return danger_count > 0, max_forward

    def reset(self):
        self.smoothed.reset()
