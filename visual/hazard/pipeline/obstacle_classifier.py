# visual/hazard/pipeline/obstacle_classifier.py
"""
Clasificador de obstáculos erguidos.
Cinco sondas frontales/cercanas votan; el rayo y la profundidad deben
coincidir, y las personas (por alto/ancho estimado) no cuentan como obstáculo.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.contracts.sensing_contract import GeometryHit, ScreenPoint, SensingFrame
from ..config import OBSTACLE_CONFIG, PROBE_LAYOUTS
from ..utils import is_valid_depth, pixel_span_to_meters, scaled_focal_length

# Veredictos por sonda (colores del overlay)
NO_HIT = "no_hit"
OUT_OF_RANGE = "out_of_range"
NO_DEPTH = "no_depth"
INCONSISTENT = "inconsistent"
PERSON = "person"
OBSTACLE = "obstacle"


@dataclass
class ProbeVerdict:
    """Veredicto de una sonda de obstáculo."""
    index: int
    status: str
    ray_distance: Optional[float] = None
    depth: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def votes(self) -> bool:
        return self.status == OBSTACLE


@dataclass
class ObstacleResult:
    """Resultado del clasificador para un frame."""
    is_obstacle: bool
    votes: int
    verdicts: List[ProbeVerdict] = field(default_factory=list)
    used_depth: bool = True
    note: str = ""

    @property
    def probe_states(self) -> Dict[int, str]:
        return {v.index: v.status for v in self.verdicts}


class ObstacleClassifier:
    """Votación por quórum entre sondas de obstáculo."""

    def __init__(self, probe_adapter, depth_sampler, config: dict = None):
        self.probe_adapter = probe_adapter
        self.depth_sampler = depth_sampler
        self.config = dict(OBSTACLE_CONFIG, **(config or {}))
        self.probes: List[ScreenPoint] = [ScreenPoint.from_tuple(p) for p in PROBE_LAYOUTS["obstacle"]]

    # ------------------------------------------------------------------
    def classify(self, frame: SensingFrame, baseline: Optional[float]) -> ObstacleResult:
        """Clasifica el frame; sin mapa de profundidad usa el fallback por rayo."""
        if frame.depth is None:
            return self._classify_fallback(frame, baseline)
        return self._classify_with_depth(frame, baseline)

    def _classify_with_depth(self, frame: SensingFrame, baseline: Optional[float]) -> ObstacleResult:
        verdicts = []
        lines = []

        for idx, point in enumerate(self.probes):
            hit = self.probe_adapter.probe_obstacle(frame, point)
            if hit is None:
                verdicts.append(ProbeVerdict(idx, NO_HIT))
                continue

            ray_dist = hit.distance_from_camera
            if ray_dist > self.config["max_distance"]:
                verdicts.append(ProbeVerdict(idx, OUT_OF_RANGE, ray_distance=ray_dist))
                continue

            depth = self.depth_sampler.value_at(frame, point)
            if depth is None:
                verdicts.append(ProbeVerdict(idx, NO_DEPTH, ray_distance=ray_dist))
                continue

            # Rayo y profundidad en desacuerdo: impacto espurio, no obstáculo
            if abs(depth - ray_dist) >= self.config["depth_match_tolerance"]:
                verdicts.append(ProbeVerdict(idx, INCONSISTENT, ray_distance=ray_dist, depth=depth))
                continue

            width = self.estimate_width(frame, point)
            height = self.estimate_height(hit, frame, baseline)
            is_person = self.is_likely_person(height, width)
            verdicts.append(ProbeVerdict(
                idx, PERSON if is_person else OBSTACLE,
                ray_distance=ray_dist, depth=depth, width=width, height=height,
            ))
            lines.append(
                f"pt{idx} d:{depth:.2f} r:{ray_dist:.2f} w:{width:.2f} h:{height:.2f} P:{is_person}"
            )

        votes = sum(1 for v in verdicts if v.votes)
        return ObstacleResult(
            is_obstacle=votes >= self.config["min_votes"],
            votes=votes,
            verdicts=verdicts,
            used_depth=True,
            note="\n".join(lines),
        )

    def _classify_fallback(self, frame: SensingFrame, baseline: Optional[float]) -> ObstacleResult:
        """Sin profundidad: distancia del rayo + altura, umbral de persona solo por altura."""
        verdicts = []

        for idx, point in enumerate(self.probes):
            hit = self.probe_adapter.probe_obstacle(frame, point)
            if hit is None:
                verdicts.append(ProbeVerdict(idx, NO_HIT))
                continue

            height = self.estimate_height(hit, frame, baseline)
            is_person = height > self.config["person_height"]
            if is_person:
                status = PERSON
            elif hit.distance_from_camera < self.config["max_distance"]:
                status = OBSTACLE
            else:
                status = OUT_OF_RANGE
            verdicts.append(ProbeVerdict(idx, status, ray_distance=hit.distance_from_camera, height=height))

        votes = sum(1 for v in verdicts if v.votes)
        return ObstacleResult(
            is_obstacle=votes >= self.config["min_votes"],
            votes=votes,
            verdicts=verdicts,
            used_depth=False,
            note="Fallback Obs",
        )

    # ------------------------------------------------------------------
    def estimate_width(self, frame: SensingFrame, point: ScreenPoint) -> float:
        """
        Ancho aproximado de la superficie bajo la sonda.

        Recorre la fila del mapa hacia ambos lados desde el píxel central y se
        detiene en la primera lectura que se aleja de la profundidad central
        más que la tolerancia. El span resultante se pasa a metros con la focal
        horizontal escalada a la resolución del mapa.

        Returns:
            ancho en metros (0.0 si no hay lectura central)
        """
        center_depth = self.depth_sampler.value_at(frame, point)
        coord = self.depth_sampler.texture_coordinate(frame, point)
        if center_depth is None or coord is None:
            return 0.0

        center_px, center_py = coord
        radius = self.config["width_scan_radius_px"]
        stride = self.config["width_scan_stride"]
        tolerance = self.config["width_depth_tolerance"]

        with frame.depth.locked() as depth:
            row = depth[center_py]
            depth_width = depth.shape[1]

            def matches(px):
                value = float(row[px])
                return is_valid_depth(value) and abs(value - center_depth) <= tolerance

            left_px = center_px
            px = center_px
            while px > max(0, center_px - radius):
                if not matches(px):
                    break
                left_px = px
                px -= stride

            right_px = center_px
            px = center_px
            while px < min(depth_width - 1, center_px + radius):
                if not matches(px):
                    break
                right_px = px
                px += stride

        pixel_span = max(1, right_px - left_px)
        fx = scaled_focal_length(frame.pose.focal_length_x, frame.pose.image_resolution[0], depth_width)
        return pixel_span_to_meters(pixel_span, center_depth, fx)

    @staticmethod
    def estimate_height(hit: GeometryHit, frame: SensingFrame, baseline: Optional[float]) -> float:
        """Altura sobre el piso base; sin piso, altura de cámara menos Y del impacto."""
        if baseline is not None:
            return hit.y - baseline
        return frame.pose.height - hit.y

    def is_likely_person(self, height: float, width: float) -> bool:
        cfg = self.config
        if height > cfg["person_height"]:
            return True
        if height > cfg["person_height_with_width"] and width > cfg["person_width"]:
            return True
        if width > cfg["wide_person_width"] and height > cfg["wide_person_height"]:
            return True
        return False
