# visual/hazard/engine/probe_adapter.py
"""
Adaptador de sondas geométricas: envuelve el raycast del host.
"""

from concurrent.futures import TimeoutError as HandoffTimeout
from typing import Optional

import numpy as np
from colorama import Fore

from core.contracts.sensing_contract import GeometryHit, ScreenPoint, SensingFrame
from ..config import RAYCAST_CONFIG
from ..utils import euclidean_distance_3d


class GeometryProbeAdapter:
    """
    Lanza un rayo desde un punto de pantalla contra los planos detectados.

    El raycast toca el estado de la sesión del host, así que se ejecuta en la
    cola principal y el worker espera el resultado (entrega síncrona).
    """

    def __init__(self, session, main_queue, handoff_timeout: float = RAYCAST_CONFIG["handoff_timeout"]):
        self.session = session
        self.main_queue = main_queue
        self.handoff_timeout = handoff_timeout

    def probe(self, frame: SensingFrame, point: ScreenPoint,
              target: str = RAYCAST_CONFIG["floor"]["target"],
              alignment: str = RAYCAST_CONFIG["floor"]["alignment"]) -> Optional[GeometryHit]:
        """
        Args:
            frame: frame actual (pose de cámara para la distancia)
            point: punto de pantalla normalizado
            target / alignment: filtro de planos del host

        Returns:
            GeometryHit o None si no hay superficie
        """
        pixel_point = point.to_pixels(frame.viewport_size)
        try:
            position = self.main_queue.run_sync(
                self.session.ray_cast, pixel_point, target, alignment,
                timeout=self.handoff_timeout,
            )
        except HandoffTimeout:
            print(Fore.YELLOW + f"[GeometryProbe] Hilo principal no respondió para {point}; sonda omitida.")
            return None

        if position is None:
            return None

        world_position = np.asarray(position, dtype=np.float64)[:3]
        distance = euclidean_distance_3d(world_position, frame.pose.position)
        return GeometryHit(world_position=world_position, distance_from_camera=distance)

    def probe_floor(self, frame: SensingFrame, point: ScreenPoint) -> Optional[GeometryHit]:
        floor = RAYCAST_CONFIG["floor"]
        return self.probe(frame, point, floor["target"], floor["alignment"])

    def probe_obstacle(self, frame: SensingFrame, point: ScreenPoint) -> Optional[GeometryHit]:
        obstacle = RAYCAST_CONFIG["obstacle"]
        return self.probe(frame, point, obstacle["target"], obstacle["alignment"])
