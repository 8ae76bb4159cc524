"""
Sesión de sensado sintética.
Sustituye al sensor real en la demo y en las pruebas: los impactos de rayo
se configuran por punto de pantalla y el mapa de profundidad es un array.
"""

import threading
from collections import deque
from typing import Dict, Optional, Tuple

import numpy as np
from colorama import Fore

from core.contracts.sensing_contract import CameraPose, DepthFrame, SensingFrame
from .session import SensingSession


class SyntheticSession(SensingSession):
    """
    Mundo programable:
    - set_hit(punto_normalizado, posición) define el impacto de ese punto
    - set_depth_map(array) define el mapa de profundidad (None = sin sensor)
    """

    def __init__(self, viewport_size: Tuple[int, int] = (390, 844),
                 camera_position=(0.0, 1.4, 0.0), pitch: float = -0.6,
                 focal_length: float = 1400.0, image_resolution: Tuple[int, int] = (1920, 1440),
                 clock=None):
        self._viewport_size = viewport_size
        self.camera_position = np.asarray(camera_position, dtype=np.float64)
        self.pitch = pitch
        self.focal_length = focal_length
        self.image_resolution = image_resolution
        self.transform = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]], dtype=np.float64)
        self.clock = clock

        self._hits: Dict[Tuple[float, float], np.ndarray] = {}
        self._depth_map: Optional[np.ndarray] = None
        self.ray_cast_threads = deque(maxlen=64)  # hilos que ejecutaron raycast
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    @staticmethod
    def _key(x: float, y: float) -> Tuple[float, float]:
        return round(float(x), 3), round(float(y), 3)

    def set_hit(self, point: Tuple[float, float], world_position):
        """Define (o borra con None) el impacto del punto normalizado."""
        key = self._key(*point)
        with self._lock:
            if world_position is None:
                self._hits.pop(key, None)
            else:
                self._hits[key] = np.asarray(world_position, dtype=np.float64)

    def set_floor_hit(self, point: Tuple[float, float], floor_y: float, forward: float = 1.0):
        """Impacto de piso a 'forward' metros delante de la cámara, a la altura floor_y."""
        x = self.camera_position[0]
        z = self.camera_position[2] - forward
        self.set_hit(point, (x, floor_y, z))

    def set_hit_at_distance(self, point: Tuple[float, float], distance: float, hit_y: float):
        """Impacto a 'distance' metros de la cámara con altura Y dada."""
        dy = hit_y - self.camera_position[1]
        horizontal = np.sqrt(max(0.0, distance ** 2 - dy ** 2))
        self.set_hit(point, (self.camera_position[0], hit_y, self.camera_position[2] - horizontal))

    def clear_hits(self):
        with self._lock:
            self._hits.clear()

    def set_depth_map(self, depth_map: Optional[np.ndarray]):
        with self._lock:
            self._depth_map = None if depth_map is None else np.asarray(depth_map, dtype=np.float32)

    # ------------------------------------------------------------------
    @property
    def viewport_size(self) -> Tuple[int, int]:
        return self._viewport_size

    def current_camera_pose(self) -> Optional[CameraPose]:
        intrinsics = np.array([
            [self.focal_length, 0.0, self.image_resolution[0] / 2.0],
            [0.0, self.focal_length, self.image_resolution[1] / 2.0],
            [0.0, 0.0, 1.0],
        ])
        return CameraPose(
            pitch=self.pitch,
            position=self.camera_position.copy(),
            intrinsics=intrinsics,
            image_resolution=self.image_resolution,
        )

    def current_depth_frame(self) -> Optional[DepthFrame]:
        with self._lock:
            if self._depth_map is None:
                return None
            return DepthFrame(depth_map=self._depth_map.copy())

    def ray_cast(self, pixel_point, target, alignment) -> Optional[np.ndarray]:
        width, height = self._viewport_size
        key = self._key(pixel_point[0] / width, pixel_point[1] / height)
        self.ray_cast_threads.append(threading.get_ident())
        with self._lock:
            hit = self._hits.get(key)
        return None if hit is None else hit.copy()

    def display_transform(self, orientation, viewport_size) -> np.ndarray:
        return self.transform.copy()

    def current_frame(self, orientation: str = "portrait") -> Optional[SensingFrame]:
        frame = super().current_frame(orientation)
        if frame is not None and self.clock is not None:
            frame.timestamp = self.clock()
        return frame

    def describe(self) -> str:
        with self._lock:
            n_hits = len(self._hits)
            depth = "N/A" if self._depth_map is None else f"{self._depth_map.shape[1]}x{self._depth_map.shape[0]}"
        msg = f"[SyntheticSession] viewport={self._viewport_size} hits={n_hits} depth={depth}"
        print(Fore.LIGHTBLACK_EX + msg)
        return msg
