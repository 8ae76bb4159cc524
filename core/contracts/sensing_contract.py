# core/contracts/sensing_contract.py
"""
Contratos entre el subsistema de sensado (cámara con profundidad) y el
pipeline de detección de peligros.

Cada SensingFrame es una instantánea del estado del sensor: pose de cámara,
mapa de profundidad (si existe) y transformada de pantalla.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Optional, Tuple
import time
import uuid

import numpy as np


@dataclass(frozen=True)
class ScreenPoint:
    """Punto de sondeo en coordenadas de pantalla normalizadas (0-1)."""
    x: float
    y: float

    @classmethod
    def from_tuple(cls, xy: Tuple[float, float]) -> "ScreenPoint":
        return cls(float(xy[0]), float(xy[1]))

    def to_pixels(self, viewport_size: Tuple[int, int]) -> Tuple[float, float]:
        """Convierte a píxeles del viewport (ancho, alto)."""
        width, height = viewport_size
        return self.x * width, self.y * height


@dataclass
class CameraPose:
    """
    Pose de cámara entregada por el sensor.
    - pitch: radianes (negativo = mirando hacia abajo)
    - position: posición en el mundo (x, y, z) en metros
    - intrinsics: matriz 3x3 (fx en [0, 0], fy en [1, 1])
    - image_resolution: (ancho, alto) de la imagen de cámara
    """
    pitch: float
    position: np.ndarray
    intrinsics: np.ndarray
    image_resolution: Tuple[int, int]

    @property
    def focal_length_x(self) -> float:
        return float(self.intrinsics[0][0])

    @property
    def focal_length_y(self) -> float:
        return float(self.intrinsics[1][1])

    @property
    def height(self) -> float:
        return float(self.position[1])


@dataclass
class DepthFrame:
    """Mapa de profundidad HxW en metros (float32)."""
    depth_map: np.ndarray

    @property
    def width(self) -> int:
        return int(self.depth_map.shape[1])

    @property
    def height(self) -> int:
        return int(self.depth_map.shape[0])

    @contextmanager
    def locked(self):
        """Bloquea el buffer para lectura: entrega una vista de solo lectura."""
        view = self.depth_map.view()
        view.flags.writeable = False
        yield view


@dataclass
class GeometryHit:
    """Impacto de un rayo contra un plano detectado."""
    world_position: np.ndarray
    distance_from_camera: float

    @property
    def y(self) -> float:
        return float(self.world_position[1])


@dataclass
class SensingFrame:
    """
    Payload estandarizado entre el subsistema de sensado y el pipeline.
    Es transitorio: se descarta tras tomar la decisión del frame.
    """
    frame_id: str
    timestamp: float
    pose: CameraPose
    viewport_size: Tuple[int, int]
    display_transform: np.ndarray = field(
        default_factory=lambda: np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]], dtype=np.float64)
    )
    depth: Optional[DepthFrame] = None

    @staticmethod
    def create(pose: CameraPose, viewport_size: Tuple[int, int],
               display_transform: Optional[np.ndarray] = None,
               depth: Optional[DepthFrame] = None,
               timestamp: Optional[float] = None) -> "SensingFrame":
        """Crea una instancia nueva con ID único."""
        frame = SensingFrame(
            frame_id=str(uuid.uuid4()),
            timestamp=time.monotonic() if timestamp is None else timestamp,
            pose=pose,
            viewport_size=viewport_size,
            depth=depth,
        )
        if display_transform is not None:
            frame.display_transform = np.asarray(display_transform, dtype=np.float64)
        return frame

    def describe(self) -> str:
        depth_desc = f"{self.depth.width}x{self.depth.height}" if self.depth is not None else "N/A"
        return (
            f"[FrameID: {self.frame_id[:8]}] "
            f"pitch={self.pose.pitch:.2f} | depth={depth_desc} | "
            f"t={self.timestamp:.2f}"
        )
