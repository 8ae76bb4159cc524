from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np

from core.contracts.sensing_contract import CameraPose, DepthFrame, SensingFrame


class SensingSession(ABC):
    """
    Contrato del subsistema de sensado (pose, profundidad, raycast).
    Las implementaciones concretas envuelven el SDK de la plataforma.
    """

    @property
    @abstractmethod
    def viewport_size(self) -> Tuple[int, int]:
        """(ancho, alto) del viewport en píxeles."""

    @abstractmethod
    def current_camera_pose(self) -> Optional[CameraPose]:
        ...

    @abstractmethod
    def current_depth_frame(self) -> Optional[DepthFrame]:
        ...

    @abstractmethod
    def ray_cast(self, pixel_point: Tuple[float, float], target: str,
                 alignment: str) -> Optional[np.ndarray]:
        """Posición en el mundo del primer impacto, o None. Solo en el hilo principal."""

    @abstractmethod
    def display_transform(self, orientation: str, viewport_size: Tuple[int, int]) -> np.ndarray:
        """Afín 2x3: imagen normalizada -> viewport normalizado."""

    def current_frame(self, orientation: str = "portrait") -> Optional[SensingFrame]:
        """Instantánea del sensor lista para el pipeline; None si aún no hay pose."""
        pose = self.current_camera_pose()
        if pose is None:
            return None
        viewport = self.viewport_size
        return SensingFrame.create(
            pose=pose,
            viewport_size=viewport,
            display_transform=self.display_transform(orientation, viewport),
            depth=self.current_depth_frame(),
        )
