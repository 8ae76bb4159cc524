# visual/hazard/engine/depth_sampler.py
"""
Muestreador de profundidad sobre el mapa del sensor.
Convierte un punto de pantalla a coordenada de textura y lee la distancia.
"""

import numpy as np
from typing import Optional, Tuple

from core.contracts.sensing_contract import ScreenPoint, SensingFrame
from ..utils import apply_affine, invert_affine, is_valid_depth, robust_median


class DepthSampler:
    """
    Lector de profundidad consciente de la transformada de pantalla.

    La transformada del frame lleva coordenadas normalizadas de imagen a
    coordenadas normalizadas del viewport; para muestrear se aplica su inversa.
    """

    def texture_coordinate(self, frame: SensingFrame,
                           point: ScreenPoint) -> Optional[Tuple[int, int]]:
        """
        Mapea un punto de pantalla a (columna, fila) del mapa de profundidad.

        Returns:
            (col, row) o None si no hay mapa o cae fuera de los límites
        """
        if frame.depth is None:
            return None

        inverse = invert_affine(frame.display_transform)
        tex_x, tex_y = apply_affine(inverse, (point.x, point.y))

        # int() trunca hacia cero, igual que la conversión del sensor
        col = int(tex_x * frame.depth.width)
        row = int(tex_y * frame.depth.height)
        if col < 0 or row < 0 or col >= frame.depth.width or row >= frame.depth.height:
            return None
        return col, row

    def sample(self, frame: SensingFrame, point: ScreenPoint,
               kernel_radius: int = 1) -> Optional[float]:
        """
        Mediana de las lecturas válidas en la ventana (2r+1)x(2r+1).

        Args:
            frame: frame con mapa de profundidad
            point: punto de pantalla normalizado
            kernel_radius: radio de la ventana; 0 = lectura de un solo píxel

        Returns:
            distancia en metros o None si no hay lecturas válidas
        """
        if kernel_radius <= 0:
            return self.value_at(frame, point)

        coord = self.texture_coordinate(frame, point)
        if coord is None:
            return None
        col, row = coord

        with frame.depth.locked() as depth:
            h, w = depth.shape
            r0, r1 = max(0, row - kernel_radius), min(h, row + kernel_radius + 1)
            c0, c1 = max(0, col - kernel_radius), min(w, col + kernel_radius + 1)
            window = np.asarray(depth[r0:r1, c0:c1], dtype=np.float64).ravel()

        return robust_median(window)

    def value_at(self, frame: SensingFrame, point: ScreenPoint) -> Optional[float]:
        """Lectura de un solo píxel, sin filtrar (para el escaneo de ancho)."""
        coord = self.texture_coordinate(frame, point)
        if coord is None:
            return None
        col, row = coord

        with frame.depth.locked() as depth:
            value = float(depth[row, col])
        return value if is_valid_depth(value) else None
