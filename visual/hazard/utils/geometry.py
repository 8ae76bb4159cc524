"""
Utilidades geométricas para el pipeline de peligros.
Implementa el modelo de cámara estenopeica (Pinhole Camera Model)
para convertir spans de píxeles en metros.
"""

import cv2
import numpy as np
from typing import Iterable, Optional, Tuple


def euclidean_distance_3d(p1, p2) -> float:
    """
    Distancia euclidiana entre dos puntos 3D (metros).
    """
    a = np.asarray(p1, dtype=np.float64)[:3]
    b = np.asarray(p2, dtype=np.float64)[:3]
    return float(np.linalg.norm(a - b))


def invert_affine(transform: np.ndarray) -> np.ndarray:
    """
    Invierte una transformada afín 2x3.
    """
    return cv2.invertAffineTransform(np.asarray(transform, dtype=np.float64))


def apply_affine(transform: np.ndarray, point: Tuple[float, float]) -> Tuple[float, float]:
    """
    Aplica una transformada afín 2x3 a un punto (x, y).
    """
    m = np.asarray(transform, dtype=np.float64)
    x, y = point
    tx = m[0, 0] * x + m[0, 1] * y + m[0, 2]
    ty = m[1, 0] * x + m[1, 1] * y + m[1, 2]
    return float(tx), float(ty)


def pixel_span_to_meters(pixel_span: float, depth_m: float, focal_length_px: float) -> float:
    """
    Convierte un ancho en píxeles a metros a la profundidad dada.
    Teorema de Tales: Ancho_m = Profundidad_m * Span_px / Focal_px

    Args:
        pixel_span: ancho en píxeles
        depth_m: profundidad en metros
        focal_length_px: longitud focal en píxeles (en la resolución del mapa)

    Returns:
        ancho en metros (0.0 si la focal no es válida)
    """
    if focal_length_px <= 0:
        return 0.0
    return float(depth_m * (pixel_span / focal_length_px))


def scaled_focal_length(focal_length_px: float, image_width: int, target_width: int) -> float:
    """
    Escala la focal de la imagen de cámara a la resolución del mapa de profundidad.
    """
    if image_width <= 0:
        return 0.0
    return float(focal_length_px) * (float(target_width) / float(image_width))


def robust_median(values: Iterable[float]) -> Optional[float]:
    """
    Mediana de los valores finitos y positivos (lecturas de profundidad válidas).
    Retorna None si no queda ninguno.
    """
    arr = np.asarray(list(values), dtype=np.float64)
    if arr.size == 0:
        return None
    valid = arr[np.isfinite(arr) & (arr > 0)]
    if valid.size == 0:
        return None
    return float(np.median(valid))


def is_valid_depth(value: float) -> bool:
    return bool(np.isfinite(value) and value > 0)
