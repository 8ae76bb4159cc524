"""
Paquete de utilidades para el pipeline de peligros.
"""

from .geometry import (
    euclidean_distance_3d,
    invert_affine,
    apply_affine,
    pixel_span_to_meters,
    scaled_focal_length,
    robust_median,
    is_valid_depth,
)

__all__ = [
    'euclidean_distance_3d',
    'invert_affine',
    'apply_affine',
    'pixel_span_to_meters',
    'scaled_focal_length',
    'robust_median',
    'is_valid_depth',
]
