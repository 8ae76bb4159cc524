from .depth_sampler import DepthSampler
from .probe_adapter import GeometryProbeAdapter

__all__ = [
    "DepthSampler",
    "GeometryProbeAdapter",
]
