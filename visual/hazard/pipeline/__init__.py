from .baseline_tracker import BaselineTracker
from .dropoff_estimator import DropOffEstimator, DropOffResult, SmoothedMetric
from .obstacle_classifier import ObstacleClassifier, ObstacleResult, ProbeVerdict
from .alert_arbiter import AlertArbiter, AlertState

__all__ = [
    "BaselineTracker",
    "DropOffEstimator",
    "DropOffResult",
    "SmoothedMetric",
    "ObstacleClassifier",
    "ObstacleResult",
    "ProbeVerdict",
    "AlertArbiter",
    "AlertState",
]
