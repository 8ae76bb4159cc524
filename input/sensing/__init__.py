from .session import SensingSession
from .synthetic_session import SyntheticSession
from .scan_scheduler import ScanScheduler

__all__ = [
    "SensingSession",
    "SyntheticSession",
    "ScanScheduler",
]
