import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import numpy as np
import pytest

from core.contracts.sensing_contract import GeometryHit
from core.main_queue import MainQueue
from input.sensing import SyntheticSession
from visual.hazard.engine import DepthSampler, GeometryProbeAdapter

DEPTH_SHAPE = (192, 256)  # (alto, ancho)


class FakeClock:
    """Reloj manual para pruebas de tiempo (cooldowns, throttling)."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds: float):
        self.now += seconds
        return self.now


def make_hit(y: float, distance: float = 1.0) -> GeometryHit:
    return GeometryHit(world_position=np.array([0.0, y, -1.0]), distance_from_camera=distance)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(clock):
    return SyntheticSession(
        viewport_size=(400, 800),
        camera_position=(0.0, 2.0, 0.0),
        pitch=-0.6,
        focal_length=1400.0,
        image_resolution=(1920, 1440),
        clock=clock,
    )


@pytest.fixture
def main_queue():
    # ligada al hilo de la prueba: run_sync se ejecuta en línea
    return MainQueue()


@pytest.fixture
def sampler():
    return DepthSampler()


@pytest.fixture
def adapter(session, main_queue):
    return GeometryProbeAdapter(session, main_queue, handoff_timeout=0.5)
