#!/usr/bin/env python3
"""
Pruebas del BaselineTracker (piso base con EMA lenta).
"""

import math

import pytest

from conftest import make_hit
from visual.hazard.pipeline import BaselineTracker


def test_first_hit_is_adopted():
    tracker = BaselineTracker()
    assert tracker.floor_y is None
    assert tracker.update(make_hit(0.42)) == pytest.approx(0.42)


def test_ema_update_uses_alpha():
    tracker = BaselineTracker(alpha=0.30)
    tracker.update(make_hit(1.0))
    assert tracker.update(make_hit(0.0)) == pytest.approx(0.7)


def test_missing_hit_carries_forward():
    tracker = BaselineTracker()
    assert tracker.update(None) is None
    tracker.update(make_hit(0.5))
    assert tracker.update(None) == pytest.approx(0.5)


def test_converges_within_one_millimeter():
    tracker = BaselineTracker(alpha=0.30)
    tracker.update(make_hit(0.0))
    target = 1.0
    updates = math.ceil(math.log(0.001) / math.log(0.70))

    for _ in range(updates):
        tracker.update(make_hit(target))

    assert abs(tracker.floor_y - target) < 0.001


def test_reset_clears_baseline():
    tracker = BaselineTracker()
    tracker.update(make_hit(0.3))
    tracker.reset()
    assert tracker.floor_y is None
