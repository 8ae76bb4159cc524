#!/usr/bin/env python3
"""
Pruebas del sistema de alertas de peligro.

Cubre:
1. AlertArbiter: histéresis por categoría, prioridad y cooldown global
2. HazardSystem: escenario de escalón y de persona sobre una SyntheticSession
3. Orchestrator: alerta de peligro -> pedido de TTS urgente
"""

import threading

import numpy as np
import pytest
from colorama import Fore, init
init(autoreset=True)

from core.contracts.hazard_event import DROP_OFF, OBSTACLE, HazardAlertEvent, HazardDecision
from core.event_bus import EventBus
from core.orchestrator import Orchestrator
from visual.hazard import HazardSystem, HAZARD_MESSAGES, PROBE_LAYOUTS
from visual.hazard.config import get_mode_config
from visual.hazard.pipeline import AlertArbiter

from conftest import DEPTH_SHAPE

DROP_CENTER, DROP_LEFT, DROP_RIGHT = PROBE_LAYOUTS["dropoff"]


def _decision(drop=False, obstacle=False):
    return HazardDecision(is_drop_off=drop, is_obstacle=obstacle, debug_narrative="")


# ----------------------------------------------------------------------
# AlertArbiter
# ----------------------------------------------------------------------
def test_single_frame_does_not_fire():
    arbiter = AlertArbiter()
    assert arbiter.decide(_decision(drop=True), 0.0) is None
    assert arbiter.state.drop_off_streak == 1


def test_gap_resets_streak():
    arbiter = AlertArbiter()
    assert arbiter.decide(_decision(drop=True), 0.0) is None
    assert arbiter.decide(_decision(), 0.1) is None
    assert arbiter.decide(_decision(drop=True), 0.2) is None
    assert arbiter.decide(_decision(drop=True), 0.3) == DROP_OFF


def test_cooldown_blocks_until_elapsed():
    arbiter = AlertArbiter()
    arbiter.decide(_decision(drop=True), -0.1)
    assert arbiter.decide(_decision(drop=True), 0.0) == DROP_OFF

    assert arbiter.decide(_decision(drop=True), 0.5) is None
    assert arbiter.decide(_decision(drop=True), 1.0) is None
    assert arbiter.decide(_decision(drop=True), 1.5) is None
    assert arbiter.decide(_decision(drop=True), 1.6) == DROP_OFF


def test_drop_off_has_priority_over_obstacle():
    arbiter = AlertArbiter()
    both = _decision(drop=True, obstacle=True)
    arbiter.decide(both, 0.0)
    assert arbiter.decide(both, 0.1) == DROP_OFF

    # la racha de obstáculo sigue contando durante el cooldown
    arbiter.decide(_decision(obstacle=True), 0.5)
    assert arbiter.state.drop_off_streak == 0
    assert arbiter.state.obstacle_streak == 3
    assert arbiter.decide(both, 1.7) == OBSTACLE


def test_reset_clears_streaks_and_cooldown():
    arbiter = AlertArbiter()
    arbiter.decide(_decision(obstacle=True), 0.0)
    arbiter.decide(_decision(obstacle=True), 0.1)
    arbiter.reset()
    assert arbiter.state.obstacle_streak == 0
    assert arbiter.can_warn(0.2)


def test_unknown_mode_raises():
    with pytest.raises(ValueError):
        get_mode_config("turbo")


# ----------------------------------------------------------------------
# HazardSystem
# ----------------------------------------------------------------------
@pytest.fixture
def event_bus():
    bus = EventBus()
    yield bus
    bus.shutdown(wait=True)


@pytest.fixture
def collected(event_bus):
    events = {"hazard_frame": [], "hazard_alert": []}
    event_bus.subscribe("hazard_frame", events["hazard_frame"].append)
    event_bus.subscribe("hazard_alert", events["hazard_alert"].append)
    return events


@pytest.fixture
def hazard(event_bus, session, main_queue):
    return HazardSystem(event_bus, session, main_queue, mode="debug")


def _flush(event_bus, main_queue):
    main_queue.run_pending()
    event_bus.shutdown(wait=True)


def test_step_scenario_fires_on_third_frame(hazard, session, clock, main_queue, event_bus, collected):
    print(Fore.CYAN + "[TEST] Escalón de 15 cm a la izquierda")
    session.set_floor_hit(PROBE_LAYOUTS["baseline"], 1.00, forward=0.5)
    session.set_floor_hit(DROP_CENTER, 1.00, forward=0.6)
    session.set_floor_hit(DROP_RIGHT, 1.00, forward=0.6)
    session.set_floor_hit(DROP_LEFT, 0.85, forward=0.6)

    decisions = []
    for _ in range(3):
        decisions.append(hazard.process_frame(session.current_frame()))
        clock.advance(0.1)

    assert decisions[0].baseline == pytest.approx(1.0)
    assert decisions[2].baseline == pytest.approx(1.0)
    assert decisions[0].max_drop == pytest.approx(0.15)
    assert [d.is_drop_off for d in decisions] == [False, True, True]

    _flush(event_bus, main_queue)

    assert len(collected["hazard_frame"]) == 3
    assert len(collected["hazard_alert"]) == 1
    alert = collected["hazard_alert"][0]
    assert isinstance(alert, HazardAlertEvent)
    assert alert.category == DROP_OFF
    assert alert.message == HAZARD_MESSAGES["drop_off"]
    assert alert.frame_id == decisions[2].frame_id
    assert hazard.get_stats()["alerts_emitted"] == 1


def test_baseline_comes_only_from_near_foot_probe(hazard, session, clock):
    session.set_floor_hit(PROBE_LAYOUTS["baseline"], 1.00, forward=0.5)
    for point in PROBE_LAYOUTS["dropoff"]:
        session.set_floor_hit(point, 1.00, forward=0.6)
    hazard.process_frame(session.current_frame())
    clock.advance(0.1)

    # sin impacto junto al pie, las sondas amplias no mueven el piso
    session.set_hit(PROBE_LAYOUTS["baseline"], None)
    for point in PROBE_LAYOUTS["dropoff"]:
        session.set_floor_hit(point, 0.70, forward=0.6)
    decision = hazard.process_frame(session.current_frame())

    assert decision.baseline == pytest.approx(1.0)
    assert decision.max_drop == pytest.approx(0.30)


def test_sustained_drop_respects_cooldown(hazard, session, clock):
    session.set_floor_hit(PROBE_LAYOUTS["baseline"], 1.00, forward=0.5)
    session.set_floor_hit(DROP_LEFT, 0.80, forward=0.6)

    fired_at = []
    for _ in range(30):
        frame = session.current_frame()
        before = hazard.get_stats()["alerts_emitted"]
        hazard.process_frame(frame)
        if hazard.get_stats()["alerts_emitted"] > before:
            fired_at.append(frame.timestamp)
        clock.advance(0.1)

    assert len(fired_at) >= 2
    for earlier, later in zip(fired_at, fired_at[1:]):
        assert later - earlier > 1.5
        assert later - earlier < 1.7


def test_person_scenario_never_alerts(hazard, session, clock, main_queue, event_bus, collected):
    print(Fore.CYAN + "[TEST] Persona a 0.9 m")
    session.camera_position = np.array([0.0, 1.4, 0.0])
    session.set_floor_hit(PROBE_LAYOUTS["baseline"], 0.0, forward=0.5)
    session.set_depth_map(np.full(DEPTH_SHAPE, 0.9, dtype=np.float32))
    for point in PROBE_LAYOUTS["obstacle"]:
        session.set_hit_at_distance(point, distance=0.9, hit_y=1.6)

    for _ in range(6):
        decision = hazard.process_frame(session.current_frame())
        clock.advance(0.1)
        assert decision.obstacle_votes == 0
        assert not decision.is_obstacle
        assert not decision.is_drop_off
        assert set(decision.probe_states.values()) == {"person"}

    _flush(event_bus, main_queue)
    assert collected["hazard_alert"] == []


def test_obstacle_scenario_alerts(hazard, session, clock, main_queue, event_bus, collected):
    session.camera_position = np.array([0.0, 1.4, 0.0])
    session.set_floor_hit(PROBE_LAYOUTS["baseline"], 0.0, forward=0.5)
    session.set_depth_map(np.full(DEPTH_SHAPE, 1.0, dtype=np.float32))
    for point in PROBE_LAYOUTS["obstacle"][:3]:
        session.set_hit_at_distance(point, distance=1.0, hit_y=0.5)

    for _ in range(2):
        hazard.process_frame(session.current_frame())
        clock.advance(0.1)

    _flush(event_bus, main_queue)
    assert [a.category for a in collected["hazard_alert"]] == [OBSTACLE]
    assert collected["hazard_alert"][0].meta["obstacle_votes"] == 3


def test_looking_up_keeps_baseline(hazard, session):
    session.set_floor_hit(PROBE_LAYOUTS["baseline"], 1.00, forward=0.5)
    hazard.process_frame(session.current_frame())

    session.pitch = 0.3
    session.set_floor_hit(PROBE_LAYOUTS["baseline"], 0.2, forward=0.5)
    decision = hazard.process_frame(session.current_frame())

    assert decision.baseline == pytest.approx(1.0)
    assert not decision.is_drop_off
    assert "Pitch" in decision.debug_narrative


def test_reset_session_forgets_baseline(hazard, session):
    session.set_floor_hit(PROBE_LAYOUTS["baseline"], 1.00, forward=0.5)
    hazard.process_frame(session.current_frame())
    hazard.reset_session()

    assert hazard.baseline_tracker.floor_y is None
    assert hazard.dropoff_estimator.smoothed.value == 0.0


# ----------------------------------------------------------------------
# Orchestrator
# ----------------------------------------------------------------------
class StubHazardSystem:
    def __init__(self):
        self.started = 0
        self.stopped = 0

    def start(self):
        self.started += 1

    def stop(self):
        self.stopped += 1


def _capture(event_bus, event_name):
    received = []
    done = threading.Event()

    def on_event(payload):
        received.append(payload)
        done.set()

    event_bus.subscribe(event_name, on_event)
    return received, done


def test_hazard_alert_becomes_urgent_tts(event_bus):
    orchestrator = Orchestrator(event_bus)
    received, done = _capture(event_bus, "tts_request_urgent")

    event_bus.publish("hazard_alert", HazardAlertEvent(category=DROP_OFF, message=HAZARD_MESSAGES["drop_off"]))

    assert done.wait(timeout=2.0)
    assert received[0]["text"] == HAZARD_MESSAGES["drop_off"]
    assert received[0]["priority"] == "urgent"
    assert orchestrator.ctx.last_alert_category == DROP_OFF


def test_enable_and_disable_scanning(event_bus):
    orchestrator = Orchestrator(event_bus)
    stub = StubHazardSystem()
    orchestrator.set_hazard_system(stub)
    received, done = _capture(event_bus, "tts_request")

    orchestrator.enable_scanning()
    orchestrator.enable_scanning()
    assert done.wait(timeout=2.0)
    assert received[0]["text"] == HAZARD_MESSAGES["startup"]
    assert stub.started == 1

    orchestrator.disable_scanning()
    orchestrator.disable_scanning()
    assert stub.stopped == 1
    assert not orchestrator.ctx.scanning_enabled


class RecordingBus:
    """Bus síncrono que solo registra lo publicado."""

    def __init__(self):
        self.published = []

    def subscribe(self, event_name, callback):
        pass

    def publish(self, event_name, payload=None):
        self.published.append((event_name, payload))


def test_speech_in_progress_only_yields_to_hazards():
    bus = RecordingBus()
    orchestrator = Orchestrator(bus)

    orchestrator._on_tts_start("Bastón inteligente")
    assert orchestrator.ctx.is_locked("tts_playing")
    orchestrator._publish_tts("Aviso informativo")
    orchestrator.on_hazard_alert(HazardAlertEvent(category=OBSTACLE, message=HAZARD_MESSAGES["obstacle"]))

    assert [name for name, _ in bus.published] == ["tts_request_urgent"]

    orchestrator._on_tts_end("Bastón inteligente")
    assert not orchestrator.ctx.is_locked("tts_playing")
    orchestrator._publish_tts("Aviso informativo")

    assert bus.published[-1][0] == "tts_request"
    assert bus.published[-1][1]["text"] == "Aviso informativo"
