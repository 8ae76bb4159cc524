# main.py
import sys
import os
import datetime
import threading
import time
from colorama import Fore, init

init(autoreset=True)
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

import numpy as np

from core.event_bus import EventBus
from core.main_queue import MainQueue
from core.orchestrator import Orchestrator
from output.tts_manager import TTSManager
from input.sensing import SyntheticSession
from visual.hazard import HazardSystem, PROBE_LAYOUTS

DEMO_DURATION_S = 12.0
STEP_AFTER_S = 4.0


def build_demo_session():
    """Sesión sintética: piso plano a 1.2 m bajo la cámara y mapa de profundidad uniforme."""
    session = SyntheticSession(camera_position=(0.0, 1.2, 0.0), pitch=-0.6)
    session.set_floor_hit(PROBE_LAYOUTS["baseline"], floor_y=0.0, forward=0.3)
    for point in PROBE_LAYOUTS["dropoff"]:
        session.set_floor_hit(point, floor_y=0.0, forward=0.4)
    session.set_depth_map(np.full((192, 256), 1.45, dtype=np.float32))
    return session


def script_step(session):
    """A los pocos segundos aparece un escalón bajo la sonda izquierda."""
    time.sleep(STEP_AFTER_S)
    print(Fore.LIGHTYELLOW_EX + "[DEMO] Escalón de 15 cm bajo la sonda izquierda.")
    session.set_floor_hit(PROBE_LAYOUTS["dropoff"][1], floor_y=-0.15, forward=0.4)


def main(mode: str = "debug"):
    print(Fore.LIGHTGREEN_EX + "\n═══════════════════════════════════════════════")
    print(Fore.LIGHTGREEN_EX + "        [BASTÓN INTELIGENTE - DEMO SINTÉTICA]  ")
    print(Fore.LIGHTGREEN_EX + "═══════════════════════════════════════════════")
    now = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    print(Fore.LIGHTBLUE_EX + f"[{now}] Inicializando módulos...")

    main_queue = MainQueue()
    event_bus = EventBus()
    orchestrator = Orchestrator(event_bus)
    tts = TTSManager(event_bus)

    session = build_demo_session()
    session.describe()

    hazard_system = HazardSystem(event_bus, session, main_queue, mode=mode)
    orchestrator.set_hazard_system(hazard_system)
    orchestrator.enable_scanning()

    threading.Thread(target=script_step, args=(session,), daemon=True).start()
    threading.Timer(DEMO_DURATION_S, main_queue.stop).start()

    print(Fore.MAGENTA + "\n[BOOT] Núcleo iniciado. Bombeando cola principal...\n")
    try:
        # el hilo principal atiende raycasts y actualizaciones de salida
        main_queue.run_forever()
    finally:
        orchestrator.disable_scanning()
        tts.stop()
        event_bus.shutdown()
        print(Fore.CYAN + f"[STATS] {hazard_system.get_stats()}")


if __name__ == "__main__":
    try:
        main(sys.argv[1] if len(sys.argv) > 1 else "debug")
    except KeyboardInterrupt:
        print(Fore.RED + "\n[INTERRUPCIÓN] Sistema detenido por el usuario.")
