#!/usr/bin/env python3
from __future__ import annotations
"""
LANERACER — three-lane dodge game.
Switch lanes, dodge traffic, it keeps getting faster.

Requirements:
    pip install pygame numpy
"""

import sys

import pygame

from game_engine import RunState, SimulationEngine
from laneracer.audio.cues import NullAudio, make_audio
from laneracer.config.schema import Settings
from laneracer.core.log import get_logger
from laneracer.core.storage import JsonFileStore
from laneracer.render.scene import PygameRenderer
from laneracer.ui.input import LaneControls

log = get_logger("app")

LEFT_KEYS = (pygame.K_LEFT, pygame.K_a)
RIGHT_KEYS = (pygame.K_RIGHT, pygame.K_d)
CONFIRM_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE)


def _on_escape(engine: SimulationEngine) -> bool:
    """Close/back out of the current screen. Returns False when the app should quit."""
    state = engine.state
    if state is RunState.HOW:
        engine.close()
    elif state in (RunState.PAUSED, RunState.GAMEOVER):
        engine.back_to_menu()
    elif state is RunState.RUNNING:
        engine.pause()
    else:
        return False
    return True


def handle_key(engine: SimulationEngine, controls: LaneControls, audio, key, now: float) -> bool:
    """Translate one key press into engine commands. Returns False to quit."""
    state = engine.state
    if key in LEFT_KEYS:
        controls.press(-1)
    elif key in RIGHT_KEYS:
        controls.press(+1)
    elif key == pygame.K_ESCAPE:
        return _on_escape(engine)
    elif key == pygame.K_p:
        engine.toggle_pause(now)
    elif key == pygame.K_r:
        engine.restart()
    elif key in CONFIRM_KEYS:
        if state is RunState.MENU:
            engine.start()
        elif state is RunState.GAMEOVER:
            engine.restart()
        elif state is RunState.PAUSED:
            engine.resume(now)
        elif state is RunState.HOW:
            engine.close()
    elif key == pygame.K_h and state is RunState.MENU:
        engine.open_how()
    elif key == pygame.K_s and hasattr(audio, "set_enabled"):
        audio.set_enabled(not audio.enabled)
        audio.ui_click()
    return True


def run(settings: Settings) -> int:
    """Open the window and drive the engine until the player quits."""
    pygame.init()
    screen = pygame.display.set_mode((settings.width, settings.height), pygame.RESIZABLE)
    pygame.display.set_caption(settings.title)
    clock = pygame.time.Clock()

    audio = make_audio(settings.sfx, settings.sample_rate) if settings.sfx else NullAudio()
    store = JsonFileStore(settings.paths.best_score_json)
    engine = SimulationEngine(settings.width, settings.height, seed=settings.seed, store=store, audio=audio)
    controls = LaneControls(engine, settings.hold_repeat)
    renderer = PygameRenderer(screen)

    print(f"[play] best score {engine.best} ({settings.paths.best_score_json})")

    running = True
    while running:
        clock.tick(settings.fps)
        now = pygame.time.get_ticks() / 1000.0

        # ── Events ──────────────────────
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                running = handle_key(engine, controls, audio, event.key, now) and running
            elif event.type == pygame.KEYUP:
                if event.key in LEFT_KEYS:
                    controls.release(-1)
                elif event.key in RIGHT_KEYS:
                    controls.release(+1)
            elif event.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                renderer.set_surface(screen)
                engine.resize(event.w, event.h)
            elif event.type == pygame.WINDOWFOCUSLOST:
                controls.release_all()
                engine.hide()

        # ── Update ──────────────────────
        dt = engine.tick(now)
        if engine.state is RunState.RUNNING:
            controls.poll(dt)
        else:
            controls.release_all()

        # ── Draw ────────────────────────
        renderer.draw(
            engine.geometry, engine.player, engine.obstacles, engine.state,
            speed=engine.session.speed,
            score=engine.session.score,
            best=engine.best,
            final_score=engine.scores.final_score,
        )
        pygame.display.flip()

    log.debug("quitting after %d crashes", engine.crashes)
    pygame.quit()
    return 0


if __name__ == "__main__":
    from laneracer.config.loader import load_settings

    sys.exit(run(load_settings()))
