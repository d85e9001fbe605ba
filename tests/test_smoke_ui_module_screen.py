from __future__ import annotations

import os
from dataclasses import dataclass

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


def test_ui_smoke_open_module_press_buttons_and_type_commands(monkeypatch) -> None:
    import pygame

    from noise_identification.app import SEED_ENV, run

    monkeypatch.setenv(SEED_ENV, "4242")

    def key(k: int, ch: str = "") -> None:
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": k, "unicode": ch, "mod": 0}))

    def inject(frame: int) -> None:
        # Main Menu -> New Module, press a few buttons, then type a remote command.
        if frame == 1:
            key(pygame.K_RETURN)
        elif frame == 2:
            key(pygame.K_1, "1")
        elif frame == 4:
            key(pygame.K_4, "4")
        elif frame == 6:
            key(pygame.K_w, "w")
        elif frame == 7:
            key(pygame.K_RETURN)
        elif frame == 9:
            key(pygame.K_x, "x")
        elif frame == 10:
            key(pygame.K_RETURN)
        elif frame == 12:
            key(pygame.K_ESCAPE)

    assert run(max_frames=16, event_injector=inject) == 0


def test_module_screen_solves_through_remote_commands() -> None:
    import pygame

    from noise_identification.app import WINDOW_SIZE, App, NoiseModuleScreen
    from noise_identification.noise_core import PressOutcome

    pygame.init()
    try:
        surface = pygame.Surface(WINDOW_SIZE)
        app = App(surface=surface, font=pygame.font.Font(None, 36))
        clock = FakeClock()
        screen = NoiseModuleScreen(app, clock=clock, seed=77)
        app.push(screen)

        assert screen.submit_command("nonsense") is None
        assert screen.host_strikes == 0

        assignment = screen.engine.assignment
        assert assignment is not None
        for kind in assignment.as_tuple():
            app.render()
            clock.advance(0.5)
            assert screen.submit_command(f"  {kind.name.upper()} ") is PressOutcome.CORRECT

        app.render()
        assert screen.engine.solved is True
        assert screen.passes == 1
        assert screen.host_strikes == 0
        assert screen.submit_command("c") is PressOutcome.IGNORED
        assert screen.passes == 1
    finally:
        pygame.quit()


def test_module_screen_mouse_click_on_wrong_button_strikes() -> None:
    import pygame

    from noise_identification.app import WINDOW_SIZE, App, NoiseModuleScreen

    pygame.init()
    try:
        surface = pygame.Surface(WINDOW_SIZE)
        app = App(surface=surface, font=pygame.font.Font(None, 36))
        screen = NoiseModuleScreen(app, clock=FakeClock(), seed=5)
        app.push(screen)
        app.render()

        expected = screen.engine.expected
        wrong = next(k for k in screen.button_rects if k is not expected)
        pos = screen.button_rects[wrong].center
        app.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"button": 1, "pos": pos}))

        assert screen.host_strikes == 1
        assert screen.engine.stage_number == 1
    finally:
        pygame.quit()


def test_button_hitboxes_ignore_shake_and_match_before_first_render() -> None:
    import pygame

    from noise_identification.app import WINDOW_SIZE, App, NoiseModuleScreen

    pygame.init()
    try:
        surface = pygame.Surface(WINDOW_SIZE)
        app = App(surface=surface, font=pygame.font.Font(None, 36))
        screen = NoiseModuleScreen(app, clock=FakeClock(), seed=9)
        app.push(screen)
        before_render = screen.button_rects

        screen.pulse(1.0)
        for _ in range(5):
            app.render()
            assert screen.button_rects == before_render

        expected = screen.engine.expected
        edge = before_render[expected].topleft
        app.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"button": 1, "pos": edge}))

        assert screen.host_strikes == 0
        assert screen.engine.stage_number == 2
    finally:
        pygame.quit()
