"""Pygame host shell for the Noise Identification module.

The shell plays the part of the enclosing bomb game: it owns the window, turns
mouse/keyboard/remote commands into button presses, and implements the host
capability (strikes, pass, confirmation sound, interaction punch).

Deterministic stage/RNG/animation state lives in noise_identification/* (core
modules).
"""

from __future__ import annotations

import logging
import math
import os
import random
from array import array
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .clock import Clock, RealClock
from .identification import NoiseIdentificationModule, build_noise_identification_module
from .noise_core import NoiseIdentificationSnapshot, NoiseType, PressOutcome
from .remote_commands import command_help, parse_command
from .textures import NoiseTextureCache

logger = logging.getLogger(__name__)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class _ConfirmationSound:
    """Synthesized button click, panned toward the pressed button.

    Audio is best effort: without a mixer device every call is a no-op.
    """

    _sample_rate = 22050
    _amp = 32767

    def __init__(self) -> None:
        self._available = False
        self._sound: pygame.mixer.Sound | None = None
        self._channel: pygame.mixer.Channel | None = None
        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._sample_rate, size=-16, channels=1, buffer=512)
            init = pygame.mixer.get_init()
            if init is None:
                raise pygame.error("mixer unavailable")
            sample_rate, _, channels = init
            pcm = self._render_click_pcm(sample_rate=int(sample_rate), channels=int(channels))
            self._sound = pygame.mixer.Sound(buffer=pcm.tobytes())
            self._channel = pygame.mixer.Channel(0)
            self._available = True
        except pygame.error:
            self._available = False

    def play(self, *, pan: float) -> None:
        if not self._available:
            return
        assert self._channel is not None
        assert self._sound is not None
        pan = max(-1.0, min(1.0, pan))
        self._channel.set_volume(0.5 * (1.0 - pan), 0.5 * (1.0 + pan))
        self._channel.play(self._sound)

    def _render_click_pcm(self, *, sample_rate: int, channels: int) -> array[int]:
        # Two short descending tones, 16-bit, one frame per sample.
        out = array("h")
        for frequency_hz, duration_s in ((1180.0, 0.028), (760.0, 0.040)):
            sample_count = max(1, int(sample_rate * duration_s))
            for idx in range(sample_count):
                envelope = 1.0 - (idx / float(sample_count))
                phase = (2.0 * math.pi * frequency_hz * idx) / float(sample_rate)
                sample = int(math.sin(phase) * 0.35 * envelope * self._amp)
                out.extend([sample] * max(1, channels))
        return out


WINDOW_SIZE = (960, 540)
TARGET_FPS = 60
SEED_ENV = "NOISE_ID_SEED"
REMOTE_PREFIX = "noise"

_BUTTON_KEYS = {
    pygame.K_1: NoiseType.CRYSTAL,
    pygame.K_2: NoiseType.LIQUID,
    pygame.K_3: NoiseType.MOISTURE,
    pygame.K_4: NoiseType.PERLIN,
    pygame.K_5: NoiseType.VORONOI,
    pygame.K_6: NoiseType.WHITE,
}


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the root screen; it handles its own quit.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif event.key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            if self._items:
                self._items[self._selected].action()
        elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            if self._is_root:
                self._app.quit()
            else:
                self._app.pop()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill((18, 20, 16))

        frame = pygame.Rect(20, 20, w - 40, h - 40)
        pygame.draw.rect(surface, (34, 38, 30), frame)
        pygame.draw.rect(surface, (150, 156, 132), frame, 2)

        title = self._title_font.render(self._title, True, (232, 236, 220))
        surface.blit(title, title.get_rect(midtop=(frame.centerx, frame.y + 24)))

        y = frame.y + 110
        for idx, item in enumerate(self._items):
            selected = idx == self._selected
            row = pygame.Rect(frame.centerx - 160, y, 320, 44)
            pygame.draw.rect(surface, (226, 230, 210) if selected else (46, 52, 40), row)
            pygame.draw.rect(surface, (120, 128, 104), row, 1)
            color = (24, 28, 20) if selected else (226, 230, 210)
            text = self._item_font.render(item.label, True, color)
            surface.blit(text, text.get_rect(center=row.center))
            y += 56

        foot = self._hint_font.render("Enter/Space: Select  |  Esc: Back", True, (170, 176, 150))
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


class NoiseModuleScreen:
    """Hosts one module and implements its host capability."""

    def __init__(
        self,
        app: App,
        *,
        clock: Clock,
        seed: int,
        sound: _ConfirmationSound | None = None,
    ) -> None:
        self._app = app
        self._clock = clock
        self._sound = sound if sound is not None else _ConfirmationSound()
        self._textures = NoiseTextureCache()
        self._shake_rng = random.Random(seed)

        self._small_font = pygame.font.Font(None, 24)
        self._tiny_font = pygame.font.Font(None, 20)
        self._big_font = pygame.font.Font(None, 56)

        self._input = ""
        self._message = ""
        self._host_strikes = 0
        self._passes = 0
        self._strike_flash_until_s = 0.0
        self._shake_until_s = 0.0
        self._shake_px = 0.0

        # Button -> rect, refreshed during render.
        self._button_hitboxes = self._layout_buttons(_panel_rect(WINDOW_SIZE))

        self._engine: NoiseIdentificationModule = build_noise_identification_module(
            host=self,
            clock=clock,
            seed=seed,
        )
        self._engine.on_initialize()

    @property
    def engine(self) -> NoiseIdentificationModule:
        return self._engine

    @property
    def host_strikes(self) -> int:
        return self._host_strikes

    @property
    def passes(self) -> int:
        return self._passes

    @property
    def button_rects(self) -> dict[NoiseType, pygame.Rect]:
        return dict(self._button_hitboxes)

    # Host capability.

    def signal_strike(self) -> None:
        self._host_strikes += 1
        self._strike_flash_until_s = self._clock.now() + 0.4

    def signal_pass(self) -> None:
        self._passes += 1

    def play_confirmation_sound(self, button: NoiseType) -> None:
        rect = self._button_hitboxes.get(button)
        if rect is None:
            self._sound.play(pan=0.0)
            return
        half = WINDOW_SIZE[0] / 2.0
        self._sound.play(pan=(rect.centerx - half) / half)

    def pulse(self, strength: float) -> None:
        strength = max(0.0, min(1.0, float(strength)))
        self._shake_px = 6.0 * strength
        self._shake_until_s = self._clock.now() + 0.12 * strength

    # Input.

    def press(self, button: NoiseType) -> PressOutcome:
        outcome = self._engine.on_button_pressed(button)
        if outcome is PressOutcome.IGNORED:
            self._message = "Module already solved."
        else:
            self._message = f"{button.label}: {outcome.value}"
        return outcome

    def submit_command(self, raw: str) -> PressOutcome | None:
        button = parse_command(raw)
        if button is None:
            self._message = f"Command not understood: {raw.strip()!r}"
            return None
        return self.press(button)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, "button", 0) == 1:
            pos = getattr(event, "pos", None)
            if pos is None:
                return
            for button, rect in self._button_hitboxes.items():
                if rect.collidepoint(pos):
                    self.press(button)
                    return
            return

        if event.type != pygame.KEYDOWN:
            return

        if event.key == pygame.K_ESCAPE:
            self._app.pop()
            return
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            if self._input.strip():
                self.submit_command(self._input)
            self._input = ""
            return
        if event.key == pygame.K_BACKSPACE:
            self._input = self._input[:-1]
            return
        if event.key in _BUTTON_KEYS and not self._input:
            self.press(_BUTTON_KEYS[event.key])
            return

        ch = getattr(event, "unicode", "")
        if ch and (ch.isalpha() or ch == " ") and len(self._input) < 24:
            self._input += ch

    # Rendering.

    def render(self, surface: pygame.Surface) -> None:
        self._engine.update()
        snap = self._engine.snapshot()
        now = self._clock.now()

        surface.fill((26, 28, 24))
        offset = (0, 0)
        if now < self._shake_until_s and self._shake_px > 0.0:
            mag = self._shake_px
            offset = (
                int(round(self._shake_rng.uniform(-mag, mag))),
                int(round(self._shake_rng.uniform(-mag, mag))),
            )

        w, h = surface.get_size()
        # Hit-testing uses the still panel; the shake only moves the drawing.
        self._button_hitboxes = self._layout_buttons(_panel_rect((w, h)))
        panel = _panel_rect((w, h)).move(offset)
        pygame.draw.rect(surface, (58, 62, 54), panel)
        border = (210, 52, 44) if now < self._strike_flash_until_s else (150, 156, 132)
        pygame.draw.rect(surface, border, panel, 3)

        self._render_display(surface, panel, snap)
        self._render_leds(surface, panel, snap)
        self._render_buttons(surface, panel, snap)
        self._render_footer(surface, panel, snap)

    def _render_display(self, surface: pygame.Surface, panel: pygame.Rect, snap: NoiseIdentificationSnapshot) -> None:
        frame = pygame.Rect(panel.x + 30, panel.y + 50, 300, 300)
        pygame.draw.rect(surface, (12, 12, 12), frame)
        pygame.draw.rect(surface, (96, 100, 88), frame, 2)

        if snap.texture_id is None:
            return
        sx, _, sz = snap.display_pose.scale
        dw = int(round((frame.w - 8) * max(0.0, min(1.0, sx))))
        dh = int(round((frame.h - 8) * max(0.0, min(1.0, sz))))
        if dw < 1 or dh < 1:
            return
        tex = pygame.transform.smoothscale(self._textures.get(snap.texture_id), (dw, dh))
        surface.blit(tex, tex.get_rect(center=frame.center))

    def _render_leds(self, surface: pygame.Surface, panel: pygame.Rect, snap: NoiseIdentificationSnapshot) -> None:
        x = panel.x + 30 + 300 + 30
        for idx, lit in enumerate(snap.leds_on):
            center = (x, panel.y + 80 + idx * 40)
            pygame.draw.circle(surface, (86, 228, 96) if lit else (30, 44, 32), center, 12)
            pygame.draw.circle(surface, (16, 18, 14), center, 12, 2)

    def _layout_buttons(self, panel: pygame.Rect) -> dict[NoiseType, pygame.Rect]:
        rects: dict[NoiseType, pygame.Rect] = {}
        left = panel.x + 420
        for kind in NoiseType:
            col = int(kind) % 2
            row = int(kind) // 2
            rects[kind] = pygame.Rect(left + col * 220, panel.y + 50 + row * 84, 200, 64)
        return rects

    def _render_buttons(self, surface: pygame.Surface, panel: pygame.Rect, snap: NoiseIdentificationSnapshot) -> None:
        for kind, rect in self._layout_buttons(panel).items():
            pygame.draw.rect(surface, (208, 210, 196), rect, border_radius=6)
            pygame.draw.rect(surface, (40, 42, 36), rect, 2, border_radius=6)
            label = self._small_font.render(f"{int(kind) + 1}  {kind.label}", True, (24, 26, 22))
            surface.blit(label, label.get_rect(center=rect.center))

    def _render_footer(self, surface: pygame.Surface, panel: pygame.Rect, snap: NoiseIdentificationSnapshot) -> None:
        if snap.solved:
            banner = self._big_font.render("SOLVED", True, (120, 240, 128))
            surface.blit(banner, banner.get_rect(center=(panel.x + 180, panel.y + 200)))

        status = f"Module #{snap.module_id}   Stage {min(snap.stage_number, 3)}/3   Strikes: {self._host_strikes}"
        surface.blit(self._small_font.render(status, True, (226, 230, 210)), (panel.x + 30, panel.y + 16))

        y = panel.y + 370
        prompt = self._small_font.render(f"Command: {self._input}_", True, (226, 230, 210))
        surface.blit(prompt, (panel.x + 30, y))
        if self._message:
            msg = self._small_font.render(self._message, True, (236, 206, 120))
            surface.blit(msg, (panel.x + 30, y + 28))

        help_lines = _wrap(self._tiny_font, command_help(REMOTE_PREFIX), panel.w - 60)
        hy = panel.bottom - 12 - len(help_lines) * 18
        for line in help_lines:
            surface.blit(self._tiny_font.render(line, True, (170, 176, 150)), (panel.x + 30, hy))
            hy += 18


def _panel_rect(size: tuple[int, int]) -> pygame.Rect:
    w, h = size
    return pygame.Rect(24, 24, w - 48, h - 48)


def _wrap(font: pygame.font.Font, text: str, max_width: int) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = word if not current else f"{current} {word}"
        if current and font.size(candidate)[0] > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def _seed_from_env() -> int | None:
    raw = os.environ.get(SEED_ENV, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring {SEED_ENV}={raw!r}: not an integer.")
        return None


def run(*, max_frames: int | None = None, event_injector: Callable[[int], None] | None = None) -> int:
    pygame.init()

    pygame.display.set_caption("Noise Identification")
    surface = pygame.display.set_mode(WINDOW_SIZE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    real_clock = RealClock()
    pinned_seed = _seed_from_env()

    def open_module() -> None:
        seed = pinned_seed if pinned_seed is not None else _new_seed()
        app.push(NoiseModuleScreen(app, clock=real_clock, seed=seed))

    main_items = [
        MenuItem("New Module", open_module),
        MenuItem("Quit", app.quit),
    ]

    app.push(MenuScreen(app, "Noise Identification", main_items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
