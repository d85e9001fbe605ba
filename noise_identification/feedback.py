from __future__ import annotations

from dataclasses import dataclass

from .clock import Clock, elapsed_s
from .noise_core import (
    COLLAPSED_POSE,
    NOISE_TEXTURES,
    RESTING_POSE,
    TEXTURE_VARIANTS_PER_TYPE,
    DisplayPose,
    NoiseType,
    SeededRng,
    lerp_pose,
)

LED_COUNT = 3


@dataclass(slots=True)
class _Reveal:
    started_at_s: float


class FeedbackController:
    """Display and stage-LED animations for one module.

    Nothing here blocks: each routine records its start time and the current
    frame is derived from the clock on ``update()``. The engine fires routines
    and moves on.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        rng: SeededRng,
        resting_pose: DisplayPose = RESTING_POSE,
        reveal_delay_s: float = 0.2,
        reveal_rate_per_s: float = 1.3,
        led_on_s: float = 0.09,
        led_off_s: float = 0.06,
    ) -> None:
        if reveal_delay_s <= 0.0:
            raise ValueError("reveal_delay_s must be > 0")
        if reveal_rate_per_s <= 0.0:
            raise ValueError("reveal_rate_per_s must be > 0")
        if led_on_s <= 0.0 or led_off_s <= 0.0:
            raise ValueError("LED blink durations must be > 0")

        self._clock = clock
        self._rng = rng
        self._resting_pose = resting_pose
        self._reveal_delay_s = float(reveal_delay_s)
        self._reveal_rate_per_s = float(reveal_rate_per_s)
        self._led_on_s = float(led_on_s)
        self._led_off_s = float(led_off_s)

        self._texture_id: str | None = None
        self._pose = resting_pose
        self._reveal: _Reveal | None = None

        # LED index -> blink start; None while still off.
        self._led_started_at_s: list[float | None] = [None] * LED_COUNT

    @property
    def texture_id(self) -> str | None:
        return self._texture_id

    @property
    def display_pose(self) -> DisplayPose:
        return self._pose

    @property
    def revealing(self) -> bool:
        return self._reveal is not None

    def apply_texture(self, kind: NoiseType) -> str:
        """Pick one of the category's texture variants for the display."""

        index = self._rng.randint(0, TEXTURE_VARIANTS_PER_TYPE - 1)
        self._texture_id = NOISE_TEXTURES[kind][index]
        return self._texture_id

    def collapse_display(self) -> None:
        # Supersedes any reveal still in flight.
        self._reveal = None
        self._pose = COLLAPSED_POSE

    def reveal_next_stage(self, kind: NoiseType) -> None:
        self.collapse_display()
        self.apply_texture(kind)
        self._reveal = _Reveal(started_at_s=self._clock.now())

    def blink_led(self, index: int) -> None:
        if not (0 <= index < LED_COUNT):
            raise ValueError(f"LED index must be in [0, {LED_COUNT - 1}]")
        self._led_started_at_s[index] = self._clock.now()

    def led_is_on(self, index: int) -> bool:
        started = self._led_started_at_s[index]
        if started is None:
            return False
        t = elapsed_s(self._clock, started)
        # on -> off -> on, and stays on.
        return not (self._led_on_s <= t < self._led_on_s + self._led_off_s)

    def leds_on(self) -> tuple[bool, bool, bool]:
        return (self.led_is_on(0), self.led_is_on(1), self.led_is_on(2))

    def update(self) -> None:
        if self._reveal is None:
            return
        t = elapsed_s(self._clock, self._reveal.started_at_s) - self._reveal_delay_s
        if t < 0.0:
            return
        progress = t * self._reveal_rate_per_s
        if progress >= 1.0:
            # Land exactly on the resting pose regardless of frame timing.
            self._pose = self._resting_pose
            self._reveal = None
            return
        self._pose = lerp_pose(COLLAPSED_POSE, self._resting_pose, progress)
