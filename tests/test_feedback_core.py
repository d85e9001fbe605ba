from __future__ import annotations

from dataclasses import dataclass

import pytest

from noise_identification.feedback import FeedbackController
from noise_identification.noise_core import (
    COLLAPSED_POSE,
    NOISE_TEXTURES,
    RESTING_POSE,
    NoiseType,
    SeededRng,
)


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


def _controller(clock: FakeClock, seed: int = 3) -> FeedbackController:
    return FeedbackController(clock=clock, rng=SeededRng(seed))


def test_led_blinks_on_off_on_and_stays_lit() -> None:
    clock = FakeClock(t=10.0)
    fx = _controller(clock)
    assert fx.led_is_on(1) is False

    fx.blink_led(1)
    timeline = []
    for at in (0.0, 0.05, 0.10, 0.12, 0.20, 5.0):
        clock.t = 10.0 + at
        timeline.append(fx.led_is_on(1))

    assert timeline == [True, True, False, False, True, True]
    assert fx.led_is_on(0) is False
    assert fx.led_is_on(2) is False


def test_blink_rejects_unknown_led() -> None:
    fx = _controller(FakeClock())
    with pytest.raises(ValueError):
        fx.blink_led(3)


def test_reveal_holds_collapsed_then_interpolates_to_rest() -> None:
    clock = FakeClock()
    fx = _controller(clock)

    fx.reveal_next_stage(NoiseType.MOISTURE)
    assert fx.texture_id in NOISE_TEXTURES[NoiseType.MOISTURE]
    assert fx.display_pose == COLLAPSED_POSE

    clock.t = 0.15
    fx.update()
    assert fx.display_pose == COLLAPSED_POSE

    clock.t = 0.2 + 0.5 / 1.3
    fx.update()
    expected = COLLAPSED_POSE.scale[0] + (RESTING_POSE.scale[0] - COLLAPSED_POSE.scale[0]) * 0.5
    assert fx.display_pose.scale[0] == pytest.approx(expected)
    assert fx.revealing is True

    clock.t = 0.2 + 1.0 / 1.3 + 0.01
    fx.update()
    assert fx.display_pose == RESTING_POSE
    assert fx.revealing is False


def test_collapse_cancels_reveal_in_flight() -> None:
    clock = FakeClock()
    fx = _controller(clock)
    fx.reveal_next_stage(NoiseType.WHITE)

    clock.t = 0.5
    fx.update()
    fx.collapse_display()

    clock.t = 3.0
    fx.update()
    assert fx.display_pose == COLLAPSED_POSE
    assert fx.revealing is False


def test_texture_choice_covers_all_variants_of_a_category() -> None:
    fx = _controller(FakeClock(), seed=8)
    seen = {fx.apply_texture(NoiseType.CRYSTAL) for _ in range(200)}

    assert seen == set(NOISE_TEXTURES[NoiseType.CRYSTAL])


def test_every_category_has_five_distinct_textures() -> None:
    all_ids = [tid for ids in NOISE_TEXTURES.values() for tid in ids]

    assert set(NOISE_TEXTURES) == set(NoiseType)
    assert all(len(ids) == 5 for ids in NOISE_TEXTURES.values())
    assert len(set(all_ids)) == 30


@pytest.mark.parametrize(
    "kwargs",
    [
        {"reveal_delay_s": -0.1},
        {"reveal_delay_s": 0.0},
        {"reveal_rate_per_s": 0.0},
        {"led_on_s": -1.0},
        {"led_on_s": 0.0},
        {"led_off_s": -0.01},
        {"led_off_s": 0.0},
    ],
)
def test_invalid_timings_are_rejected(kwargs: dict[str, float]) -> None:
    with pytest.raises(ValueError):
        FeedbackController(clock=FakeClock(), rng=SeededRng(1), **kwargs)
