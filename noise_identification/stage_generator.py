from __future__ import annotations

from .noise_core import NOISE_TYPE_COUNT, NoiseType, SeededRng, StageAssignment


class StageGenerator:
    """Draws the three stage categories for one module.

    Consecutive stages never repeat; stage three may match stage one.
    """

    def __init__(self, rng: SeededRng):
        self._rng = rng

    def generate(self) -> StageAssignment:
        stage1 = self._rng.noise_type()
        stage2 = self._avoid_repeat(self._rng.noise_type(), previous=stage1)
        stage3 = self._avoid_repeat(self._rng.noise_type(), previous=stage2)
        return StageAssignment(stage1=stage1, stage2=stage2, stage3=stage3)

    def _avoid_repeat(self, drawn: NoiseType, *, previous: NoiseType) -> NoiseType:
        if drawn != previous:
            return drawn
        # One-shot shift by 1..5: never lands back on `drawn`, so no re-check.
        offset = self._rng.randint(1, NOISE_TYPE_COUNT - 1)
        return NoiseType((int(drawn) + offset) % NOISE_TYPE_COUNT)
