from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum, IntEnum


class NoiseType(IntEnum):
    """The six noise categories, in button/texture-table order."""

    CRYSTAL = 0
    LIQUID = 1
    MOISTURE = 2
    PERLIN = 3
    VORONOI = 4
    WHITE = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()


NOISE_TYPE_COUNT = len(NoiseType)
TEXTURE_VARIANTS_PER_TYPE = 5

# Opaque asset ids; the UI shell turns each into a procedural surface.
NOISE_TEXTURES: dict[NoiseType, tuple[str, ...]] = {
    kind: tuple(f"{kind.name.lower()}_{variant}" for variant in range(TEXTURE_VARIANTS_PER_TYPE))
    for kind in NoiseType
}


class ModuleStage(str, Enum):
    STAGE_1 = "stage_1"
    STAGE_2 = "stage_2"
    STAGE_3 = "stage_3"
    SOLVED = "solved"


class PressOutcome(str, Enum):
    IGNORED = "ignored"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True, slots=True)
class StageAssignment:
    stage1: NoiseType
    stage2: NoiseType
    stage3: NoiseType

    def as_tuple(self) -> tuple[NoiseType, NoiseType, NoiseType]:
        return (self.stage1, self.stage2, self.stage3)

    def for_stage(self, stage_number: int) -> NoiseType:
        """Category for stage 1..3."""

        if not (1 <= stage_number <= 3):
            raise ValueError("stage_number must be in [1, 3]")
        return self.as_tuple()[stage_number - 1]


@dataclass(frozen=True, slots=True)
class DisplayPose:
    scale: tuple[float, float, float]
    position: tuple[float, float, float]


# Where the noise plane hides between stages and after the solve.
COLLAPSED_POSE = DisplayPose(scale=(0.001, 1.0, 0.001), position=(0.0, 0.45, 0.0))
RESTING_POSE = DisplayPose(scale=(1.0, 1.0, 1.0), position=(0.0, 0.5, 0.0))


@dataclass(frozen=True, slots=True)
class NoiseIdentificationSnapshot:
    """View model for the UI (pure data)."""

    module_id: int
    stage: ModuleStage
    stage_number: int
    solved: bool
    strikes: int
    texture_id: str | None
    display_pose: DisplayPose
    leds_on: tuple[bool, bool, bool]


class SeededRng:
    """Seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def noise_type(self) -> NoiseType:
        return NoiseType(self._rng.randrange(NOISE_TYPE_COUNT))


def lerp(a: float, b: float, t: float) -> float:
    """Clamped linear interpolation."""

    return a + (b - a) * clamp01(t)


def lerp_pose(a: DisplayPose, b: DisplayPose, t: float) -> DisplayPose:
    return DisplayPose(
        scale=tuple(lerp(x, y, t) for x, y in zip(a.scale, b.scale)),  # type: ignore[arg-type]
        position=tuple(lerp(x, y, t) for x, y in zip(a.position, b.position)),  # type: ignore[arg-type]
    )


def clamp01(x: float) -> float:
    return 0.0 if x <= 0.0 else 1.0 if x >= 1.0 else float(x)
