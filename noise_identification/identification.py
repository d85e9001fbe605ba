from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .clock import Clock
from .feedback import LED_COUNT, FeedbackController
from .host import ModuleHost
from .noise_core import (
    ModuleStage,
    NoiseIdentificationSnapshot,
    NoiseType,
    PressOutcome,
    SeededRng,
    StageAssignment,
)
from .stage_generator import StageGenerator

logger = logging.getLogger(__name__)

SOLVED_STAGE_NUMBER = 4

_STAGES_BY_NUMBER = {
    1: ModuleStage.STAGE_1,
    2: ModuleStage.STAGE_2,
    3: ModuleStage.STAGE_3,
}


class TransitionKind(str, Enum):
    ADVANCE = "advance"
    SOLVE = "solve"
    FAULT = "fault"


@dataclass(frozen=True, slots=True)
class StageTransition:
    """Effects of accepting a correct press that moved the module to ``stage_number``."""

    kind: TransitionKind
    stage_number: int
    expected: NoiseType | None
    led_indices: tuple[int, ...]


def resolve_transition(stage_number: int, assignment: StageAssignment) -> StageTransition:
    if stage_number in (2, 3):
        return StageTransition(
            kind=TransitionKind.ADVANCE,
            stage_number=stage_number,
            expected=assignment.for_stage(stage_number),
            led_indices=(stage_number - 2,),
        )
    if stage_number == SOLVED_STAGE_NUMBER:
        return StageTransition(
            kind=TransitionKind.SOLVE,
            stage_number=stage_number,
            expected=None,
            led_indices=(LED_COUNT - 1,),
        )
    # Unreachable through normal play. Fail closed: solve everything.
    return StageTransition(
        kind=TransitionKind.FAULT,
        stage_number=stage_number,
        expected=None,
        led_indices=tuple(range(LED_COUNT)),
    )


class NoiseIdentificationModule:
    """One Noise Identification module: three stages, six buttons.

    - Deterministic: stage draws and texture picks come from an RNG seeded at
      construction.
    - Strikes, passes, sounds and haptics go through the injected host.
    - Display/LED animations live in a FeedbackController driven by ``update()``.
    """

    _next_module_id = 1

    def __init__(
        self,
        *,
        host: ModuleHost,
        clock: Clock,
        seed: int,
        assignment: StageAssignment | None = None,
        module_id: int | None = None,
        interaction_strength: float = 0.7,
        feedback: FeedbackController | None = None,
    ) -> None:
        if not (0.0 <= interaction_strength <= 1.0):
            raise ValueError("interaction_strength must be in [0.0, 1.0]")

        if module_id is None:
            module_id = NoiseIdentificationModule._next_module_id
            NoiseIdentificationModule._next_module_id += 1

        self._module_id = int(module_id)
        self._host = host
        self._seed = int(seed)
        self._interaction_strength = float(interaction_strength)

        self._rng = SeededRng(self._seed)
        self._generator = StageGenerator(self._rng)
        self._feedback = feedback if feedback is not None else FeedbackController(clock=clock, rng=self._rng)

        self._assignment = assignment
        self._initialized = False
        self._stage_number = 1
        self._expected: NoiseType | None = None
        self._solved = False
        self._strikes = 0

    @property
    def module_id(self) -> int:
        return self._module_id

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def assignment(self) -> StageAssignment | None:
        return self._assignment

    @property
    def stage_number(self) -> int:
        return self._stage_number

    @property
    def stage(self) -> ModuleStage:
        if self._solved:
            return ModuleStage.SOLVED
        # A corrupt counter still reads as the last live stage; the next
        # correct press resolves it to a forced solve.
        return _STAGES_BY_NUMBER.get(self._stage_number, ModuleStage.STAGE_3)

    @property
    def expected(self) -> NoiseType | None:
        return self._expected

    @property
    def solved(self) -> bool:
        return self._solved

    @property
    def strikes(self) -> int:
        return self._strikes

    @property
    def feedback(self) -> FeedbackController:
        return self._feedback

    def on_initialize(self) -> None:
        if self._initialized:
            raise RuntimeError("module is already initialized")

        if self._assignment is None:
            self._assignment = self._generator.generate()
        self._initialized = True
        self._stage_number = 1
        self._expected = self._assignment.stage1
        self._feedback.apply_texture(self._expected)

        a = self._assignment
        logger.info(f"{self._log_prefix} Initialization finished.")
        logger.info(f"{self._log_prefix} Stage One (1) will be of type {a.stage1.label}.")
        logger.info(f"{self._log_prefix} Stage Two (2) will be of type {a.stage2.label}.")
        logger.info(f"{self._log_prefix} Stage Three (3) will be of type {a.stage3.label}.")

    def on_button_pressed(self, button: NoiseType) -> PressOutcome:
        if not self._initialized:
            raise RuntimeError("on_initialize() must run before buttons are pressed")
        if self._solved:
            return PressOutcome.IGNORED

        # Feedback for every live press, before judging it.
        self._host.pulse(self._interaction_strength)
        self._host.play_confirmation_sound(button)

        assert self._expected is not None
        assert self._assignment is not None

        if button != self._expected:
            logger.info(
                f"{self._log_prefix} !!STRIKE!! Expected Type {self._expected.label}. "
                f"You pressed Button Type {button.label}. That was incorrect."
            )
            self._strikes += 1
            self._host.signal_strike()
            return PressOutcome.INCORRECT

        logger.info(
            f"{self._log_prefix} Expected Type {self._expected.label}. "
            f"You pressed Button Type {button.label}. That was correct."
        )
        self._stage_number += 1
        self._apply(resolve_transition(self._stage_number, self._assignment))
        return PressOutcome.CORRECT

    def update(self) -> None:
        self._feedback.update()

    def snapshot(self) -> NoiseIdentificationSnapshot:
        return NoiseIdentificationSnapshot(
            module_id=self._module_id,
            stage=self.stage,
            stage_number=self._stage_number,
            solved=self._solved,
            strikes=self._strikes,
            texture_id=self._feedback.texture_id,
            display_pose=self._feedback.display_pose,
            leds_on=self._feedback.leds_on(),
        )

    @property
    def _log_prefix(self) -> str:
        return f"[Noise Identification #{self._module_id}]"

    def _apply(self, transition: StageTransition) -> None:
        for index in transition.led_indices:
            self._feedback.blink_led(index)

        if transition.kind is TransitionKind.ADVANCE:
            assert transition.expected is not None
            self._expected = transition.expected
            self._feedback.reveal_next_stage(transition.expected)
            return

        if transition.kind is TransitionKind.FAULT:
            logger.error(
                f"{self._log_prefix} Arrived to unknown Stage Number: {transition.stage_number}. "
                "Please report this along with the log. Solving module to prevent soft-locks."
            )

        # Hidden after the solve; the plane stays collapsed from here on.
        self._feedback.collapse_display()
        self._expected = None
        self._solved = True
        logger.info(f"{self._log_prefix} Module Solved.")
        self._host.signal_pass()


def build_noise_identification_module(
    *,
    host: ModuleHost,
    clock: Clock,
    seed: int,
    assignment: StageAssignment | None = None,
) -> NoiseIdentificationModule:
    return NoiseIdentificationModule(
        host=host,
        clock=clock,
        seed=seed,
        assignment=assignment,
        interaction_strength=0.7,
    )
