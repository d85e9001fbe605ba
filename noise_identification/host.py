from __future__ import annotations

from typing import Protocol

from .noise_core import NoiseType


class ModuleHost(Protocol):
    """What the enclosing game provides to the module.

    All calls are fire-and-forget; return values are ignored.
    """

    def signal_strike(self) -> None: ...

    def signal_pass(self) -> None: ...

    def play_confirmation_sound(self, button: NoiseType) -> None:
        """Play the button-press sound at the pressed button."""

    def pulse(self, strength: float) -> None:
        """Haptic/interaction punch, strength in [0.0, 1.0]."""
