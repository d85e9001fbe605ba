from __future__ import annotations

from .noise_core import NoiseType

REMOTE_HELP_MESSAGE = (
    "Press a button with “!{0} crystal” or “!{0} c”. "
    "Valid commands are “!{0} crystal”, “!{0} liquid”, “!{0} moisture”, "
    "“!{0} perlin”, “!{0} voronoi”, “!{0} white”, as well as their initials."
)

# Full name or initial; the six initials are distinct.
_COMMAND_TOKENS: dict[str, NoiseType] = {
    token: kind for kind in NoiseType for token in (kind.name.lower(), kind.name.lower()[0])
}


def parse_command(command: str) -> NoiseType | None:
    """Map a remote-play command to the button it presses.

    Returns None when the command is not understood; reporting that upstream is
    the caller's job.
    """

    return _COMMAND_TOKENS.get(str(command).strip().lower())


def command_help(module_prefix: str) -> str:
    return REMOTE_HELP_MESSAGE.format(module_prefix)
