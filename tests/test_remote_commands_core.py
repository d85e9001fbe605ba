from __future__ import annotations

import pytest

from noise_identification.noise_core import NoiseType
from noise_identification.remote_commands import command_help, parse_command


@pytest.mark.parametrize("command", ["C", " crystal ", "Crystal", "c", "CRYSTAL\t"])
def test_crystal_spellings(command: str) -> None:
    assert parse_command(command) is NoiseType.CRYSTAL


@pytest.mark.parametrize(
    ("short", "long", "expected"),
    [
        ("l", "liquid", NoiseType.LIQUID),
        ("m", "moisture", NoiseType.MOISTURE),
        ("p", "perlin", NoiseType.PERLIN),
        ("v", "voronoi", NoiseType.VORONOI),
        ("w", "white", NoiseType.WHITE),
    ],
)
def test_initial_and_full_name_map_to_same_button(short: str, long: str, expected: NoiseType) -> None:
    assert parse_command(short) is expected
    assert parse_command(long.upper()) is expected


@pytest.mark.parametrize("command", ["x", "", "   ", "press c", "crystals", "cr", "1"])
def test_unknown_commands_are_not_understood(command: str) -> None:
    assert parse_command(command) is None


def test_help_message_names_the_module_prefix() -> None:
    text = command_help("noise")
    assert "!noise crystal" in text
    assert "!noise c" in text
    assert "{0}" not in text
