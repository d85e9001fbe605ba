"""Procedural stand-ins for the noise texture assets.

Each asset id (``"perlin_3"`` etc.) renders a deterministic greyscale pygame
surface in the style of its category. Surfaces are built at a small base
resolution and cached; callers scale them to the display.
"""

from __future__ import annotations

import math
import random
import zlib
from collections.abc import Callable

import pygame

from .noise_core import NOISE_TEXTURES, NoiseType

BASE_SIZE = 48

Field = Callable[[float, float], float]


def _value_noise(rng: random.Random, cells: int) -> Field:
    grid = [[rng.random() for _ in range(cells + 1)] for _ in range(cells + 1)]

    def smooth(t: float) -> float:
        return t * t * (3.0 - 2.0 * t)

    def sample(u: float, v: float) -> float:
        x = u * cells
        y = v * cells
        ix = min(cells - 1, int(x))
        iy = min(cells - 1, int(y))
        fx = smooth(x - ix)
        fy = smooth(y - iy)
        top = grid[iy][ix] + (grid[iy][ix + 1] - grid[iy][ix]) * fx
        bottom = grid[iy + 1][ix] + (grid[iy + 1][ix + 1] - grid[iy + 1][ix]) * fx
        return top + (bottom - top) * fy

    return sample


def _fractal(rng: random.Random, *, base_cells: int, octaves: int) -> Field:
    layers = [_value_noise(rng, base_cells * (2**i)) for i in range(octaves)]

    def sample(u: float, v: float) -> float:
        total = 0.0
        weight = 0.0
        amp = 1.0
        for layer in layers:
            total += layer(u, v) * amp
            weight += amp
            amp *= 0.5
        return total / weight

    return sample


def _sites(rng: random.Random, count: int) -> list[tuple[float, float, float]]:
    return [(rng.random(), rng.random(), rng.random()) for _ in range(count)]


def _nearest(sites: list[tuple[float, float, float]], u: float, v: float) -> tuple[float, float]:
    best_d = 9.0
    best_shade = 0.0
    for sx, sy, shade in sites:
        d = math.hypot(u - sx, v - sy)
        if d < best_d:
            best_d = d
            best_shade = shade
    return best_d, best_shade


def _crystal(rng: random.Random) -> Field:
    sites = _sites(rng, rng.randint(10, 18))
    return lambda u, v: _nearest(sites, u, v)[1]


def _voronoi(rng: random.Random) -> Field:
    sites = _sites(rng, rng.randint(8, 14))
    spread = 1.0 / math.sqrt(len(sites))
    return lambda u, v: min(1.0, _nearest(sites, u, v)[0] / spread)


def _liquid(rng: random.Random) -> Field:
    warp = _fractal(rng, base_cells=3, octaves=2)
    freq = rng.uniform(8.0, 14.0)
    return lambda u, v: 0.5 + 0.5 * math.sin((u + v) * freq + warp(u, v) * 9.0)


def _moisture(rng: random.Random) -> Field:
    base = _fractal(rng, base_cells=4, octaves=3)

    def sample(u: float, v: float) -> float:
        x = base(u, v)
        # Steep contrast for blotchy wet/dry patches.
        return 1.0 / (1.0 + math.exp(-(x - 0.5) * 14.0))

    return sample


def _perlin(rng: random.Random) -> Field:
    return _fractal(rng, base_cells=3, octaves=4)


def _white(rng: random.Random) -> Field:
    return lambda u, v: rng.random()


_FIELDS: dict[NoiseType, Callable[[random.Random], Field]] = {
    NoiseType.CRYSTAL: _crystal,
    NoiseType.LIQUID: _liquid,
    NoiseType.MOISTURE: _moisture,
    NoiseType.PERLIN: _perlin,
    NoiseType.VORONOI: _voronoi,
    NoiseType.WHITE: _white,
}

_KIND_BY_TEXTURE = {texture_id: kind for kind, ids in NOISE_TEXTURES.items() for texture_id in ids}


class NoiseTextureCache:
    def __init__(self, size: int = BASE_SIZE) -> None:
        if size <= 0:
            raise ValueError("size must be > 0")
        self._size = int(size)
        self._cache: dict[str, pygame.Surface] = {}

    def get(self, texture_id: str) -> pygame.Surface:
        surface = self._cache.get(texture_id)
        if surface is None:
            surface = self._render(texture_id)
            self._cache[texture_id] = surface
        return surface

    def _render(self, texture_id: str) -> pygame.Surface:
        kind = _KIND_BY_TEXTURE.get(texture_id)
        if kind is None:
            raise KeyError(f"unknown texture id: {texture_id!r}")

        rng = random.Random(zlib.crc32(texture_id.encode("utf-8")))
        field = _FIELDS[kind](rng)

        n = self._size
        surface = pygame.Surface((n, n), 0, 32)
        for y in range(n):
            for x in range(n):
                shade = int(max(0.0, min(1.0, field(x / n, y / n))) * 255)
                surface.set_at((x, y), (shade, shade, shade))
        return surface
