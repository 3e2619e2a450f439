"""
Fireworks Parameter Sampler

Stateless helpers that turn an explicit random generator into burst
parameters:
- Weighted style selection (burst / ring / spray)
- Unit launch directions per style
- Base colors and per-particle tints in HSL space
"""
import colorsys
import math
from typing import Tuple

import numpy as np

from .config import (
    STYLE_BURST,
    STYLE_RING,
    STYLE_SPRAY,
    STYLE_BURST_CUTOFF,
    STYLE_RING_CUTOFF,
    SATURATION_RANGE,
    LIGHTNESS_RANGE,
    TINT_HUE_SPREAD,
    TINT_LIGHTNESS_SPREAD,
)

RING_Z_JITTER = 0.15
SPRAY_Z_SPREAD = 0.35
SPRAY_LIFT = 0.8


def random_in_range(rng: np.random.Generator, low: float, high: float) -> float:
    """Uniform float in [low, high)."""
    return float(rng.random() * (high - low) + low)


def pick_style(rng: np.random.Generator) -> str:
    """Weighted style draw: burst 40%, ring 30%, spray 30%."""
    r = rng.random()
    if r < STYLE_BURST_CUTOFF:
        return STYLE_BURST
    if r < STYLE_RING_CUTOFF:
        return STYLE_RING
    return STYLE_SPRAY


def _normalize(vectors: np.ndarray) -> np.ndarray:
    lengths = np.linalg.norm(vectors, axis=1)
    degenerate = lengths < 1e-9
    if degenerate.any():
        vectors[degenerate] = (0.0, 1.0, 0.0)
        lengths[degenerate] = 1.0
    return vectors / lengths[:, None]


def sample_directions(style: str, count: int, rng: np.random.Generator) -> np.ndarray:
    """Return a (count, 3) array of unit launch directions for a style."""
    directions = np.empty((count, 3), dtype=np.float64)
    if style == STYLE_RING:
        theta = rng.random(count) * 2 * math.pi
        directions[:, 0] = np.cos(theta)
        directions[:, 1] = np.sin(theta)
        directions[:, 2] = rng.uniform(-RING_Z_JITTER, RING_Z_JITTER, count)
    elif style == STYLE_SPRAY:
        # sqrt radius keeps the disk uniformly covered
        theta = rng.random(count) * 2 * math.pi
        r = np.sqrt(rng.random(count))
        directions[:, 0] = np.cos(theta) * r
        directions[:, 1] = np.sin(theta) * r + SPRAY_LIFT
        directions[:, 2] = rng.random(count) * SPRAY_Z_SPREAD
    elif style == STYLE_BURST:
        directions[:] = rng.random((count, 3)) * 2 - 1
    else:
        raise ValueError(f"Unknown firework style: {style!r}")
    return _normalize(directions)


def make_direction(style: str, rng: np.random.Generator) -> np.ndarray:
    """Single unit direction for a style."""
    return sample_directions(style, 1, rng)[0]


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[float, float, float]:
    return colorsys.hls_to_rgb(h % 1.0, l, s)


def rgb_to_hsl(color) -> Tuple[float, float, float]:
    h, l, s = colorsys.rgb_to_hls(*(float(c) for c in color[:3]))
    return h, s, l


def random_color(rng: np.random.Generator) -> Tuple[float, float, float]:
    """Random saturated burst color."""
    hue = rng.random()
    saturation = random_in_range(rng, *SATURATION_RANGE)
    lightness = random_in_range(rng, *LIGHTNESS_RANGE)
    return hsl_to_rgb(hue, saturation, lightness)


def tint_color(base, rng: np.random.Generator) -> Tuple[float, float, float]:
    """Perturb hue and lightness of a base color for one particle."""
    h, s, l = rgb_to_hsl(base)
    h += random_in_range(rng, -TINT_HUE_SPREAD, TINT_HUE_SPREAD)
    l += random_in_range(rng, -TINT_LIGHTNESS_SPREAD, TINT_LIGHTNESS_SPREAD)
    return hsl_to_rgb(h, s, min(1.0, max(0.0, l)))
