"""
Fireworks Entities

A Firework is one burst: a group of particles stored in flat float32
buffers (x, y, z / r, g, b interleaved per particle) plus the scalar
state that drives its fade curves.
"""
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .config import LONG_TRAIL_SEGMENTS, SHORT_TRAIL_SEGMENTS


@dataclass
class RenderParams:
    """Per-frame scalars a renderer reads next to the buffers."""
    opacity: float = 1.0
    point_size: float = 0.0
    halo_size: float = 0.0
    halo_opacity: float = 0.0
    trail_opacity: float = 0.0
    trail_size: float = 0.0
    flash_fade: float = 1.0
    flash_size: float = 0.0


class Firework:
    """One particle burst owned by the pool while active."""

    def __init__(
        self,
        firework_id: int,
        particle_count: int,
        origin: tuple,
        life: float,
        base_size: float,
        base_color: tuple,
        style: str,
        trail_persistent: bool = False,
        trail_opacity: float = 1.0,
        trail_size_scale: float = 1.0,
        flash_scale: float = 1.0,
        enable_fizzle: bool = False,
    ):
        if particle_count <= 0:
            raise ValueError(f"particle_count must be positive, got {particle_count}")

        self.id = firework_id
        self.particle_count = particle_count
        self.origin = tuple(float(c) for c in origin)
        self.style = style
        self.age = 0.0
        self.life = life
        self.base_size = base_size
        self.base_color = tuple(base_color)
        self.flash_scale = flash_scale
        self.trail_opacity = trail_opacity
        self.trail_size_scale = trail_size_scale
        self.enable_fizzle = enable_fizzle

        n = particle_count
        self.positions = np.tile(np.asarray(self.origin, dtype=np.float32), n)
        self.velocities = np.zeros(n * 3, dtype=np.float32)
        self.base_colors = np.zeros(n * 3, dtype=np.float32)
        self.colors = np.zeros(n * 3, dtype=np.float32)
        self.drag_factor = np.ones(n, dtype=np.float32)
        self.is_spark = np.zeros(n, dtype=bool)
        self.fizzle_eligible = np.zeros(n, dtype=bool)
        self.fizzle_triggered = np.zeros(n, dtype=bool)

        # Ring buffer of trail slots; slot k holds all n positions
        self.trail_persistent = trail_persistent
        self.trail_segments = LONG_TRAIL_SEGMENTS if trail_persistent else SHORT_TRAIL_SEGMENTS
        self.trail_history = np.tile(self.positions, self.trail_segments)
        self.trail_colors = np.zeros(n * 3 * self.trail_segments, dtype=np.float32)
        self._trail_head = 0

        self.render = RenderParams(
            point_size=base_size,
            trail_opacity=trail_opacity,
            trail_size=base_size * trail_size_scale,
            flash_size=base_size * flash_scale,
        )
        self.needs_update = True
        self.disposed = False

    # --- (n, 3) views over the flat buffers ---

    @property
    def position_view(self) -> np.ndarray:
        return self.positions.reshape(-1, 3)

    @property
    def velocity_view(self) -> np.ndarray:
        return self.velocities.reshape(-1, 3)

    @property
    def base_color_view(self) -> np.ndarray:
        return self.base_colors.reshape(-1, 3)

    @property
    def color_view(self) -> np.ndarray:
        return self.colors.reshape(-1, 3)

    # --- Lifecycle ---

    @property
    def life_progress(self) -> float:
        """0.0 at spawn, 1.0 once age reaches life."""
        return min(1.0, self.age / self.life)

    @property
    def fade(self) -> float:
        return 1.0 - self.life_progress

    @property
    def expired(self) -> bool:
        return self.age >= self.life

    @property
    def pos(self) -> tuple:
        return self.origin

    def dispose(self, release: Optional[Callable[["Firework"], None]] = None) -> bool:
        """Release renderer resources once. Returns False if already disposed."""
        if self.disposed:
            return False
        self.disposed = True
        if release is not None:
            release(self)
        return True

    # --- Trail ring buffer ---

    def _slots(self) -> np.ndarray:
        return self.trail_history.reshape(self.trail_segments, self.particle_count, 3)

    def _color_slots(self) -> np.ndarray:
        return self.trail_colors.reshape(self.trail_segments, self.particle_count, 3)

    def _sample_order(self) -> np.ndarray:
        return (self._trail_head + np.arange(self.trail_segments)) % self.trail_segments

    def record_trail(self) -> None:
        """Push current positions as the newest trail sample, dropping the oldest."""
        self._trail_head = (self._trail_head - 1) % self.trail_segments
        self._slots()[self._trail_head] = self.position_view

    def trail_samples(self) -> np.ndarray:
        """Trail positions as (segments, n, 3), most recent sample first."""
        return self._slots()[self._sample_order()]

    def trail_color_samples(self) -> np.ndarray:
        """Trail colors as (segments, n, 3), same order as trail_samples()."""
        return self._color_slots()[self._sample_order()]

    def update_trail_colors(self) -> None:
        """Copy current colors into the trail, fading older samples linearly.

        Colors are written in ring order, so slot k of trail_colors always
        belongs to slot k of trail_history.
        """
        denominator = max(1, self.trail_segments - 1)
        sample_fade = 1.0 - np.arange(self.trail_segments, dtype=np.float32) / denominator
        slot_fade = np.roll(sample_fade, self._trail_head)
        self._color_slots()[:] = self.color_view[None, :, :] * slot_fade[:, None, None]
