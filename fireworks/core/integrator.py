"""
Fireworks Integrator

Advances every live burst by one frame:
- Drag, jitter, gravity and explicit Euler integration
- Trail ring buffer update
- Apex detection and fizzle sub-burst requests
- Ember color fade and derived render parameters
- Expiry with a single compaction pass after the frame
"""
from dataclasses import dataclass
from typing import List

import numpy as np

from .config import (
    EMBER_COLOR,
    EMBER_RATE,
    SPARK_JITTER,
    NORMAL_JITTER,
    HALO_SCALE,
    HALO_OPACITY,
    FLASH_DURATION,
    fizzle_config,
)
from .entities import Firework
from .events import FizzleEvent

_EMBER = np.asarray(EMBER_COLOR, dtype=np.float32)


@dataclass
class FizzleRequest:
    """A sub-burst queued during the pass, spawned once the pass is done."""
    parent_id: int
    particle_index: int
    pos: tuple
    color: tuple


class Integrator:
    """Steps the pool of a SimulationContext."""

    def __init__(self, context):
        self.context = context

    def advance(self, delta: float) -> None:
        """Advance every pre-existing Firework once by delta seconds."""
        if not delta > 0:  # Negative and NaN deltas freeze time
            delta = 0.0

        pool = self.context.pool
        pending: List[FizzleRequest] = []
        expired: List[int] = []

        for index, firework in enumerate(pool):
            self.step(firework, delta, pending)
            if firework.expired:
                expired.append(index)

        for firework in pool.remove_indices(expired):
            self.context.release(firework, "expired")

        # Sub-bursts join the pool only now, so they age from the next frame
        for request in pending:
            child = self.context.spawner.spawn(
                request.pos, fizzle_config(request.color), is_sub_burst=True
            )
            if child is None:  # Particle position went non-finite
                continue
            self.context.events.publish(FizzleEvent(
                parent_id=request.parent_id,
                particle_index=request.particle_index,
                child_id=child.id,
                pos=request.pos,
            ))

    def step(self, firework: Firework, delta: float, pending: List[FizzleRequest]) -> None:
        """Integrate one Firework; apex hits are appended to pending."""
        settings = self.context.settings
        rng = self.context.rng

        firework.age += delta
        life_progress = firework.life_progress
        fade = 1.0 - life_progress

        velocities = firework.velocity_view
        positions = firework.position_view
        vy_before = velocities[:, 1].copy()

        velocities *= (settings.global_drag * firework.drag_factor)[:, None]

        if settings.jitter_scale > 0:
            magnitude = np.where(firework.is_spark, SPARK_JITTER, NORMAL_JITTER) * settings.jitter_scale
            noise = rng.random(velocities.shape) * 2 - 1
            velocities += noise * (magnitude * delta)[:, None]

        velocities += np.asarray(settings.gravity, dtype=np.float32) * delta
        positions += velocities * delta

        firework.record_trail()

        if firework.enable_fizzle:
            apex = (
                firework.fizzle_eligible
                & ~firework.fizzle_triggered
                & (vy_before > 0)
                & (velocities[:, 1] <= 0)
            )
            # color_view still holds the color shown this frame; rewritten below
            for p in np.flatnonzero(apex):
                pending.append(FizzleRequest(
                    parent_id=firework.id,
                    particle_index=int(p),
                    pos=tuple(float(c) for c in positions[p]),
                    color=tuple(float(c) for c in firework.color_view[p]),
                ))
            firework.fizzle_triggered |= apex

        # Cool toward ember, then fade out
        mix = min(1.0, life_progress * EMBER_RATE)
        base = firework.base_color_view
        firework.color_view[:] = (base + (_EMBER - base) * mix) * fade
        firework.update_trail_colors()

        self._update_render_params(firework, fade, life_progress)
        firework.needs_update = True

    def _update_render_params(self, firework: Firework, fade: float, life_progress: float) -> None:
        render = firework.render
        size = firework.base_size

        render.opacity = max(0.0, fade)
        render.point_size = size * (0.5 + 0.5 * fade)
        render.halo_size = size * HALO_SCALE * (0.6 + 0.4 * fade)
        render.halo_opacity = HALO_OPACITY * fade

        if firework.trail_persistent:
            # Long trails fade per sample through trail_colors
            render.trail_opacity = firework.trail_opacity
        else:
            render.trail_opacity = firework.trail_opacity * (1.0 - life_progress) ** 2
        render.trail_size = size * firework.trail_size_scale * (0.5 + 0.5 * fade)

        render.flash_fade = max(0.0, 1.0 - firework.age / FLASH_DURATION)
        render.flash_size = size * firework.flash_scale * (1.0 + 0.5 * (1.0 - render.flash_fade))
