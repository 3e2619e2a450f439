"""
Fireworks Spawner

Builds a Firework from a world position and an optional SpawnConfig,
appends it to the pool and enforces the capacity policy.
"""
import math
from typing import Optional

import numpy as np

from .config import (
    SpawnConfig,
    ResolvedSpawnConfig,
    FLASH_SCALE_RANGE,
    SPARK_SPEED_RANGE,
    NORMAL_SPEED_RANGE,
    DRAG_FACTOR_RANGE,
    SPARK_BRIGHTNESS,
)
from .entities import Firework
from .events import FireworkSpawnedEvent
from .sampler import (
    pick_style,
    random_color,
    random_in_range,
    sample_directions,
    tint_color,
)


def _valid_position(world_position) -> Optional[tuple]:
    """Return the position as a float triple, or None if unusable."""
    if world_position is None:
        return None
    try:
        x, y, z = (float(c) for c in world_position)
    except (TypeError, ValueError):
        return None
    if not all(math.isfinite(c) for c in (x, y, z)):
        return None
    return (x, y, z)


class Spawner:
    """Creates bursts inside a SimulationContext."""

    def __init__(self, context):
        self.context = context

    def spawn(
        self,
        world_position,
        config: Optional[SpawnConfig] = None,
        is_sub_burst: bool = False,
    ) -> Optional[Firework]:
        """Spawn a burst at world_position.

        Returns the new Firework, or None when no valid position was given
        (e.g. the pointer ray missed the reference plane).
        """
        origin = _valid_position(world_position)
        if origin is None:
            return None

        config = config or SpawnConfig()
        rng = self.context.rng
        settings = self.context.settings

        if config.trail_persistent is not None:
            trail_persistent = bool(config.trail_persistent)
        else:
            trail_persistent = bool(rng.random() < settings.long_trail_chance)
        resolved = config.resolved(trail_persistent)

        # Burst-level draws, once per spawn
        style = resolved.style or pick_style(rng)
        count_low, count_high = resolved.count_range
        particle_count = int(math.floor(random_in_range(rng, count_low, count_high)))
        particle_count = min(count_high, max(count_low, particle_count))
        radius = random_in_range(rng, *resolved.radius_range)
        life = random_in_range(rng, *resolved.life_range)
        base_size = random_in_range(rng, *resolved.size_range)
        flash_scale = random_in_range(rng, *FLASH_SCALE_RANGE)
        base_color = resolved.base_color or random_color(rng)
        will_fizzle = resolved.enable_fizzle and rng.random() < resolved.fizzle_chance

        firework = Firework(
            firework_id=self.context.next_id(),
            particle_count=particle_count,
            origin=origin,
            life=life,
            base_size=base_size,
            base_color=base_color,
            style=style,
            trail_persistent=trail_persistent,
            trail_opacity=resolved.trail_opacity,
            trail_size_scale=resolved.trail_size_scale,
            flash_scale=flash_scale,
            enable_fizzle=resolved.enable_fizzle,
        )
        self._init_particles(firework, radius, resolved, rng)
        firework.fizzle_eligible[:] = will_fizzle

        pool = self.context.pool
        pool.append(firework)
        self.context.events.publish(FireworkSpawnedEvent(
            firework_id=firework.id,
            style=style,
            particle_count=particle_count,
            pos=origin,
            trail_persistent=trail_persistent,
            will_fizzle=will_fizzle,
            is_sub_burst=is_sub_burst,
        ))

        # Leftover sub-bursts can put the pool several entries over the cap
        while resolved.apply_cap and pool.over_capacity:
            self.context.release(pool.evict_oldest(), "evicted")

        return firework

    def _init_particles(
        self,
        firework: Firework,
        radius: float,
        config: ResolvedSpawnConfig,
        rng: np.random.Generator,
    ) -> None:
        """Write velocities, colors and drag factors for every particle."""
        n = firework.particle_count
        directions = sample_directions(firework.style, n, rng)

        is_spark = rng.random(n) < config.spark_probability
        speed = np.where(
            is_spark,
            rng.uniform(*SPARK_SPEED_RANGE, n),
            rng.uniform(*NORMAL_SPEED_RANGE, n),
        ) * radius
        firework.velocity_view[:] = directions * speed[:, None]
        firework.is_spark[:] = is_spark

        colors = np.array([tint_color(firework.base_color, rng) for _ in range(n)])
        colors[is_spark] = np.minimum(1.0, colors[is_spark] * SPARK_BRIGHTNESS)
        firework.base_color_view[:] = colors
        firework.colors[:] = firework.base_colors
        firework.update_trail_colors()

        firework.drag_factor[:] = rng.uniform(*DRAG_FACTOR_RANGE, n)
