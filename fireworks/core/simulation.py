"""
Fireworks Simulation Context

Explicit state container owned by the frame driver. Holds the settings,
random generator, pool, event bus and the two systems that act on them.
"""
from typing import Callable, List, Optional

import numpy as np

from .config import SimulationSettings, SpawnConfig
from .entities import Firework
from .events import EventBus, FireworkRemovedEvent
from .integrator import Integrator
from .pool import FireworkPool
from .spawner import Spawner


class SimulationContext:
    """Simulation state for one show."""

    def __init__(
        self,
        settings: Optional[SimulationSettings] = None,
        on_dispose: Optional[Callable[[Firework], None]] = None,
    ):
        self.settings = settings or SimulationSettings()
        self.on_dispose = on_dispose
        self.events = EventBus()
        self.rng = np.random.default_rng(self.settings.seed)
        self.pool = FireworkPool(self.settings.max_active)
        self.spawner = Spawner(self)
        self.integrator = Integrator(self)

        self.frame = 0
        self.time = 0.0
        self._next_id = 1

    def next_id(self) -> int:
        firework_id = self._next_id
        self._next_id += 1
        return firework_id

    @property
    def particle_count(self) -> int:
        return self.pool.particle_count

    def spawn(self, world_position, config: Optional[SpawnConfig] = None) -> Optional[Firework]:
        """Spawn a burst at a world-space point. None positions are ignored."""
        return self.spawner.spawn(world_position, config)

    def advance(self, delta: float) -> None:
        """Step the whole pool by one frame."""
        self.integrator.advance(delta)
        self.frame += 1
        if delta > 0:
            self.time += delta

    def release(self, firework: Firework, reason: str) -> None:
        """Dispose a Firework that already left the pool and announce it."""
        if firework.dispose(self.on_dispose):
            self.events.publish(FireworkRemovedEvent(
                firework_id=firework.id,
                reason=reason,
                age=firework.age,
            ))

    def teardown(self) -> List[Firework]:
        """Drop every Firework, releasing renderer resources once each."""
        removed = self.pool.clear()
        for firework in removed:
            self.release(firework, "teardown")
        return removed

    def reset(self, seed: Optional[int] = None) -> None:
        """Tear down and start over with a fresh generator."""
        self.teardown()
        self.rng = np.random.default_rng(self.settings.seed if seed is None else seed)
        self.frame = 0
        self.time = 0.0
