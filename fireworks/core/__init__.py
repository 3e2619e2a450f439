"""Fireworks Core - Simulation Logic"""
from .config import SpawnConfig, SimulationSettings, ConfigError, load_settings
from .entities import Firework, RenderParams
from .events import (
    EventBus,
    FireworkSpawnedEvent,
    FireworkRemovedEvent,
    FizzleEvent,
)
from .pool import FireworkPool
from .spawner import Spawner
from .integrator import Integrator
from .simulation import SimulationContext
