"""
Fireworks Events

Lifecycle events published by the simulation. Each SimulationContext owns
its own EventBus so renderers and loggers subscribe per show.
"""
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List


# === Event Dataclasses ===

@dataclass
class FireworkSpawnedEvent:
    """Fired when a burst is appended to the pool."""
    firework_id: int
    style: str
    particle_count: int
    pos: tuple
    trail_persistent: bool
    will_fizzle: bool
    is_sub_burst: bool = False


@dataclass
class FireworkRemovedEvent:
    """Fired after a burst leaves the pool and its resources were released."""
    firework_id: int
    reason: str  # "expired", "evicted" or "teardown"
    age: float


@dataclass
class FizzleEvent:
    """Fired when a particle reaches its apex and spawns a sub-burst."""
    parent_id: int
    particle_index: int
    child_id: int
    pos: tuple


# === EventBus ===

class EventBus:
    """Per-context dispatcher: handlers are called in subscription order."""

    def __init__(self):
        self._subscribers: Dict[type, List[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        self._subscribers[event_type].append(handler)

    def publish(self, event: Any) -> None:
        for handler in self._subscribers.get(type(event), ()):
            handler(event)
