"""
Fireworks Event Handlers

Subscribers for a context's EventBus: console/file logging and show
statistics. The simulation itself knows nothing about them.
"""
from collections import Counter
from typing import List, Optional

from .events import EventBus, FireworkSpawnedEvent, FireworkRemovedEvent, FizzleEvent


class LoggerHandler:
    """Simple handler that logs events to console."""

    def __init__(self, events: EventBus, verbose: bool = False, log_file: Optional[str] = None):
        self.verbose = verbose
        self.log_file = log_file
        self.logs: List[str] = []
        events.subscribe(FireworkRemovedEvent, self.on_removed)
        if verbose:
            events.subscribe(FireworkSpawnedEvent, self.on_spawned)
            events.subscribe(FizzleEvent, self.on_fizzle)

    def _log(self, line: str) -> None:
        self.logs.append(line)
        print(line)
        if self.log_file:
            with open(self.log_file, 'a') as f:
                f.write(line + '\n')

    def on_spawned(self, event: FireworkSpawnedEvent) -> None:
        kind = "sub-burst" if event.is_sub_burst else event.style
        x, y, z = event.pos
        extras = []
        if event.trail_persistent:
            extras.append("long trail")
        if event.will_fizzle:
            extras.append("fizzle")
        suffix = f" [{', '.join(extras)}]" if extras else ""
        self._log(f"[SPAWN] #{event.firework_id} {kind} x{event.particle_count} "
                  f"at ({x:.1f}, {y:.1f}, {z:.1f}){suffix}")

    def on_fizzle(self, event: FizzleEvent) -> None:
        self._log(f"[FIZZLE] #{event.parent_id} particle {event.particle_index} -> #{event.child_id}")

    def on_removed(self, event: FireworkRemovedEvent) -> None:
        if event.reason == "expired" and not self.verbose:
            return
        self._log(f"[REMOVED] #{event.firework_id} {event.reason} after {event.age:.2f}s")

    def get_recent_logs(self, count: int = 10) -> List[str]:
        """Get most recent log entries."""
        return self.logs[-count:]

    def save_logs(self, filename: str) -> None:
        """Save all logs to a file."""
        with open(filename, 'w') as f:
            for line in self.logs:
                f.write(line + '\n')


class ShowStats:
    """Counts spawns, fizzles and removals for a show summary."""

    def __init__(self, events: EventBus):
        self.spawned = 0
        self.sub_bursts = 0
        self.fizzles = 0
        self.particles_spawned = 0
        self.styles = Counter()
        self.removed = Counter()
        events.subscribe(FireworkSpawnedEvent, self.on_spawned)
        events.subscribe(FizzleEvent, self.on_fizzle)
        events.subscribe(FireworkRemovedEvent, self.on_removed)

    def on_spawned(self, event: FireworkSpawnedEvent) -> None:
        self.spawned += 1
        self.particles_spawned += event.particle_count
        if event.is_sub_burst:
            self.sub_bursts += 1
        else:
            self.styles[event.style] += 1

    def on_fizzle(self, event: FizzleEvent) -> None:
        self.fizzles += 1

    def on_removed(self, event: FireworkRemovedEvent) -> None:
        self.removed[event.reason] += 1

    def summary(self) -> str:
        styles = ", ".join(f"{name}={count}" for name, count in sorted(self.styles.items()))
        removed = ", ".join(f"{reason}={count}" for reason, count in sorted(self.removed.items()))
        return (f"{self.spawned} bursts ({self.sub_bursts} sub-bursts, {self.fizzles} fizzles), "
                f"{self.particles_spawned} particles; styles: {styles or '-'}; "
                f"removed: {removed or '-'}")
