#!/usr/bin/env python3
"""
Fireworks - Headless Show Driver
================================

Run with: python -m fireworks.main [--frames N] [--verbose]

Drives a SimulationContext the way a render loop would: one advance() per
frame, spawns requested at world-space points. No window is opened; the
buffers are left for whichever renderer consumes them.
"""
import argparse
import sys
import time
from pathlib import Path
from typing import Optional

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from fireworks.core.config import SimulationSettings, ConfigError, load_settings
from fireworks.core.entities import Firework
from fireworks.core.handlers import LoggerHandler, ShowStats
from fireworks.core.simulation import SimulationContext


class Show:
    """Frame driver around one SimulationContext."""

    FPS = 60
    SPAWN_INTERVAL = 20  # Frames between automatic bursts
    # World-space area bursts are launched in (reference plane z = 0)
    SPAWN_AREA = ((-6.0, 6.0), (-3.0, 4.0))

    def __init__(
        self,
        settings: Optional[SimulationSettings] = None,
        verbose: bool = False,
        log_file: Optional[str] = None,
    ):
        self.verbose = verbose
        self.log_file = log_file
        self.released = 0
        self.context = SimulationContext(settings, on_dispose=self._release)
        self._attach_handlers()

        # Timing
        self.running = True
        self.last_time = time.time()

    def _attach_handlers(self) -> None:
        self.stats = ShowStats(self.context.events)
        self.logger = LoggerHandler(self.context.events, verbose=self.verbose, log_file=self.log_file)

    def _release(self, firework: Firework) -> None:
        """Stand-in for the renderer freeing geometry and material."""
        self.released += 1

    def handle_click(self, world_position) -> Optional[Firework]:
        """Spawn at a pointer hit. A missed ray (None) spawns nothing."""
        return self.context.spawn(world_position)

    def tick(self, delta: float) -> None:
        """Single frame with a fixed delta."""
        self.context.advance(delta)

    def update(self) -> None:
        """Advance by the wall-clock time since the last update."""
        current_time = time.time()
        frame_time = current_time - self.last_time
        self.last_time = current_time
        self.tick(frame_time)

    def random_point(self) -> tuple:
        (x0, x1), (y0, y1) = self.SPAWN_AREA
        rng = self.context.rng
        return (float(rng.uniform(x0, x1)), float(rng.uniform(y0, y1)), 0.0)

    def run_headless(self, frames: int, fps: int = FPS) -> None:
        """Run a show of automatic bursts for a number of fixed frames."""
        delta = 1.0 / fps
        for frame in range(frames):
            if not self.running:
                break
            if frame % self.SPAWN_INTERVAL == 0:
                self.handle_click(self.random_point())
            self.tick(delta)

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset the show to an empty sky."""
        self.context.reset(seed)
        self.last_time = time.time()

    def cleanup(self) -> None:
        """Release every remaining burst."""
        self.context.teardown()
        self.running = False


def main():
    parser = argparse.ArgumentParser(description="Fireworks - headless simulation")
    parser.add_argument("--frames", type=int, default=600, help="Frames to simulate")
    parser.add_argument("--fps", type=int, default=Show.FPS, help="Fixed frame rate")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--settings", type=Path, default=None, help="Settings JSON file")
    parser.add_argument("--max-active", type=int, default=None, help="Pool capacity")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every event")
    parser.add_argument("--log-file", default=None, help="Append log lines to this file")
    args = parser.parse_args()

    try:
        settings = load_settings(args.settings) if args.settings else SimulationSettings()
    except (OSError, ConfigError) as e:
        print(f"Error: cannot load settings: {e}")
        sys.exit(1)
    if args.seed is not None:
        settings.seed = args.seed
    if args.max_active is not None:
        settings.max_active = max(1, args.max_active)

    show = Show(settings, verbose=args.verbose, log_file=args.log_file)
    started = time.time()
    show.run_headless(args.frames, fps=max(1, args.fps))
    elapsed = time.time() - started

    active = len(show.context.pool)
    particles = show.context.particle_count
    show.cleanup()

    print(f"Simulated {args.frames} frames in {elapsed:.2f}s "
          f"({active} bursts / {particles} particles active at end)")
    print(show.stats.summary())


if __name__ == "__main__":
    main()
