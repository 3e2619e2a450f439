"""Pytest fixtures for Fireworks tests."""
import pytest
import numpy as np
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture
def data_dir():
    """Return the data directory path."""
    return PROJECT_ROOT / "data"


@pytest.fixture
def rng():
    """A seeded generator for sampler tests."""
    return np.random.default_rng(1234)


@pytest.fixture
def settings():
    """Deterministic settings with scintillation noise switched off."""
    from fireworks.core.config import SimulationSettings
    return SimulationSettings(seed=7, jitter_scale=0.0)


@pytest.fixture
def disposed():
    """List that records every Firework released to the renderer."""
    return []


@pytest.fixture
def context(settings, disposed):
    """A SimulationContext whose dispose callback records into `disposed`."""
    from fireworks.core.simulation import SimulationContext
    return SimulationContext(settings, on_dispose=disposed.append)


@pytest.fixture
def show():
    """A headless Show with a fixed seed."""
    from fireworks.core.config import SimulationSettings
    from fireworks.main import Show
    return Show(SimulationSettings(seed=42))


@pytest.fixture
def record_events():
    """Return a function that starts collecting every lifecycle event on a bus."""
    from fireworks.core.events import FireworkSpawnedEvent, FireworkRemovedEvent, FizzleEvent

    def record(bus):
        seen = []
        for event_type in (FireworkSpawnedEvent, FireworkRemovedEvent, FizzleEvent):
            bus.subscribe(event_type, seen.append)
        return seen

    return record
