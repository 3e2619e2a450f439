"""
Fireworks Configuration
Contains simulation constants, spawn configuration and settings loading.
"""
import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Tuple

# Paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# Burst styles
STYLE_BURST = "burst"   # Spherical
STYLE_RING = "ring"     # Planar circle
STYLE_SPRAY = "spray"   # Upward cone
STYLES = (STYLE_BURST, STYLE_RING, STYLE_SPRAY)

# Cumulative style thresholds: burst 40%, ring 30%, spray 30%
STYLE_BURST_CUTOFF = 0.4
STYLE_RING_CUTOFF = 0.7

# Pool / physics
MAX_ACTIVE = 120
GRAVITY = (0.0, -6.0, 0.0)
GLOBAL_DRAG = 0.985
LONG_TRAIL_CHANCE = 0.25

# Trails
LONG_TRAIL_SEGMENTS = 50
SHORT_TRAIL_SEGMENTS = 1

# Spawn defaults
COUNT_RANGE = (60, 300)
RADIUS_RANGE = (2.5, 20.0)
LIFE_RANGE = (1.5, 2.8)
SIZE_RANGE = (0.06, 0.14)
FIZZLE_CHANCE = 0.25
SPARK_PROBABILITY = 0.18
FLASH_SCALE_RANGE = (8.0, 12.0)

# (opacity, size scale) per trail kind
PERSISTENT_TRAIL_STYLE = (0.95, 0.65)
SHORT_TRAIL_STYLE = (0.55, 0.9)

# Particles
SPARK_SPEED_RANGE = (1.35, 1.9)
NORMAL_SPEED_RANGE = (0.6, 1.2)
DRAG_FACTOR_RANGE = (0.97, 0.995)
SPARK_JITTER = 1.5
NORMAL_JITTER = 0.6
SPARK_BRIGHTNESS = 1.3

# Colors
SATURATION_RANGE = (0.65, 0.9)
LIGHTNESS_RANGE = (0.5, 0.65)
TINT_HUE_SPREAD = 0.05
TINT_LIGHTNESS_SPREAD = 0.08
EMBER_COLOR = (1.0, 0.42, 0.12)  # Warm orange the particles cool toward
EMBER_RATE = 1.1

# Fizzle sub-bursts
FIZZLE_COUNT_RANGE = (10, 22)
FIZZLE_RADIUS_RANGE = (0.6, 1.4)
FIZZLE_LIFE_RANGE = (0.25, 0.55)
FIZZLE_SIZE_RANGE = (0.03, 0.06)

# Derived render parameters
HALO_SCALE = 4.0
HALO_OPACITY = 0.35
FLASH_DURATION = 0.18  # seconds

# Clamp floors for degenerate ranges
MIN_LIFE = 1e-3
MIN_SIZE = 1e-4


class ConfigError(ValueError):
    """Raised when a settings file or mapping is malformed."""


Range = Tuple[float, float]
Color = Tuple[float, float, float]


def _ordered(bounds, floor: float) -> Range:
    """Reorder swapped bounds and raise both to at least floor."""
    low, high = float(bounds[0]), float(bounds[1])
    if low > high:
        low, high = high, low
    return (max(floor, low), max(floor, high))


def _probability(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


@dataclass
class SpawnConfig:
    """Optional per-spawn overrides. None means "use the default"."""
    count_range: Optional[Range] = None
    radius_range: Optional[Range] = None
    life_range: Optional[Range] = None
    size_range: Optional[Range] = None
    base_color: Optional[Color] = None
    enable_fizzle: Optional[bool] = None
    fizzle_chance: Optional[float] = None
    spark_probability: Optional[float] = None
    trail_opacity: Optional[float] = None
    trail_size_scale: Optional[float] = None
    apply_cap: bool = True
    trail_persistent: Optional[bool] = None
    style: Optional[str] = None  # Force a style instead of drawing one

    def resolved(self, trail_persistent: bool) -> "ResolvedSpawnConfig":
        """Fill in defaults and clamp degenerate values.

        Swapped (min > max) ranges are reordered and non-positive bounds are
        raised to a small floor; probabilities are clipped to [0, 1]. Base
        color channels are clipped to [0, 1] and short colors padded with 0.
        """
        default_opacity, default_size_scale = (
            PERSISTENT_TRAIL_STYLE if trail_persistent else SHORT_TRAIL_STYLE
        )
        count_low, count_high = _ordered(self.count_range or COUNT_RANGE, 1.0)
        base_color = None
        if self.base_color is not None and len(self.base_color) > 0:
            # Missing channels read as 0
            channels = (list(self.base_color) + [0.0, 0.0, 0.0])[:3]
            base_color = tuple(min(1.0, max(0.0, float(c))) for c in channels)

        return ResolvedSpawnConfig(
            count_range=(int(count_low), int(count_high)),
            radius_range=_ordered(self.radius_range or RADIUS_RANGE, 0.0),
            life_range=_ordered(self.life_range or LIFE_RANGE, MIN_LIFE),
            size_range=_ordered(self.size_range or SIZE_RANGE, MIN_SIZE),
            base_color=base_color,
            enable_fizzle=True if self.enable_fizzle is None else bool(self.enable_fizzle),
            fizzle_chance=_probability(FIZZLE_CHANCE if self.fizzle_chance is None else self.fizzle_chance),
            spark_probability=_probability(
                SPARK_PROBABILITY if self.spark_probability is None else self.spark_probability
            ),
            trail_opacity=_probability(default_opacity if self.trail_opacity is None else self.trail_opacity),
            trail_size_scale=max(0.0, default_size_scale if self.trail_size_scale is None
                                 else float(self.trail_size_scale)),
            apply_cap=bool(self.apply_cap),
            trail_persistent=trail_persistent,
            style=self.style,
        )


@dataclass(frozen=True)
class ResolvedSpawnConfig:
    """A SpawnConfig with every field decided."""
    count_range: Tuple[int, int]
    radius_range: Range
    life_range: Range
    size_range: Range
    base_color: Optional[Color]
    enable_fizzle: bool
    fizzle_chance: float
    spark_probability: float
    trail_opacity: float
    trail_size_scale: float
    apply_cap: bool
    trail_persistent: bool
    style: Optional[str]


def fizzle_config(color: Color) -> SpawnConfig:
    """Scaled-down sub-burst config spawned when a particle fizzles at apex."""
    return SpawnConfig(
        count_range=FIZZLE_COUNT_RANGE,
        radius_range=FIZZLE_RADIUS_RANGE,
        life_range=FIZZLE_LIFE_RANGE,
        size_range=FIZZLE_SIZE_RANGE,
        base_color=tuple(color),
        enable_fizzle=False,
        apply_cap=False,
    )


@dataclass
class SimulationSettings:
    """Global tunables shared by every spawn and frame."""
    max_active: int = MAX_ACTIVE
    gravity: Tuple[float, float, float] = GRAVITY
    global_drag: float = GLOBAL_DRAG
    long_trail_chance: float = LONG_TRAIL_CHANCE
    jitter_scale: float = 1.0  # 0 disables scintillation noise
    seed: Optional[int] = None

    def __post_init__(self):
        if len(self.gravity) != 3:
            raise ConfigError(f"gravity needs 3 components, got {self.gravity!r}")
        self.gravity = tuple(float(g) for g in self.gravity)
        self.max_active = max(1, int(self.max_active))
        self.long_trail_chance = _probability(self.long_trail_chance)

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationSettings":
        """Build settings from a plain mapping (e.g. parsed JSON)."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return cls(**data)


def load_settings(settings_file: Path = DATA_DIR / "settings.json") -> SimulationSettings:
    """Load global tunables from a JSON file."""
    with open(settings_file, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{settings_file}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{settings_file}: expected a JSON object")
    return SimulationSettings.from_dict(data)
