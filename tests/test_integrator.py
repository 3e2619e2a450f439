"""Test per-frame integration."""
import numpy as np
import pytest

from fireworks.core.config import SpawnConfig, SimulationSettings, EMBER_COLOR
from fireworks.core.events import FizzleEvent, FireworkRemovedEvent, FireworkSpawnedEvent
from fireworks.core.simulation import SimulationContext


def quiet(**overrides) -> SpawnConfig:
    """Spawn config without fizzles so tests control the pool size."""
    overrides.setdefault("enable_fizzle", False)
    return SpawnConfig(**overrides)


class TestPhysics:
    """Tests for drag, gravity and Euler integration."""

    def test_ring_burst_single_frame(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(style="ring", count_range=(4, 4)))
        assert fw.particle_count == 4

        v0 = fw.velocity_view.astype(np.float64)
        directions = v0 / np.linalg.norm(v0, axis=1)[:, None]
        assert np.all(np.abs(directions[:, 2]) <= 0.15)

        drag = 0.985 * fw.drag_factor.astype(np.float64)
        expected_v = v0 * drag[:, None] + np.array([0.0, -6.0, 0.0]) * 0.1
        context.advance(0.1)

        np.testing.assert_allclose(fw.velocity_view, expected_v, rtol=1e-5, atol=1e-4)
        np.testing.assert_allclose(fw.position_view, expected_v * 0.1, rtol=1e-5, atol=1e-5)

    def test_gravity_pulls_down(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet())
        fw.velocities[:] = 0.0
        for _ in range(10):
            context.advance(0.05)
        assert np.all(fw.velocity_view[:, 1] < 0)
        assert np.all(fw.position_view[:, 1] < 0)
        np.testing.assert_allclose(fw.velocity_view[:, [0, 2]], 0.0)

    def test_jitter_adds_noise(self):
        context = SimulationContext(SimulationSettings(seed=5, gravity=(0.0, 0.0, 0.0)))
        fw = context.spawn((0.0, 0.0, 0.0), quiet())
        fw.velocities[:] = 0.0
        context.advance(0.1)
        speeds = np.abs(fw.velocity_view)
        assert speeds.max() > 0
        # Bounded by magnitude x delta
        assert np.all(speeds[fw.is_spark] <= 1.5 * 0.1 + 1e-6)
        assert np.all(speeds[~fw.is_spark] <= 0.6 * 0.1 + 1e-6)

    def test_zero_delta_freezes_motion(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet())
        before = fw.positions.copy()
        context.advance(0.0)
        np.testing.assert_array_equal(fw.positions, before)
        assert fw.age == 0.0

    def test_negative_delta_is_ignored(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet())
        context.advance(0.1)
        age = fw.age
        context.advance(-0.5)
        assert fw.age == age

    def test_age_non_decreasing(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(life_range=(5.0, 5.0)))
        ages = []
        for delta in (0.016, 0.0, 0.033, float("nan"), 0.02):
            context.advance(delta)
            ages.append(fw.age)
        assert ages == sorted(ages)
        assert fw.age == pytest.approx(0.069)

    def test_marks_dirty(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet())
        fw.needs_update = False
        context.advance(0.016)
        assert fw.needs_update


class TestExpiry:
    """Tests for lifecycle termination."""

    def test_removed_when_age_reaches_life(self, context, disposed, record_events):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(life_range=(1.0, 1.0)))
        for _ in range(3):
            context.advance(0.3)
        assert fw in list(context.pool)
        assert disposed == []

        events = record_events(context.events)
        context.advance(0.3)
        assert fw not in list(context.pool)
        assert disposed == [fw]
        assert [e.reason for e in events if isinstance(e, FireworkRemovedEvent)] == ["expired"]

        # No further updates once removed
        age, positions = fw.age, fw.positions.copy()
        context.advance(0.3)
        assert fw.age == age
        np.testing.assert_array_equal(fw.positions, positions)
        assert disposed == [fw]

    def test_simultaneous_expiry_keeps_survivor_order(self, context, disposed):
        lives = [0.5, 2.0, 0.5, 3.0, 0.5]
        fireworks = [context.spawn((float(i), 0.0, 0.0), quiet(life_range=(life, life)))
                     for i, life in enumerate(lives)]
        context.advance(0.6)
        assert list(context.pool) == [fireworks[1], fireworks[3]]
        assert disposed == [fireworks[0], fireworks[2], fireworks[4]]


class TestFizzle:
    """Tests for apex detection and sub-bursts."""

    def make_fizzler(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), SpawnConfig(count_range=(1, 1), fizzle_chance=1.0,
                                                         life_range=(5.0, 5.0)))
        fw.velocities[:] = (0.0, 0.1, 0.0)
        return fw

    def test_apex_spawns_one_sub_burst(self, context, record_events):
        fw = self.make_fizzler(context)
        events = record_events(context.events)
        context.advance(0.1)

        assert fw.velocity_view[0, 1] < 0
        assert fw.fizzle_triggered[0]
        assert len(context.pool) == 2
        child = context.pool[1]
        np.testing.assert_allclose(child.origin, fw.position_view[0], rtol=1e-6)
        assert not child.enable_fizzle
        assert 10 <= child.particle_count <= 22
        assert 0.25 <= child.life <= 0.55
        assert 0.03 <= child.base_size <= 0.06

        fizzles = [e for e in events if isinstance(e, FizzleEvent)]
        assert len(fizzles) == 1
        assert fizzles[0].parent_id == fw.id
        assert fizzles[0].child_id == child.id
        spawned = [e for e in events if isinstance(e, FireworkSpawnedEvent)]
        assert spawned[0].is_sub_burst

    def test_sub_burst_inherits_current_color(self, context):
        fw = self.make_fizzler(context)
        fw.velocities[:] = (0.0, 5.0, 0.0)
        context.advance(0.5)
        assert len(context.pool) == 1
        shown = tuple(float(c) for c in fw.color_view[0])
        base = tuple(float(c) for c in fw.base_color_view[0])
        assert shown != pytest.approx(base)

        fw.velocities[:] = (0.0, 0.1, 0.0)
        context.advance(0.05)
        child = context.pool[1]
        assert child.base_color == pytest.approx(shown)

    def test_fizzle_latches_once(self, context, record_events):
        fw = self.make_fizzler(context)
        context.advance(0.1)
        fw.velocities[:] = (0.0, 0.1, 0.0)
        events = record_events(context.events)
        context.advance(0.1)
        assert not [e for e in events if isinstance(e, FizzleEvent)]
        assert fw.fizzle_triggered[0]

    def test_sub_burst_not_visited_same_frame(self, context):
        self.make_fizzler(context)
        context.advance(0.1)
        child = context.pool[1]
        assert child.age == 0.0
        context.advance(0.1)
        assert child.age == pytest.approx(0.1)

    def test_sub_burst_ignores_capacity(self):
        disposed = []
        context = SimulationContext(SimulationSettings(max_active=1, seed=9, jitter_scale=0.0),
                                    on_dispose=disposed.append)
        fw = self.make_fizzler(context)
        context.advance(0.1)
        assert len(context.pool) == 2
        assert context.pool[0] is fw
        assert disposed == []

    def test_no_fizzle_without_eligibility(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), SpawnConfig(count_range=(1, 1), fizzle_chance=0.0))
        fw.velocities[:] = (0.0, 0.1, 0.0)
        context.advance(0.1)
        assert len(context.pool) == 1
        assert not fw.fizzle_triggered.any()

    def test_no_fizzle_when_burst_disabled(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), SpawnConfig(count_range=(1, 1), fizzle_chance=1.0))
        fw.enable_fizzle = False
        fw.velocities[:] = (0.0, 0.1, 0.0)
        context.advance(0.1)
        assert len(context.pool) == 1
        assert not fw.fizzle_triggered.any()

    def test_no_fizzle_while_still_rising(self, context):
        fw = self.make_fizzler(context)
        fw.velocities[:] = (0.0, 5.0, 0.0)
        context.advance(0.1)
        assert len(context.pool) == 1
        assert not fw.fizzle_triggered[0]


class TestTrails:
    """Tests for the trail ring buffer."""

    def test_short_trail_tracks_position(self, context):
        fw = context.spawn((1.0, 1.0, 0.0), quiet(trail_persistent=False))
        for _ in range(12):
            context.advance(0.05)
            np.testing.assert_array_equal(fw.trail_samples()[0], fw.position_view)
            np.testing.assert_array_equal(fw.trail_history, fw.positions)

    def test_long_trail_most_recent_first(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(trail_persistent=True, life_range=(10.0, 10.0)))
        history = []
        for _ in range(5):
            context.advance(0.05)
            history.append(fw.position_view.copy())
        samples = fw.trail_samples()
        for k in range(5):
            np.testing.assert_array_equal(samples[k], history[-1 - k])
        # Slots not yet overwritten still hold the spawn point
        np.testing.assert_array_equal(samples[5:], 0.0)

    def test_long_trail_drops_oldest(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(trail_persistent=True, life_range=(10.0, 10.0)))
        history = []
        for _ in range(60):
            context.advance(0.01)
            history.append(fw.position_view.copy())
        samples = fw.trail_samples()
        assert samples.shape[0] == 50
        np.testing.assert_array_equal(samples[0], history[-1])
        np.testing.assert_array_equal(samples[49], history[-50])

    def test_trail_colors_fade_with_sample_age(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(trail_persistent=True, life_range=(10.0, 10.0)))
        context.advance(0.1)
        trail_colors = fw.trail_color_samples()
        np.testing.assert_allclose(trail_colors[0], fw.color_view, rtol=1e-6)
        np.testing.assert_allclose(trail_colors[49], 0.0, atol=1e-7)
        np.testing.assert_allclose(trail_colors[10], fw.color_view * (1 - 10 / 49), rtol=1e-5)

    def test_single_segment_trail_color(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(trail_persistent=False))
        context.advance(0.1)
        np.testing.assert_allclose(fw.trail_colors, fw.colors, rtol=1e-6)

    def test_flat_buffers_pair_position_and_color(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(trail_persistent=True, life_range=(10.0, 10.0)))
        for _ in range(5):
            context.advance(0.05)
        n = fw.particle_count
        positions = fw.trail_history.reshape(50, n, 3)
        colors = fw.trail_colors.reshape(50, n, 3)

        newest = [k for k in range(50) if np.array_equal(positions[k], fw.position_view)]
        assert len(newest) == 1
        np.testing.assert_allclose(colors[newest[0]], fw.color_view, rtol=1e-6)
        assert int(np.argmax(colors.sum(axis=(1, 2)))) == newest[0]


class TestColorAndRender:
    """Tests for the fade curves."""

    def test_color_cools_toward_ember(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(life_range=(2.0, 2.0)))
        base = fw.base_color_view.astype(np.float64)
        context.advance(0.5)
        progress = 0.25
        mix = progress * 1.1
        expected = (base + (np.array(EMBER_COLOR) - base) * mix) * (1 - progress)
        np.testing.assert_allclose(fw.color_view, expected, rtol=1e-5, atol=1e-6)

    def test_color_fades_out(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(life_range=(1.0, 1.0)))
        context.advance(0.99)
        assert fw.colors.max() < 0.02

    def test_render_params(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(life_range=(2.0, 2.0), trail_persistent=False))
        context.advance(1.0)
        render = fw.render
        assert render.opacity == pytest.approx(0.5)
        assert render.point_size == pytest.approx(fw.base_size * 0.75)
        assert render.trail_opacity == pytest.approx(fw.trail_opacity * 0.25)
        assert render.halo_opacity == pytest.approx(0.35 * 0.5)
        assert render.flash_fade == 0.0

    def test_persistent_trail_opacity_holds(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet(life_range=(2.0, 2.0), trail_persistent=True))
        context.advance(1.5)
        assert fw.render.trail_opacity == pytest.approx(fw.trail_opacity)

    def test_flash_fades_quickly(self, context):
        fw = context.spawn((0.0, 0.0, 0.0), quiet())
        context.advance(0.09)
        assert fw.render.flash_fade == pytest.approx(0.5)
        assert fw.render.flash_size > fw.base_size * fw.flash_scale
