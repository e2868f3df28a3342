"""Tests for random generators and unit-ball sampling."""

import pytest
import logging
import threading
import numpy as np

from scatterforge import sampling
from scatterforge.sampling import (
    make_rng, spawn_rngs, thread_rng, seed_thread_rng, random_in_unit_sphere,
    REJECTION_WARNING_THRESHOLD
)


@pytest.fixture(autouse=True)
def _reset_thread_seed():
    yield
    seed_thread_rng(None)


class TestRandomInUnitSphere:
    """Test rejection sampling of the unit ball."""

    def test_inside_ball(self):
        rng = make_rng(0)
        samples = np.array([random_in_unit_sphere(rng).to_array() for _ in range(10000)])
        assert np.all(np.einsum('ij,ij->i', samples, samples) < 1.0)

    def test_mean_near_origin(self):
        rng = make_rng(1)
        samples = np.array([random_in_unit_sphere(rng).to_array() for _ in range(10000)])
        np.testing.assert_allclose(samples.mean(axis=0), [0, 0, 0], atol=0.03)

    def test_fills_ball_not_surface(self):
        # Uniform in the ball: E[r^2] = 3/5. On the surface it would be 1.
        rng = make_rng(2)
        samples = np.array([random_in_unit_sphere(rng).to_array() for _ in range(10000)])
        mean_r2 = np.einsum('ij,ij->i', samples, samples).mean()
        assert mean_r2 == pytest.approx(0.6, abs=0.02)

    def test_reproducible_with_seed(self):
        a = [random_in_unit_sphere(make_rng(42)) for _ in range(3)]
        b = [random_in_unit_sphere(make_rng(42)) for _ in range(3)]
        assert a == b

    def test_successive_calls_differ(self):
        rng = make_rng(5)
        assert random_in_unit_sphere(rng) != random_in_unit_sphere(rng)

    def test_defaults_to_thread_rng(self):
        seed_thread_rng(11)
        first = random_in_unit_sphere()
        seed_thread_rng(11)
        assert random_in_unit_sphere() == first

    def test_no_warning_in_normal_use(self, caplog):
        rng = make_rng(3)
        with caplog.at_level(logging.WARNING, logger='scatterforge.sampling'):
            for _ in range(10000):
                random_in_unit_sphere(rng)
        assert not caplog.records

    def test_warns_on_excessive_rejections(self, caplog):
        class StuckGenerator:
            """Returns corner points until the threshold is passed."""

            def __init__(self):
                self.calls = 0

            def uniform(self, low, high, size):
                self.calls += 1
                if self.calls <= REJECTION_WARNING_THRESHOLD:
                    return np.array([0.9, 0.9, 0.9])
                return np.array([0.1, 0.1, 0.1])

        stuck = StuckGenerator()
        with caplog.at_level(logging.WARNING, logger='scatterforge.sampling'):
            p = random_in_unit_sphere(stuck)
        assert p.length_squared() < 1
        assert stuck.calls == REJECTION_WARNING_THRESHOLD + 1
        assert any('draws' in r.getMessage() for r in caplog.records)


class TestGenerators:
    """Test generator management."""

    def test_make_rng_seeded(self):
        assert make_rng(7).random() == make_rng(7).random()

    def test_spawn_count(self):
        assert len(spawn_rngs(1, 4)) == 4

    def test_spawn_rejects_zero(self):
        with pytest.raises(ValueError):
            spawn_rngs(1, 0)

    def test_spawned_streams_differ(self):
        a, b = spawn_rngs(123, 2)
        assert not np.array_equal(a.random(8), b.random(8))

    def test_spawn_reproducible(self):
        first = [g.random() for g in spawn_rngs(9, 3)]
        second = [g.random() for g in spawn_rngs(9, 3)]
        assert first == second

    def test_thread_rng_is_cached(self):
        assert thread_rng() is thread_rng()

    def test_thread_rng_per_thread(self):
        seen = {}

        def worker(key):
            seen[key] = thread_rng()

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        rngs = list(seen.values()) + [thread_rng()]
        assert len({id(g) for g in rngs}) == 4

    def test_seeded_threads_get_independent_streams(self):
        seed_thread_rng(5)
        draws = {}

        def worker(key):
            draws[key] = thread_rng().random(4)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert not np.array_equal(draws[0], draws[1])

    def test_seed_thread_rng_resets_current_thread(self):
        seed_thread_rng(21)
        a = thread_rng().random()
        seed_thread_rng(21)
        assert thread_rng().random() == a
