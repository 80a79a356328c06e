"""Unit tests for per-worker random streams.

Tests cover:
- Seeding (determinism, validation, fresh entropy)
- Float range and rough uniformity
- Stream independence (drawing from one stream leaves others untouched)
"""

import numpy as np
import pytest
import taichi as ti


def _draw(stream_count, draws):
    """Draw `draws` floats from each of the first `stream_count` streams."""
    from eyetrace.core.rng import next_float

    out = ti.field(dtype=ti.f32, shape=(stream_count, draws))

    @ti.kernel
    def draw_kernel():
        # Outer loop is parallel; each iteration owns one stream
        for s in range(stream_count):
            for k in range(draws):
                out[s, k] = next_float(s)

    draw_kernel()
    return out.to_numpy()


class TestSeeding:
    """Tests for seed_streams."""

    def test_same_seed_same_sequence(self):
        """Test identical seeds reproduce identical draws."""
        from eyetrace.core.rng import seed_streams

        seed_streams(seed=123)
        first = _draw(4, 16)
        seed_streams(seed=123)
        second = _draw(4, 16)

        np.testing.assert_array_equal(first, second)

    def test_different_seeds_differ(self):
        """Test different seeds give different draws."""
        from eyetrace.core.rng import seed_streams

        seed_streams(seed=1)
        first = _draw(4, 16)
        seed_streams(seed=2)
        second = _draw(4, 16)

        assert not np.array_equal(first, second)

    def test_unseeded_streams_differ_between_calls(self):
        """Test seed=None draws fresh entropy."""
        from eyetrace.core.rng import get_stream_states, seed_streams

        seed_streams()
        first = get_stream_states()
        seed_streams()
        second = get_stream_states()

        assert not np.array_equal(first, second)

    def test_negative_seed_raises(self):
        """Test a negative seed is rejected."""
        from eyetrace.core.rng import seed_streams

        with pytest.raises(ValueError, match="non-negative"):
            seed_streams(seed=-1)

    def test_stream_count(self):
        """Test one stream exists per supported image row."""
        from eyetrace.core.renderer import MAX_IMAGE_HEIGHT
        from eyetrace.core.rng import MAX_STREAMS, get_stream_count, get_stream_states

        assert get_stream_count() == MAX_STREAMS
        assert MAX_STREAMS >= MAX_IMAGE_HEIGHT
        assert get_stream_states().shape == (MAX_STREAMS,)


class TestDraws:
    """Tests for next_float and next_u32."""

    def test_floats_in_unit_interval(self):
        """Test every draw lies in [0, 1)."""
        values = _draw(64, 256)

        assert values.min() >= 0.0
        assert values.max() < 1.0

    def test_floats_roughly_uniform(self):
        """Test the draws have the mean and spread of U(0, 1)."""
        values = _draw(256, 256).ravel()

        assert values.mean() == pytest.approx(0.5, abs=0.01)
        assert values.var() == pytest.approx(1.0 / 12.0, abs=0.005)
        # No decile is starved or flooded
        counts, _ = np.histogram(values, bins=10, range=(0.0, 1.0))
        assert counts.min() > 0.9 * len(values) / 10
        assert counts.max() < 1.1 * len(values) / 10

    def test_streams_are_not_copies(self):
        """Test neighbouring streams produce different sequences."""
        values = _draw(8, 32)

        for s in range(1, 8):
            assert not np.array_equal(values[0], values[s])

    def test_drawing_advances_only_own_stream(self):
        """Test a draw from stream 3 leaves every other stream state unchanged."""
        from eyetrace.core.rng import get_stream_states, next_u32

        sink = ti.field(dtype=ti.u32, shape=())

        @ti.kernel
        def draw_from_stream_3():
            sink[None] = next_u32(3)

        before = get_stream_states()
        draw_from_stream_3()
        after = get_stream_states()

        changed = np.nonzero(before != after)[0]
        assert list(changed) == [3]
