"""Per-worker random number streams for Taichi kernels.

Each parallel worker owns one stream: a single 32-bit generator state kept in
a Taichi field. A worker passes its stream index to every function that needs
randomness (camera jitter, unit-sphere sampling, material scatter), so no two
workers ever touch the same state and no synchronization is needed.

The generator is a 32-bit linear congruential step followed by the PCG
RXS-M-XS output permutation. Floats are built from the top 24 bits of the
permuted word, giving values in [0, 1).

Streams are seeded on the host from ``numpy.random.SeedSequence``. Without an
explicit seed the sequence draws OS entropy, so two renders differ.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from eyetrace.core.rng import next_float, seed_streams
    >>> seed_streams(seed=7)
    >>> # Inside a kernel, worker j draws with next_float(j)
"""

import numpy as np
import taichi as ti

from eyetrace.config import MAX_DIMENSION

# One stream per image row (see core.renderer.MAX_IMAGE_HEIGHT)
MAX_STREAMS = MAX_DIMENSION

# LCG constants (Numerical Recipes increment, PCG multiplier)
_LCG_MULTIPLIER = 747796405
_LCG_INCREMENT = 1013904223
_PERMUTE_MULTIPLIER = 277803737

# 2^-24: converts a 24-bit integer to a float in [0, 1)
_INV_2_24 = 1.0 / 16777216.0

_rng_states = ti.field(dtype=ti.u32, shape=MAX_STREAMS)


def seed_streams(seed: int | None = None) -> None:
    """Seed every random stream.

    Args:
        seed: Entropy for ``numpy.random.SeedSequence``. None draws fresh
            OS entropy, so repeated renders produce different noise.

    Raises:
        ValueError: If seed is negative.
    """
    if seed is not None and seed < 0:
        raise ValueError(f"Seed must be non-negative, got {seed}")

    states = np.random.SeedSequence(seed).generate_state(MAX_STREAMS, dtype=np.uint32)
    _rng_states.from_numpy(states)


def get_stream_count() -> int:
    """Get the number of independent streams available."""
    return MAX_STREAMS


def get_stream_states() -> np.ndarray:
    """Get a copy of all stream states (for inspection and tests)."""
    return _rng_states.to_numpy()


@ti.func
def _permute(state: ti.u32) -> ti.u32:
    """PCG RXS-M-XS output permutation of a 32-bit state."""
    shift = (state >> ti.u32(28)) + ti.u32(4)
    word = ((state >> shift) ^ state) * ti.u32(_PERMUTE_MULTIPLIER)
    return (word >> ti.u32(22)) ^ word


@ti.func
def next_u32(stream: ti.i32) -> ti.u32:
    """Advance a stream and return 32 random bits.

    Args:
        stream: Index of the stream owned by the calling worker.

    Returns:
        A uniformly distributed 32-bit unsigned integer.
    """
    state = _rng_states[stream] * ti.u32(_LCG_MULTIPLIER) + ti.u32(_LCG_INCREMENT)
    _rng_states[stream] = state
    return _permute(state)


@ti.func
def next_float(stream: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from a stream.

    Args:
        stream: Index of the stream owned by the calling worker.

    Returns:
        A float in [0, 1).
    """
    bits = next_u32(stream) >> ti.u32(8)
    return ti.cast(bits, ti.f32) * _INV_2_24
