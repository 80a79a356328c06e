"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure, vector helpers and unit-sphere sampling
    rng: Per-worker random streams
    integrator: Radiance estimator (ray color) and material dispatch
    renderer: Render target and the row-partitioned render kernel

All compute-intensive operations use Taichi kernels; each worker draws
randomness from its own stream, so kernels need no locks.
"""

from .ray import (
    Ray,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_sphere,
    ray_at,
    reflect,
    vec3,
)
from .rng import MAX_STREAMS, get_stream_count, next_float, next_u32, seed_streams

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from eyetrace.core.integrator or eyetrace.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "reflect",
    "near_zero",
    "random_in_unit_sphere",
    "MAX_STREAMS",
    "seed_streams",
    "get_stream_count",
    "next_float",
    "next_u32",
]
