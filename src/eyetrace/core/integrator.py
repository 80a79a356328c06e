"""Path tracing integrator for Monte Carlo light transport.

This module estimates the radiance carried by a ray. A ray is intersected with
the scene; at each hit the surface material either absorbs it or scatters it
with an attenuation, and tracing continues from the hit point. A ray that
escapes picks up a vertical sky gradient from white at the horizon to sky blue
at the zenith.

The estimator is the recursion

    color(ray, depth) = attenuation * color(scattered, depth - 1)   on scatter
                      = 0                                             on absorb
                      = 0                                             on hit with depth <= 0
                      = sky(ray.direction)                            on miss

written as a loop that carries the product of attenuations (the throughput)
and the number of remaining bounces. There is no Russian roulette and no
light sampling; the depth cap is the only source of bias.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from eyetrace.core.integrator import trace_ray
    >>> from eyetrace.scene.reference import create_reference_scene
    >>>
    >>> scene, camera = create_reference_scene()
    >>> color = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=8)
"""

import taichi as ti
import taichi.math as tm

from eyetrace.core.ray import Ray, make_ray, normalize
from eyetrace.materials.lambertian import scatter_lambertian_by_id
from eyetrace.materials.metal import scatter_metal_by_id
from eyetrace.scene.intersection import intersect_scene
from eyetrace.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default bounce budget
MAX_DEPTH = 8

# t_min suppresses self-intersection at a scattered ray's origin
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints
WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Background
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Radiance of a ray that escapes the scene.

    Blends white and sky blue by the height of the unit direction:
    t = 0.5 * (y + 1), color = (1 - t) * white + t * sky_blue.

    Args:
        direction: The escaping ray's direction (any length).

    Returns:
        The sky color for that direction.
    """
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * WHITE + t * SKY_BLUE


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Dispatch to the scattering function of the hit material.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The outward unit normal at the hit point.
        stream: Random stream owned by the calling worker.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal, stream
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal, stream
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace.
        max_depth: Maximum number of scatter events. A hit with no bounces
            left contributes black; negative values behave like 0.
        stream: Random stream owned by the calling worker.

    Returns:
        The estimated radiance (RGB).
    """
    origin = ray.origin
    direction = ray.direction

    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    bounces = ti.max(max_depth, 0)
    remaining = bounces

    # Active flag for path continuation (one flag instead of break)
    active = 1

    # One intersection per bounce, plus the final one that may escape
    for _ in range(bounces + 1):
        if active == 1:
            rec = intersect_scene(make_ray(origin, direction), T_MIN, T_MAX)

            if rec.hit == 0:
                radiance = throughput * background_color(direction)
                active = 0
            elif remaining <= 0:
                # Bounce budget exhausted on a surface
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, direction, rec.normal, stream
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction
                    remaining -= 1

    return radiance


# =============================================================================
# Single-Ray Evaluation (testing and debugging)
# =============================================================================

_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, max_depth: ti.i32, stream: ti.i32):
    # Serial scope: the loops inside ray_color must not be parallelized
    for _ in range(1):
        _probe_color[None] = ray_color(make_ray(origin, direction), max_depth, stream)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
    stream: int = 0,
) -> tuple[float, float, float]:
    """Estimate the radiance along a single ray from Python.

    Uses whatever scene is currently loaded. For rendering whole images use
    eyetrace.core.renderer, which evaluates pixels in parallel.

    Args:
        origin: The ray origin (x, y, z).
        direction: The ray direction (x, y, z); need not be normalized.
        max_depth: Maximum number of scatter events.
        stream: Random stream to draw from.

    Returns:
        Tuple of (R, G, B) radiance values.
    """
    _trace_ray_kernel(vec3(*origin), vec3(*direction), max_depth, stream)
    color = _probe_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))
