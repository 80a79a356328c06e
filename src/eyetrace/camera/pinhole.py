"""Pinhole camera model for primary ray generation.

The camera is an immutable value holding the origin and the three vectors that
span the image plane:

- lower_left_corner: the image-plane point at (u, v) = (0, 0)
- horizontal: the full width of the image plane (u from 0 to 1)
- vertical: the full height of the image plane (v from 0 to 1)

A ray through (u, v) starts at the origin and points at
lower_left_corner + u * horizontal + v * vertical. The direction is not
normalized. v = 0 is the bottom scanline and v = 1 the top.

There is no lens model: every ray starts exactly at the origin.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from eyetrace.camera.pinhole import Camera, setup_camera, get_ray
    >>>
    >>> camera = Camera.look_at(
    ...     lookfrom=(0.0, 0.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=60.0,
    ...     aspect_ratio=2.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from eyetrace.core.ray import Ray, make_ray, vec3
from eyetrace.core.rng import next_float

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class Camera:
    """An axis-defined pinhole camera.

    Attributes:
        origin: Camera position in world space (x, y, z).
        lower_left_corner: World-space point at the bottom-left of the image plane.
        horizontal: Vector spanning the image plane from left to right.
        vertical: Vector spanning the image plane from bottom to top.
    """

    origin: tuple[float, float, float]
    lower_left_corner: tuple[float, float, float]
    horizontal: tuple[float, float, float]
    vertical: tuple[float, float, float]

    @classmethod
    def look_at(
        cls,
        lookfrom: tuple[float, float, float],
        lookat: tuple[float, float, float],
        vup: tuple[float, float, float],
        vfov: float,
        aspect_ratio: float,
    ) -> "Camera":
        """Build a camera from look-at parameters.

        The image plane sits at unit distance in front of lookfrom.

        Args:
            lookfrom: Camera position in world space.
            lookat: Point the camera is looking at.
            vup: Up direction used to orient the image (typically (0, 1, 0)).
            vfov: Vertical field of view in degrees, in (0, 180).
            aspect_ratio: Width divided by height of the output image.

        Returns:
            The equivalent Camera value.

        Raises:
            ValueError: If the parameters do not define a camera frame.
        """
        if not 0.0 < vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {vfov}")
        if aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")

        theta = math.radians(vfov)
        viewport_height = 2.0 * math.tan(theta / 2.0)
        viewport_width = aspect_ratio * viewport_height

        origin = np.array(lookfrom, dtype=np.float64)
        w = origin - np.array(lookat, dtype=np.float64)
        w_len = np.linalg.norm(w)
        if w_len == 0.0:
            raise ValueError("lookfrom and lookat must differ")
        w = w / w_len

        u = np.cross(np.array(vup, dtype=np.float64), w)
        u_len = np.linalg.norm(u)
        if u_len == 0.0:
            raise ValueError("vup must not be parallel to the view direction")
        u = u / u_len
        v = np.cross(w, u)

        horizontal = viewport_width * u
        vertical = viewport_height * v
        lower_left = origin - w - horizontal / 2.0 - vertical / 2.0

        return cls(
            origin=_as_tuple(origin),
            lower_left_corner=_as_tuple(lower_left),
            horizontal=_as_tuple(horizontal),
            vertical=_as_tuple(vertical),
        )


def _as_tuple(v: np.ndarray) -> tuple[float, float, float]:
    return (float(v[0]), float(v[1]), float(v[2]))


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())
_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload a camera for ray generation.

    This must be called before rendering. It writes Taichi fields and should
    be called from Python (not from within a Taichi kernel).

    Args:
        camera: The camera to use for subsequent renders.
    """
    _camera_origin[None] = list(camera.origin)
    _lower_left_corner[None] = list(camera.lower_left_corner)
    _horizontal[None] = list(camera.horizontal)
    _vertical[None] = list(camera.vertical)


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the camera origin toward the image-plane point. The
        direction is not normalized.
    """
    origin = _camera_origin[None]
    direction = _lower_left_corner[None] + u * _horizontal[None] + v * _vertical[None] - origin
    return make_ray(origin, direction)


@ti.func
def get_ray_jittered(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    stream: ti.i32,
) -> Ray:
    """Generate a jittered ray for anti-aliasing.

    Adds a uniform sub-pixel offset in [0, 1) to each pixel coordinate before
    converting to normalized image coordinates.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        stream: Random stream owned by the calling worker.

    Returns:
        A Ray through a random point of the pixel.
    """
    u = (ti.cast(pixel_i, ti.f32) + next_float(stream)) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + next_float(stream)) / ti.cast(height, ti.f32)
    return get_ray(u, v)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the current camera state for debugging.

    Returns:
        Dictionary with origin, lower_left_corner, horizontal and vertical.
    """
    fields = {
        "origin": _camera_origin,
        "lower_left_corner": _lower_left_corner,
        "horizontal": _horizontal,
        "vertical": _vertical,
    }
    info = {}
    for name, f in fields.items():
        vec = f[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info

