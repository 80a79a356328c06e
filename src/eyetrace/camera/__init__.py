"""Camera module for primary ray generation.

Components:
    pinhole: Immutable pinhole camera and ray generation

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image

Jittered rays draw their sub-pixel offsets from the calling worker's random
stream.
"""

from .pinhole import (
    Camera,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "Camera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
]
