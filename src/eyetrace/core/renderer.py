"""Row-partitioned parallel renderer.

The render target is a preallocated color buffer. One render is one Taichi
kernel whose outermost loop runs over image rows; Taichi executes the
iterations of that loop in parallel, so each row is an independent task:

- row j draws all of its randomness from stream j,
- row j writes only the pixels of row j,
- each pixel is written once, with the mean of its samples.

Since no two tasks share a stream or a buffer cell, the kernel needs no locks.
The host waits for the kernel with ``ti.sync()`` before reading the buffer, so
a caller never observes a partially rendered image.

A per-pixel write counter is kept alongside the colors so the coverage of a
render (every pixel written exactly once) can be checked.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from eyetrace.core.renderer import Renderer
    >>> from eyetrace.scene.reference import create_reference_scene
    >>> from eyetrace.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_reference_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(400, 200)
    >>> image = renderer.render(samples_per_pixel=32, max_depth=8)
    >>> renderer.save_ppm("spheres.ppm")
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from eyetrace.camera.pinhole import get_ray_jittered, setup_camera
from eyetrace.config import MAX_DIMENSION, RenderConfig
from eyetrace.core.integrator import ray_color
from eyetrace.core.rng import MAX_STREAMS, seed_streams
from eyetrace.output import export
from eyetrace.scene.reference import create_reference_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = MAX_DIMENSION
MAX_IMAGE_HEIGHT = MAX_STREAMS

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Mean color per pixel, indexed [i, j] with j = 0 the bottom row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Number of writes per pixel during the last render
_write_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer and the write counters to zero."""
    _color_buffer.fill(0.0)
    _write_count.fill(0)


def reset_render_target() -> None:
    """Forget the render target so the next render must set it up again."""
    _render_target_initialized[None] = 0
    _image_width[None] = 0
    _image_height[None] = 0
    clear_render_target()


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernel
# =============================================================================


@ti.kernel
def _render_rows(width: ti.i32, height: ti.i32, samples_per_pixel: ti.i32, max_depth: ti.i32):
    """Render every pixel once, one parallel task per row.

    Only the outermost loop is parallelized; the column and sample loops run
    serially inside the task that owns row j.
    """
    for j in range(height):
        for i in range(width):
            color = vec3(0.0, 0.0, 0.0)
            for _ in range(samples_per_pixel):
                ray = get_ray_jittered(i, j, width, height, j)
                color += ray_color(ray, max_depth, j)

            _color_buffer[i, j] = color / ti.cast(samples_per_pixel, ti.f32)
            _write_count[i, j] += 1


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(samples_per_pixel: int, max_depth: int, seed: int | None = None) -> None:
    """Render the loaded scene into the render target.

    The scene and camera must already be loaded. Returns once every row is
    complete.

    Args:
        samples_per_pixel: Jittered samples averaged per pixel (>= 1).
        max_depth: Maximum number of bounces per path (>= 0).
        seed: Stream seed. None draws fresh entropy, so renders differ.

    Raises:
        ValueError: If samples_per_pixel < 1 or max_depth < 0.
        RuntimeError: If the render target has not been set up.
    """
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel must be at least 1, got {samples_per_pixel}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    seed_streams(seed)
    clear_render_target()
    _render_rows(width, height, samples_per_pixel, max_depth)
    ti.sync()


def get_framebuffer() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    Values are the linear per-pixel means, not clamped.

    Returns:
        Array of shape (height, width, 3), dtype float32, whose row 0 is the
        bottom scanline.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    # Buffer is (width, height, 3); images are (height, width, 3)
    image = _color_buffer.to_numpy()[:width, :height, :]
    return np.ascontiguousarray(np.transpose(image, (1, 0, 2)), dtype=np.float32)


def get_write_counts() -> npt.NDArray[np.int32]:
    """Get how many times each pixel was written by the last render.

    Returns:
        Array of shape (height, width), dtype int32.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    counts = _write_count.to_numpy()[:width, :height]
    return np.ascontiguousarray(counts.T, dtype=np.int32)


# =============================================================================
# Renderer
# =============================================================================


class Renderer:
    """A renderer bound to one image size.

    The class wraps the module-level render target. The buffers themselves
    are global Taichi fields, so each render re-applies this renderer's
    dimensions before running and keeps a host copy of the result. Later
    renders by other renderers do not change what this one returns.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).

        Raises:
            ValueError: If a dimension is not positive or exceeds the maximum.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height
        self._framebuffer: npt.NDArray[np.float32] | None = None
        self._write_counts: npt.NDArray[np.int32] | None = None

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    def render(
        self,
        samples_per_pixel: int = 32,
        max_depth: int = 8,
        seed: int | None = None,
    ) -> npt.NDArray[np.float32]:
        """Render the loaded scene.

        Args:
            samples_per_pixel: Jittered samples averaged per pixel.
            max_depth: Maximum number of bounces per path.
            seed: Stream seed, or None for fresh entropy.

        Returns:
            The framebuffer, shape (height, width, 3), row 0 at the bottom.
        """
        setup_render_target(self._width, self._height)
        render_image(samples_per_pixel, max_depth, seed=seed)
        self._framebuffer = get_framebuffer()
        self._write_counts = get_write_counts()
        return self.framebuffer

    def _check_rendered(self) -> None:
        if self._framebuffer is None:
            raise RuntimeError("Nothing rendered yet. Call render() first.")

    @property
    def framebuffer(self) -> npt.NDArray[np.float32]:
        """The last rendered image (height, width, 3), row 0 at the bottom."""
        self._check_rendered()
        return self._framebuffer.copy()

    @property
    def write_counts(self) -> npt.NDArray[np.int32]:
        """Per-pixel write counts of the last render."""
        self._check_rendered()
        return self._write_counts.copy()

    def to_ppm(self) -> str:
        """Format the last render as a plain-text PPM document."""
        return export.format_ppm(self.framebuffer)

    def save_ppm(self, filepath: str) -> None:
        """Save the last render as a plain-text PPM file."""
        export.save_ppm(self.framebuffer, filepath)

    def save_png(self, filepath: str) -> None:
        """Save the last render as a PNG file."""
        export.save_png(self.framebuffer, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"rendered={self._framebuffer is not None})"
        )


def render_scene(config: RenderConfig | None = None) -> Renderer:
    """Build the reference scene and render it.

    Args:
        config: Render settings. Defaults to RenderConfig().

    Returns:
        The Renderer holding the finished image.
    """
    if config is None:
        config = RenderConfig()

    _, camera = create_reference_scene()
    setup_camera(camera)

    renderer = Renderer(config.width, config.height)
    renderer.render(
        samples_per_pixel=config.samples_per_pixel,
        max_depth=config.max_depth,
        seed=config.seed,
    )
    return renderer
