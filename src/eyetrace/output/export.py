"""Image export for rendered framebuffers.

A framebuffer is a float array of shape (height, width, 3) holding linear
radiance, with row 0 the bottom scanline (the camera's v = 0). Both writers
quantize every channel the same way:

    value = floor(255.99 * sqrt(clip(c, 0, 1)))

The clip comes before the square root (gamma 2) because multi-bounce
estimates can exceed 1.

Supported formats:
    - PPM (plain-text P3)
    - PNG (8-bit via Pillow)

Example:
    >>> from eyetrace.output.export import save_ppm
    >>> from eyetrace.core.renderer import render_scene
    >>>
    >>> renderer = render_scene()
    >>> save_ppm(renderer.framebuffer, "spheres.ppm")
"""

from collections.abc import Iterator
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

PPM_MAGIC = "P3"
PPM_MAX_VALUE = 255

# Slightly below 256 so that an input of exactly 1.0 maps to 255
_SCALE = 255.99


def _check_framebuffer(framebuffer: npt.ArrayLike) -> npt.NDArray[np.float64]:
    image = np.asarray(framebuffer, dtype=np.float64)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(
            f"Framebuffer must have shape (height, width, 3), got {image.shape}"
        )
    return image


def to_rgb8(framebuffer: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Quantize a linear framebuffer to 8-bit gamma-corrected values.

    Args:
        framebuffer: Array of shape (height, width, 3).

    Returns:
        Array of the same shape with dtype uint8. Row order is unchanged.

    Raises:
        ValueError: If the array is not (height, width, 3).
    """
    image = _check_framebuffer(framebuffer)
    # NaN would survive clip; treat it as black
    image = np.nan_to_num(image, nan=0.0)
    values = np.floor(_SCALE * np.sqrt(np.clip(image, 0.0, 1.0)))
    return values.astype(np.uint8)


def ppm_lines(framebuffer: npt.ArrayLike) -> Iterator[str]:
    """Yield the lines of a plain-text PPM document.

    The header is ``P3``, ``<width> <height>``, ``255``, followed by one
    ``R G B`` line per pixel. Rows are emitted top scanline first (the
    framebuffer's rows reversed) so the image is upright; pixels within a row
    go left to right.

    Args:
        framebuffer: Array of shape (height, width, 3), row 0 at the bottom.

    Yields:
        Lines without trailing newlines.
    """
    rgb = to_rgb8(framebuffer)
    height, width = rgb.shape[:2]

    yield PPM_MAGIC
    yield f"{width} {height}"
    yield str(PPM_MAX_VALUE)

    for row in rgb[::-1]:
        for r, g, b in row:
            yield f"{r} {g} {b}"


def write_ppm(framebuffer: npt.ArrayLike, stream: TextIO) -> int:
    """Write a plain-text PPM document to a text stream.

    Returns:
        The number of pixel lines written.
    """
    lines = ppm_lines(framebuffer)
    for _ in range(3):
        stream.write(next(lines) + "\n")

    count = 0
    for line in lines:
        stream.write(line + "\n")
        count += 1
    return count


def format_ppm(framebuffer: npt.ArrayLike) -> str:
    """Format a framebuffer as a plain-text PPM document."""
    return "\n".join(ppm_lines(framebuffer)) + "\n"


def save_ppm(framebuffer: npt.ArrayLike, filepath: str) -> None:
    """Save a framebuffer as a plain-text PPM file.

    Args:
        framebuffer: Array of shape (height, width, 3), row 0 at the bottom.
        filepath: Output file path.
    """
    with open(filepath, "w", encoding="ascii") as f:
        write_ppm(framebuffer, f)


def save_png(framebuffer: npt.ArrayLike, filepath: str) -> None:
    """Save a framebuffer as an 8-bit PNG using Pillow.

    Uses the same quantization and vertical flip as the PPM writer.

    Args:
        framebuffer: Array of shape (height, width, 3), row 0 at the bottom.
        filepath: Output file path (should end in .png).
    """
    image_uint8 = np.ascontiguousarray(to_rgb8(framebuffer)[::-1])
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)

