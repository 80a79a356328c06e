"""Output module for writing rendered images.

Components:
    export: Plain-text PPM and PNG writers
"""

from .export import format_ppm, ppm_lines, save_png, save_ppm, to_rgb8, write_ppm

__all__ = [
    "to_rgb8",
    "ppm_lines",
    "write_ppm",
    "format_ppm",
    "save_ppm",
    "save_png",
]
