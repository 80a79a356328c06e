"""Render configuration and Taichi runtime setup.

RenderConfig collects everything a single render needs: image size, sampling
settings, the stream seed and the Taichi backend options. The defaults are
the reference render (400 x 200, 32 samples per pixel, depth 8).

Example:
    >>> from eyetrace.config import RenderConfig, init_taichi
    >>> config = RenderConfig(width=200, height=100, samples_per_pixel=8)
    >>> init_taichi(config)
"""

from dataclasses import asdict, dataclass, fields
from typing import Any

import taichi as ti

# Backend names accepted by RenderConfig.arch
_ARCHS = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}

_LOG_LEVELS = ("trace", "debug", "info", "warn", "error")

# Largest image width and height; also sizes the render target and the
# number of random streams
MAX_DIMENSION = 2048


@dataclass(frozen=True)
class RenderConfig:
    """Settings for one render.

    Attributes:
        width: Image width in pixels, in [1, 2048].
        height: Image height in pixels, in [1, 2048].
        samples_per_pixel: Jittered samples averaged per pixel (>= 1).
        max_depth: Maximum number of bounces per path (>= 0).
        seed: Stream seed, or None for fresh entropy on every render.
        arch: Taichi backend ("cpu", "gpu", "cuda", "vulkan" or "metal").
        num_threads: CPU worker threads, or None for Taichi's default.
        log_level: Taichi log level.
    """

    width: int = 400
    height: int = 200
    samples_per_pixel: int = 32
    max_depth: int = 8
    seed: int | None = None
    arch: str = "cpu"
    num_threads: int | None = None
    log_level: str = "warn"

    def __post_init__(self) -> None:
        if not 1 <= self.width <= MAX_DIMENSION:
            raise ValueError(f"width must be in [1, {MAX_DIMENSION}], got {self.width}")
        if not 1 <= self.height <= MAX_DIMENSION:
            raise ValueError(f"height must be in [1, {MAX_DIMENSION}], got {self.height}")
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")
        if self.arch not in _ARCHS:
            raise ValueError(
                f"Unknown arch {self.arch!r}; expected one of {sorted(_ARCHS)}"
            )
        if self.num_threads is not None and self.num_threads < 1:
            raise ValueError(f"num_threads must be at least 1, got {self.num_threads}")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(
                f"Unknown log_level {self.log_level!r}; expected one of {_LOG_LEVELS}"
            )

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Build a config from a dictionary, with defaults for missing keys.

        Raises:
            ValueError: If the dictionary has unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)


def taichi_init_kwargs(config: RenderConfig) -> dict[str, Any]:
    """Map a config to keyword arguments for ``ti.init``."""
    if config.arch not in _ARCHS:
        raise ValueError(f"Unknown arch {config.arch!r}")

    kwargs: dict[str, Any] = {
        "arch": _ARCHS[config.arch],
        "log_level": getattr(ti, config.log_level.upper()),
    }
    if config.num_threads is not None:
        kwargs["cpu_max_num_threads"] = config.num_threads
    return kwargs


def init_taichi(config: RenderConfig) -> None:
    """Initialize the Taichi runtime for a config.

    Must run before any field is touched. Calling it again resets the runtime
    and invalidates existing field contents.
    """
    ti.init(**taichi_init_kwargs(config))
