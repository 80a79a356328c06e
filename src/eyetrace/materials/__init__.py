"""Materials module for surface scattering.

This module implements the two surface models of the renderer:

Components:
    lambertian: Ideal diffuse reflection (always scatters)
    metal: Mirror reflection with optional fuzz (may absorb)

Each material provides:
    - scatter_*(): Sample a scattered direction from the worker's stream
    - scatter_*_offset(): The same rule with an explicit random offset
    - A registry of material parameters stored in Taichi fields

The set of materials is closed; dispatch by material ID lives in
eyetrace.core.integrator and uses eyetrace.scene.manager.MaterialType.
"""

from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
    scatter_lambertian_offset,
    validate_albedo,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
    scatter_metal_offset,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "scatter_lambertian_offset",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    "validate_albedo",
    # Metal
    "scatter_metal",
    "scatter_metal_offset",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
]
