"""EyeTrace: a Taichi-based Monte Carlo path tracer for sphere scenes.

This package renders a static scene of spheres with diffuse (Lambertian) and
reflective (Metal) materials by path tracing on Taichi, with:
- Explicit per-worker random streams
- Row-partitioned parallel rendering
- Plain-text PPM and PNG output

Subpackages:
    core: Ray and vector utilities, random streams, integrator, renderer
    geometry: Sphere primitive and intersection
    materials: Lambertian and metal scattering
    scene: Sphere aggregate, scene manager, reference scene
    camera: Camera value and ray generation
    output: PPM and PNG emitters
"""

__version__ = "0.1.0"
