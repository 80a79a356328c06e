"""Reference scene: four spheres under a sky.

The scene is the classic "spheres on a ground plane" arrangement:

- a matte red sphere at the center,
- a huge matte yellow-green sphere acting as the ground,
- a fuzzy gold metal sphere on the right,
- a less fuzzy silver metal sphere on the left.

There are no light sources; all light comes from the sky gradient of the
integrator. The camera sits at the origin looking down -z with a 2:1 image
plane, matching the default 400 x 200 render.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from eyetrace.scene.reference import create_reference_scene
    >>> from eyetrace.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_reference_scene()
    >>> setup_camera(camera)
"""

from eyetrace.camera.pinhole import Camera
from eyetrace.scene.manager import SceneManager

# =============================================================================
# Scene Parameters
# =============================================================================

CENTER_SPHERE_ALBEDO = (0.8, 0.3, 0.3)
GROUND_ALBEDO = (0.8, 0.8, 0.0)
RIGHT_METAL_ALBEDO = (0.8, 0.6, 0.2)
RIGHT_METAL_FUZZ = 0.8
LEFT_METAL_ALBEDO = (0.8, 0.8, 0.8)
LEFT_METAL_FUZZ = 0.3

SPHERE_RADIUS = 0.5
GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0

REFERENCE_CAMERA = Camera(
    origin=(0.0, 0.0, 0.0),
    lower_left_corner=(-2.0, -1.0, -1.0),
    horizontal=(4.0, 0.0, 0.0),
    vertical=(0.0, 2.0, 0.0),
)


def create_reference_scene() -> tuple[SceneManager, Camera]:
    """Create the four-sphere reference scene.

    Clears any previously loaded scene and materials.

    Returns:
        Tuple of (SceneManager, Camera). The camera is not uploaded; call
        setup_camera(camera) before rendering.
    """
    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, 0.0, -1.0), SPHERE_RADIUS, CENTER_SPHERE_ALBEDO)
    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)
    scene.add_metal_sphere(
        (1.0, 0.0, -1.0), SPHERE_RADIUS, RIGHT_METAL_ALBEDO, fuzz=RIGHT_METAL_FUZZ
    )
    scene.add_metal_sphere(
        (-1.0, 0.0, -1.0), SPHERE_RADIUS, LEFT_METAL_ALBEDO, fuzz=LEFT_METAL_FUZZ
    )

    return scene, REFERENCE_CAMERA
