"""Device-side quadric storage and scene-level intersection testing.

The scene stores up to MAX_QUADRICS quadrics in Taichi fields (Structure of
Arrays layout). Each quadric carries its ten coefficients, a clipping box and
a material index. Scene queries loop over the active quadrics, call
hit_quadric on each, and keep the closest hit.

Python-scope writes only become visible to kernels launched afterwards, so a
batch of ray queries always sees one consistent snapshot of the scene as
long as the host does not write between the kernels of that batch.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.quadrics.scene.intersection import (
    ...     clear_quadrics, write_quadric, set_quadric_count, intersect_scene
    ... )
    >>> clear_quadrics()
    >>> write_quadric(0, (1, 1, 1, 0, 0, 0, 0, 0, 0, -1), (-1, -1, -1), (1, 1, 1), material_id=4)
    >>> set_quadric_count(1)
    >>> # Use intersect_scene within a Taichi kernel
"""

from collections.abc import Sequence

import taichi as ti

from src.quadrics.core.ray import vec3
from src.quadrics.geometry.quadric import HitRecord, QuadricSurface, hit_quadric, make_quadric_surface


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any quadric (1 if hit, 0 if miss).
        t: The parameter value of the closest intersection.
        point: The closest intersection point.
        normal: The unit normal at the hit, facing the incoming ray.
        front_face: Whether the ray hit the front face (1) or back face (0).
        material_id: Material index of the hit quadric, -1 on a miss.
        quadric_index: Scene slot of the hit quadric, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32
    quadric_index: ti.i32


# Fixed scene capacity, shared with the host-side scene container
MAX_QUADRICS = 8

NUM_COEFFICIENTS = 10

quadric_coefficients = ti.Vector.field(NUM_COEFFICIENTS, dtype=ti.f32, shape=MAX_QUADRICS)
quadric_bbox_min = ti.Vector.field(3, dtype=ti.f32, shape=MAX_QUADRICS)
quadric_bbox_max = ti.Vector.field(3, dtype=ti.f32, shape=MAX_QUADRICS)
quadric_use_bbox = ti.field(dtype=ti.i32, shape=MAX_QUADRICS)
quadric_material_ids = ti.field(dtype=ti.i32, shape=MAX_QUADRICS)
num_quadrics = ti.field(dtype=ti.i32, shape=())


def clear_quadrics() -> None:
    """Zero every quadric slot and reset the active count."""
    for i in range(MAX_QUADRICS):
        quadric_coefficients[i] = [0.0] * NUM_COEFFICIENTS
        quadric_bbox_min[i] = [0.0, 0.0, 0.0]
        quadric_bbox_max[i] = [0.0, 0.0, 0.0]
        quadric_use_bbox[i] = 1
        quadric_material_ids[i] = 0
    num_quadrics[None] = 0


def write_quadric(
    index: int,
    coefficients: Sequence[float],
    bbox_min: Sequence[float],
    bbox_max: Sequence[float],
    material_id: int = 0,
    use_bbox: bool = True,
) -> None:
    """Store one quadric in a scene slot.

    Does not change the active count; see set_quadric_count().

    Args:
        index: Slot in [0, MAX_QUADRICS).
        coefficients: The ten coefficients in A..J order.
        bbox_min: Minimum corner of the clipping box.
        bbox_max: Maximum corner of the clipping box.
        material_id: Material index used by the renderer for shading.
        use_bbox: Whether the quadric is clipped to the box.

    Raises:
        RuntimeError: If index is outside the scene capacity.
        ValueError: If coefficients does not hold ten values.
    """
    if not 0 <= index < MAX_QUADRICS:
        raise RuntimeError(f"Quadric slot {index} outside scene capacity ({MAX_QUADRICS})")
    if len(coefficients) != NUM_COEFFICIENTS:
        raise ValueError(f"Expected {NUM_COEFFICIENTS} coefficients, got {len(coefficients)}")

    quadric_coefficients[index] = [float(v) for v in coefficients]
    quadric_bbox_min[index] = [float(v) for v in bbox_min]
    quadric_bbox_max[index] = [float(v) for v in bbox_max]
    quadric_use_bbox[index] = 1 if use_bbox else 0
    quadric_material_ids[index] = int(material_id)


def set_quadric_count(count: int) -> None:
    """Set how many leading slots the scene queries consider.

    Raises:
        RuntimeError: If count is outside [0, MAX_QUADRICS].
    """
    if not 0 <= count <= MAX_QUADRICS:
        raise RuntimeError(f"Quadric count {count} outside scene capacity ({MAX_QUADRICS})")
    num_quadrics[None] = count


def get_quadric_count() -> int:
    """Get the number of active quadrics in the scene."""
    return int(num_quadrics[None])


@ti.func
def load_quadric(index: ti.i32) -> QuadricSurface:
    """Build the QuadricSurface stored in a scene slot."""
    k = quadric_coefficients[index]
    return make_quadric_surface(
        k[0],
        k[1],
        k[2],
        k[3],
        k[4],
        k[5],
        k[6],
        k[7],
        k[8],
        k[9],
        quadric_bbox_min[index],
        quadric_bbox_max[index],
        quadric_use_bbox[index],
    )


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, material_id: ti.i32, index: ti.i32) -> SceneHitRecord:
    """Attach material and slot information to a surface hit."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
        quadric_index=index,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
        quadric_index=-1,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Test a ray against every active quadric and keep the closest hit.

    Each quadric is tested over [t_min, closest_t], so later quadrics can
    only replace the current hit with a strictly nearer one.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record.
    """
    closest_t = t_max
    result = _make_miss_record()

    n = num_quadrics[None]
    for i in range(n):
        rec = hit_quadric(load_quadric(i), ray_origin, ray_direction, t_min, closest_t)
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, quadric_material_ids[i], i)

    return result


@ti.func
def intersect_scene_any(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Test if the ray hits any active quadric (occlusion query).

    Returns:
        1 if any quadric was hit, 0 otherwise.
    """
    hit_any = 0

    n = num_quadrics[None]
    for i in range(n):
        if hit_any == 0:
            rec = hit_quadric(load_quadric(i), ray_origin, ray_direction, t_min, t_max)
            if rec.hit == 1:
                hit_any = 1

    return hit_any
