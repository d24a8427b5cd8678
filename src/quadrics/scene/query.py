"""Batch ray queries against the uploaded quadric scene.

These Python-scope helpers run one kernel over a batch of rays (or points)
held in numpy arrays and return numpy arrays. They read the device fields in
src.quadrics.scene.intersection, so every ray of a batch sees the scene as
it was last uploaded.

Example:
    >>> import numpy as np
    >>> from src.quadrics.scene.query import cast_rays
    >>> origins = np.array([[0.0, 0.0, 5.0]], dtype=np.float32)
    >>> directions = np.array([[0.0, 0.0, -1.0]], dtype=np.float32)
    >>> result = cast_rays(origins, directions)
    >>> result.hit, result.t
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.quadrics.core.ray import vec3
from src.quadrics.geometry.quadric import T_MAX, T_MIN, evaluate_quadric, quadric_gradient
from src.quadrics.scene.intersection import MAX_QUADRICS, intersect_scene, load_quadric


@dataclass
class RayCastResult:
    """Per-ray results of cast_rays().

    Attributes:
        hit: Boolean array of shape (N,).
        t: Ray parameter of the closest hit, shape (N,). 0 for misses.
        point: Hit points, shape (N, 3).
        normal: Unit normals facing the incoming rays, shape (N, 3).
        material_id: Material index of the hit quadric, -1 for misses.
        quadric_index: Scene slot of the hit quadric, -1 for misses.
    """

    hit: npt.NDArray[np.bool_]
    t: npt.NDArray[np.float32]
    point: npt.NDArray[np.float32]
    normal: npt.NDArray[np.float32]
    material_id: npt.NDArray[np.int32]
    quadric_index: npt.NDArray[np.int32]

    @property
    def hit_count(self) -> int:
        """Number of rays that hit a quadric."""
        return int(np.count_nonzero(self.hit))


@ti.kernel
def _cast_rays_kernel(
    origins: ti.types.ndarray(dtype=ti.f32, ndim=2),
    directions: ti.types.ndarray(dtype=ti.f32, ndim=2),
    t_min: ti.f32,
    t_max: ti.f32,
    out_hit: ti.types.ndarray(dtype=ti.i32, ndim=1),
    out_t: ti.types.ndarray(dtype=ti.f32, ndim=1),
    out_point: ti.types.ndarray(dtype=ti.f32, ndim=2),
    out_normal: ti.types.ndarray(dtype=ti.f32, ndim=2),
    out_material: ti.types.ndarray(dtype=ti.i32, ndim=1),
    out_index: ti.types.ndarray(dtype=ti.i32, ndim=1),
):
    for i in range(origins.shape[0]):
        o = vec3(origins[i, 0], origins[i, 1], origins[i, 2])
        d = vec3(directions[i, 0], directions[i, 1], directions[i, 2])
        rec = intersect_scene(o, d, t_min, t_max)
        out_hit[i] = rec.hit
        out_t[i] = rec.t
        out_material[i] = rec.material_id
        out_index[i] = rec.quadric_index
        for k in ti.static(range(3)):
            out_point[i, k] = rec.point[k]
            out_normal[i, k] = rec.normal[k]


@ti.kernel
def _evaluate_points_kernel(
    index: ti.i32,
    points: ti.types.ndarray(dtype=ti.f32, ndim=2),
    out_value: ti.types.ndarray(dtype=ti.f32, ndim=1),
    out_gradient: ti.types.ndarray(dtype=ti.f32, ndim=2),
):
    for i in range(points.shape[0]):
        surface = load_quadric(index)
        p = vec3(points[i, 0], points[i, 1], points[i, 2])
        out_value[i] = evaluate_quadric(surface, p)
        g = quadric_gradient(surface, p)
        for k in ti.static(range(3)):
            out_gradient[i, k] = g[k]


def _as_rays(values: Any, name: str) -> npt.NDArray[np.float32]:
    array = np.ascontiguousarray(values, dtype=np.float32)
    if array.ndim == 1:
        array = array.reshape(1, -1)
    if array.ndim != 2 or array.shape[1] != 3:
        raise ValueError(f"{name} must have shape (N, 3), got {array.shape}")
    return array


def cast_rays(
    origins: Any,
    directions: Any,
    t_min: float = T_MIN,
    t_max: float = T_MAX,
) -> RayCastResult:
    """Find the closest quadric hit for every ray of a batch.

    Args:
        origins: Ray origins, array-like of shape (N, 3) or (3,).
        directions: Ray directions, same shape as origins. Distances are only
            Euclidean for unit-length directions.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A RayCastResult with one entry per ray.

    Raises:
        ValueError: If the arrays are not (N, 3) or differ in length.
    """
    o = _as_rays(origins, "origins")
    d = _as_rays(directions, "directions")
    if o.shape != d.shape:
        raise ValueError(f"origins {o.shape} and directions {d.shape} differ in shape")

    n = o.shape[0]
    out_hit = np.zeros(n, dtype=np.int32)
    out_t = np.zeros(n, dtype=np.float32)
    out_point = np.zeros((n, 3), dtype=np.float32)
    out_normal = np.zeros((n, 3), dtype=np.float32)
    out_material = np.full(n, -1, dtype=np.int32)
    out_index = np.full(n, -1, dtype=np.int32)

    if n > 0:
        _cast_rays_kernel(
            o, d, t_min, t_max, out_hit, out_t, out_point, out_normal, out_material, out_index
        )

    return RayCastResult(
        hit=out_hit.astype(bool),
        t=out_t,
        point=out_point,
        normal=out_normal,
        material_id=out_material,
        quadric_index=out_index,
    )


def evaluate_points(
    index: int,
    points: Any,
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32]]:
    """Evaluate the quadric in a scene slot at many points.

    Args:
        index: Scene slot in [0, MAX_QUADRICS).
        points: Array-like of shape (N, 3) or (3,).

    Returns:
        Tuple of (values, gradients) with shapes (N,) and (N, 3).

    Raises:
        ValueError: If index is outside the scene or points are not (N, 3).
    """
    if not 0 <= index < MAX_QUADRICS:
        raise ValueError(f"Quadric slot {index} outside scene capacity ({MAX_QUADRICS})")
    p = _as_rays(points, "points")
    values = np.zeros(p.shape[0], dtype=np.float32)
    gradients = np.zeros((p.shape[0], 3), dtype=np.float32)
    if p.shape[0] > 0:
        _evaluate_points_kernel(index, p, values, gradients)
    return values, gradients
