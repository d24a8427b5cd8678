"""Axis-aligned bounding box used to clip unbounded quadrics.

Cylinders, cones, paraboloids and hyperboloids extend to infinity along at
least one axis. A BoundingBox restricts them to a finite renderable region and
provides cheap early rejection for rays that cannot reach the surface.

Ray-box intersection uses the slab method: each axis narrows the running
parametric interval [t_enter, t_exit] to the part of the ray between that
axis' two planes. A zero direction component is handled with an explicit
branch instead of relying on infinities from the division.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.quadrics.core.ray import vec3
    >>> from src.quadrics.geometry.aabb import BoundingBox, hit_aabb
    >>> box = BoundingBox(min_corner=vec3(-1.0), max_corner=vec3(1.0))
    >>> # Use hit_aabb within a Taichi kernel
"""

import taichi as ti

from src.quadrics.core.ray import vec3

# Stand-in for an unbounded parametric interval
T_INFINITY = 1e30


@ti.dataclass
class BoundingBox:
    """An axis-aligned box given by its minimum and maximum corners.

    A box with any min component greater than the matching max component is
    empty and rejects every containment and intersection query.

    Attributes:
        min_corner: Componentwise minimum corner (vec3).
        max_corner: Componentwise maximum corner (vec3).
    """

    min_corner: vec3
    max_corner: vec3


@ti.func
def make_aabb(min_corner: vec3, max_corner: vec3) -> BoundingBox:
    """Create a bounding box from its corners inside a Taichi kernel."""
    return BoundingBox(min_corner=min_corner, max_corner=max_corner)


@ti.func
def aabb_is_empty(box: BoundingBox) -> ti.i32:
    """Return 1 if any min component exceeds the matching max component."""
    empty = 0
    for k in ti.static(range(3)):
        if box.min_corner[k] > box.max_corner[k]:
            empty = 1
    return empty


@ti.func
def aabb_contains(box: BoundingBox, point: vec3) -> ti.i32:
    """Inclusive point-in-box test.

    Args:
        box: The bounding box.
        point: The point to test.

    Returns:
        1 if min <= point <= max on every axis, 0 otherwise (always 0 for an
        empty box).
    """
    inside = 0
    if not aabb_is_empty(box):
        inside = 1
        for k in ti.static(range(3)):
            if point[k] < box.min_corner[k] or point[k] > box.max_corner[k]:
                inside = 0
    return inside


@ti.func
def hit_aabb(box: BoundingBox, ray_origin: vec3, ray_direction: vec3):
    """Intersect a ray with the box using the slab method.

    For each axis with a non-zero direction component:
        t1 = (min - origin) / direction
        t2 = (max - origin) / direction
    and the running interval is intersected with [min(t1, t2), max(t1, t2)].
    An axis with a zero direction component imposes no constraint when the
    origin lies between its two planes and rejects the ray otherwise.

    Args:
        box: The bounding box to test.
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (need not be normalized).

    Returns:
        Tuple of (hit, t_enter, t_exit). hit is 1 when the interval is
        non-empty and not entirely behind the origin (t_exit >= 0).
        t_enter may be negative when the origin is inside the box.
    """
    t_enter = -T_INFINITY
    t_exit = T_INFINITY
    rejected = aabb_is_empty(box)

    for k in ti.static(range(3)):
        o = ray_origin[k]
        d = ray_direction[k]
        lo = box.min_corner[k]
        hi = box.max_corner[k]
        if d == 0.0:
            if o < lo or o > hi:
                rejected = 1
        else:
            t1 = (lo - o) / d
            t2 = (hi - o) / d
            t_enter = ti.max(t_enter, ti.min(t1, t2))
            t_exit = ti.min(t_exit, ti.max(t1, t2))

    did_hit = 0
    if not rejected and t_exit >= t_enter and t_exit >= 0.0:
        did_hit = 1

    return did_hit, t_enter, t_exit
