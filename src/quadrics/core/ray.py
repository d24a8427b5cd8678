"""Rays and the 3-vector primitives shared by the intersection code.

Sums, differences and scalar multiples use the ``taichi.math.vec3``
operators directly. The functions below cover products, norms and the two
orientation tests the quadric routines need: whether a vector has collapsed
to zero, and which way a normal faces relative to a ray.

Everything here is a @ti.func and only callable from inside a kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.quadrics.core.ray import Ray, ray_at, vec3
    >>> # Inside a Taichi kernel:
    >>> # ray = Ray(origin=vec3(0.0, 0.0, 5.0), direction=vec3(0.0, 0.0, -1.0))
    >>> # ray_at(ray, 3.0) -> (0, 0, 2)
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Squared magnitude below which a vector counts as zero
ZERO_LENGTH_SQUARED = 1e-12


@ti.dataclass
class Ray:
    """Parametric ray P(t) = origin + t * direction.

    Attributes:
        origin: Start point.
        direction: Direction, not necessarily unit length. t is a Euclidean
            distance only for unit directions.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Point of the ray at parameter t (negative t lies behind the origin)."""
    return ray.origin + t * ray.direction


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Unit vector along v. v must not be (near) zero, see near_zero()."""
    return v / length(v)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """1 if the squared length of v is below ZERO_LENGTH_SQUARED, else 0.

    Detects degenerate ray directions and vanishing gradients, e.g. at the
    apex of a cone.
    """
    result = 0
    if length_squared(v) < ZERO_LENGTH_SQUARED:
        result = 1
    return result


@ti.func
def face_toward(normal: vec3, direction: vec3):
    """Orient a unit normal against an incoming direction.

    Returns:
        Tuple of (front_face, facing_normal). front_face is 1 when normal
        already satisfies dot(normal, direction) <= 0, in which case it is
        returned unchanged; otherwise it is negated and front_face is 0.
    """
    front_face = 1
    facing = normal
    if dot(normal, direction) > 0.0:
        front_face = 0
        facing = -normal
    return front_face, facing
