"""General quadric surface with robust ray-quadric intersection.

A quadric is the zero set of the degree-2 polynomial

    f(x, y, z) = Ax^2 + By^2 + Cz^2 + Dxy + Exz + Fyz + Gx + Hy + Iz + J

Spheres, ellipsoids, cylinders, cones, paraboloids and hyperboloids are all
special cases of this single coefficient set, so one intersection routine
serves every surface family. Unbounded families are clipped with an optional
BoundingBox.

Substituting the ray P(t) = O + t * d into f gives a scalar quadratic
a*t^2 + b*t + c = 0, solved with the sign-matched formula to avoid
catastrophic cancellation when b^2 is close to 4ac.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.quadrics.geometry.quadric import make_quadric_surface, hit_quadric
    >>> # Unit sphere, no bounding box, inside a Taichi kernel:
    >>> # surface = make_quadric_surface(1.0, 1.0, 1.0, 0.0, 0.0, 0.0,
    >>> #                                0.0, 0.0, 0.0, -1.0,
    >>> #                                vec3(-10.0), vec3(10.0), 0)
    >>> # rec = hit_quadric(surface, origin, direction, T_MIN, T_MAX)
"""

import taichi as ti

from src.quadrics.core.ray import face_toward, make_ray, near_zero, normalize, ray_at, vec3

from .aabb import BoundingBox, aabb_contains, hit_aabb

# Default ray parameter range; T_MIN suppresses self-intersection
T_MIN = 0.001
T_MAX = 1000.0

# Below this magnitude the t^2 (or t) coefficient is treated as zero
DEGENERATE_EPSILON = 1e-6


@ti.dataclass
class QuadricCoefficients:
    """The ten coefficients of the general quadric equation.

    Attributes:
        A, B, C: Coefficients of x^2, y^2, z^2.
        D, E, F: Coefficients of the cross terms xy, xz, yz.
        G, H, I: Coefficients of the linear terms x, y, z.
        J: Constant term.
    """

    A: ti.f32
    B: ti.f32
    C: ti.f32
    D: ti.f32
    E: ti.f32
    F: ti.f32
    G: ti.f32
    H: ti.f32
    I: ti.f32  # noqa: E741
    J: ti.f32


@ti.dataclass
class QuadricSurface:
    """A quadric surface, optionally clipped to a bounding box.

    Attributes:
        coefficients: The quadric equation coefficients.
        bbox: The clipping box. Only consulted when use_bbox is 1.
        use_bbox: 1 to clip the surface to bbox, 0 for the infinite surface.
    """

    coefficients: QuadricCoefficients
    bbox: BoundingBox
    use_bbox: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-quadric intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The unit surface normal at the intersection point, always
            facing the incoming ray (dot(normal, direction) <= 0).
            Only valid if hit == 1.
        front_face: 1 if the surface gradient already faced the ray, 0 if it
            had to be flipped. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def make_quadric_surface(
    a: ti.f32,
    b: ti.f32,
    c: ti.f32,
    d: ti.f32,
    e: ti.f32,
    f: ti.f32,
    g: ti.f32,
    h: ti.f32,
    i: ti.f32,
    j: ti.f32,
    bbox_min: vec3,
    bbox_max: vec3,
    use_bbox: ti.i32,
) -> QuadricSurface:
    """Create a quadric surface from raw coefficients inside a Taichi kernel."""
    return QuadricSurface(
        coefficients=QuadricCoefficients(A=a, B=b, C=c, D=d, E=e, F=f, G=g, H=h, I=i, J=j),
        bbox=BoundingBox(min_corner=bbox_min, max_corner=bbox_max),
        use_bbox=use_bbox,
    )


@ti.func
def evaluate_quadric(surface: QuadricSurface, point: vec3) -> ti.f32:
    """Evaluate f(x, y, z) by direct substitution.

    Zero on the surface; the sign tells which side of it the point lies.
    """
    q = surface.coefficients
    x = point.x
    y = point.y
    z = point.z
    return (
        q.A * x * x
        + q.B * y * y
        + q.C * z * z
        + q.D * x * y
        + q.E * x * z
        + q.F * y * z
        + q.G * x
        + q.H * y
        + q.I * z
        + q.J
    )


@ti.func
def quadric_gradient(surface: QuadricSurface, point: vec3) -> vec3:
    """Analytic gradient of f, i.e. the unnormalized surface normal.

        df/dx = 2Ax + Dy + Ez + G
        df/dy = 2By + Dx + Fz + H
        df/dz = 2Cz + Ex + Fy + I
    """
    q = surface.coefficients
    x = point.x
    y = point.y
    z = point.z
    return vec3(
        2.0 * q.A * x + q.D * y + q.E * z + q.G,
        2.0 * q.B * y + q.D * x + q.F * z + q.H,
        2.0 * q.C * z + q.E * x + q.F * y + q.I,
    )


@ti.func
def _ray_quadratic_terms(surface: QuadricSurface, o: vec3, d: vec3):
    """Coefficients of a*t^2 + b*t + c = 0 for the ray o + t*d.

    Every second-degree term feeds a and part of b, every first-degree term
    feeds b and c, and the constant only feeds c.
    """
    q = surface.coefficients

    a = (
        q.A * d.x * d.x
        + q.B * d.y * d.y
        + q.C * d.z * d.z
        + q.D * d.x * d.y
        + q.E * d.x * d.z
        + q.F * d.y * d.z
    )

    b = (
        2.0 * q.A * o.x * d.x
        + 2.0 * q.B * o.y * d.y
        + 2.0 * q.C * o.z * d.z
        + q.D * (o.x * d.y + o.y * d.x)
        + q.E * (o.x * d.z + o.z * d.x)
        + q.F * (o.y * d.z + o.z * d.y)
        + q.G * d.x
        + q.H * d.y
        + q.I * d.z
    )

    c = evaluate_quadric(surface, o)

    return a, b, c


@ti.func
def _solve_quadratic_robust(a: ti.f32, b: ti.f32, c: ti.f32):
    """Solve a*t^2 + b*t + c = 0 with the cancellation-resistant formula.

    If |a| is negligible the equation is linear and has the single root
    -c / b (reported twice), or no root when b is negligible too. Otherwise:

        q  = (-b - sign(b) * sqrt(b^2 - 4ac)) / 2
        t0 = q / a
        t1 = c / q

    so that -b and the square root never cancel.

    Args:
        a: Quadratic coefficient.
        b: Linear coefficient.
        c: Constant term.

    Returns:
        Tuple of (found, t0, t1) where t0 <= t1. found is 0 when there is no
        real solution.
    """
    found = 0
    t0 = 0.0
    t1 = 0.0

    if ti.abs(a) < DEGENERATE_EPSILON:
        if ti.abs(b) >= DEGENERATE_EPSILON:
            found = 1
            t0 = -c / b
            t1 = t0
    else:
        discriminant = b * b - 4.0 * a * c
        if discriminant >= 0.0:
            found = 1
            sqrt_d = ti.sqrt(discriminant)
            sign_b = ti.select(b < 0.0, -1.0, 1.0)
            q = (-b - sign_b * sqrt_d) / 2.0

            if q == 0.0:
                # b == 0 and discriminant == 0: double root at the vertex
                t0 = -b / (2.0 * a)
                t1 = t0
            else:
                t0 = q / a
                t1 = c / q

            if t0 > t1:
                temp = t0
                t0 = t1
                t1 = temp

    return found, t0, t1


@ti.func
def _select_root(
    surface: QuadricSurface,
    ray_origin: vec3,
    ray_direction: vec3,
    t0: ti.f32,
    t1: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
):
    """Pick the reported root from a sorted pair t0 <= t1.

    t0 is preferred when it lies in [t_min, t_max], otherwise t1. When the
    surface is clipped, the root solves the infinite surface and its point
    may still fall outside the box; a rejected t0 falls back to t1.

    Returns:
        Tuple of (valid, t).
    """
    valid = 0
    t = 0.0
    t0_in_range = 0
    t1_in_range = 0
    if t0 >= t_min and t0 <= t_max:
        t0_in_range = 1
    if t1 >= t_min and t1 <= t_max:
        t1_in_range = 1

    if t0_in_range:
        valid = 1
        t = t0
    elif t1_in_range:
        valid = 1
        t = t1

    if valid and surface.use_bbox:
        ray = make_ray(ray_origin, ray_direction)
        if not aabb_contains(surface.bbox, ray_at(ray, t)):
            valid = 0
            if t0_in_range and t1_in_range:
                if aabb_contains(surface.bbox, ray_at(ray, t1)):
                    valid = 1
                    t = t1

    return valid, t


@ti.func
def hit_quadric(
    surface: QuadricSurface,
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-quadric intersection.

    1. When the surface is clipped, intersect the bounding box first and
       narrow [t_min, t_max] to the overlap.
    2. Substitute the ray into f to get a*t^2 + b*t + c = 0.
    3. Solve it with the robust quadratic formula.
    4. Select the nearest root in range that lies inside the box.
    5. Compute the gradient normal, flipped to face the incoming ray.

    Args:
        surface: The quadric surface to test against.
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (need not be normalized, but
            t is only a Euclidean distance for unit directions). A zero
            direction never hits.
        t_min: Minimum t value to consider a valid hit (avoids self-intersection).
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A HitRecord; check its hit field to see whether an intersection
        occurred. Misses and degenerate rays both report hit == 0.
    """
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    lo = t_min
    hi = t_max
    in_box = 1
    if near_zero(ray_direction):
        in_box = 0
    elif surface.use_bbox:
        box_hit, box_enter, box_exit = hit_aabb(surface.bbox, ray_origin, ray_direction)
        in_box = box_hit
        lo = ti.max(lo, box_enter)
        hi = ti.min(hi, box_exit)

    if in_box:
        a, b, c = _ray_quadratic_terms(surface, ray_origin, ray_direction)
        found, t0, t1 = _solve_quadratic_robust(a, b, c)

        if found:
            valid, t = _select_root(surface, ray_origin, ray_direction, t0, t1, lo, hi)

            if valid:
                did_hit = 1
                hit_t = t
                hit_point = ray_at(make_ray(ray_origin, ray_direction), t)

                gradient = quadric_gradient(surface, hit_point)
                if near_zero(gradient):
                    # Singular point (e.g. a cone apex): face the ray
                    is_front_face = 1
                    hit_normal = -normalize(ray_direction)
                else:
                    is_front_face, hit_normal = face_toward(normalize(gradient), ray_direction)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def hit_quadric_default(surface: QuadricSurface, ray_origin: vec3, ray_direction: vec3) -> HitRecord:
    """hit_quadric over the default [T_MIN, T_MAX] range."""
    return hit_quadric(surface, ray_origin, ray_direction, T_MIN, T_MAX)
