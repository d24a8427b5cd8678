"""Python-scope quadric descriptions and factory constructors.

Surface families are plain data: every constructor below derives the ten
coefficients of the family's canonical implicit equation (and, for unbounded
families, a clipping box) and returns a QuadricInfo. There is no per-family
class hierarchy; a single intersection routine handles all of them once the
description is uploaded to the device.

All surfaces are centred on the origin and aligned with the z axis. Use
QuadricInfo.translated() to move them.

Example:
    >>> from src.quadrics.geometry.shapes import make_cylinder
    >>> cylinder = make_cylinder(radius=1.5, height=10.0)
    >>> cylinder.params.J
    -2.25
    >>> cylinder.bbox_min
    (-2.5, -2.5, -5.0)
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace

# Corners of the (disabled) default clipping box
DEFAULT_BBOX_MIN = (-10.0, -10.0, -10.0)
DEFAULT_BBOX_MAX = (10.0, 10.0, 10.0)

# Extra room around the cross-section of cylinders and cones
BBOX_MARGIN = 1.0

COEFFICIENT_NAMES = ("A", "B", "C", "D", "E", "F", "G", "H", "I", "J")


@dataclass(frozen=True)
class QuadricParams:
    """Coefficients of Ax^2 + By^2 + Cz^2 + Dxy + Exz + Fyz + Gx + Hy + Iz + J = 0.

    Attributes:
        A, B, C: Coefficients of x^2, y^2, z^2.
        D, E, F: Coefficients of the cross terms xy, xz, yz.
        G, H, I: Coefficients of the linear terms x, y, z.
        J: Constant term.
    """

    A: float = 0.0
    B: float = 0.0
    C: float = 0.0
    D: float = 0.0
    E: float = 0.0
    F: float = 0.0
    G: float = 0.0
    H: float = 0.0
    I: float = 0.0  # noqa: E741
    J: float = 0.0

    def as_tuple(self) -> tuple[float, ...]:
        """Return the coefficients in A..J order."""
        return tuple(getattr(self, name) for name in COEFFICIENT_NAMES)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "QuadricParams":
        """Build coefficients from ten values in A..J order.

        Raises:
            ValueError: If values does not hold exactly ten numbers.
        """
        if len(values) != len(COEFFICIENT_NAMES):
            raise ValueError(f"Expected 10 quadric coefficients, got {len(values)}")
        return cls(*(float(v) for v in values))


def translate_params(params: QuadricParams, offset: Sequence[float]) -> QuadricParams:
    """Move a quadric by offset.

    Substitutes x -> x - tx, y -> y - ty, z -> z - tz. The second-degree
    coefficients are unchanged; the linear and constant terms absorb the shift.

    Args:
        params: The coefficients of the surface to move.
        offset: Translation (tx, ty, tz).

    Returns:
        Coefficients of the translated surface.
    """
    tx, ty, tz = (float(v) for v in offset)
    p = params
    return QuadricParams(
        A=p.A,
        B=p.B,
        C=p.C,
        D=p.D,
        E=p.E,
        F=p.F,
        G=p.G - 2.0 * p.A * tx - p.D * ty - p.E * tz,
        H=p.H - 2.0 * p.B * ty - p.D * tx - p.F * tz,
        I=p.I - 2.0 * p.C * tz - p.E * tx - p.F * ty,
        J=(
            p.A * tx * tx
            + p.B * ty * ty
            + p.C * tz * tz
            + p.D * tx * ty
            + p.E * tx * tz
            + p.F * ty * tz
            - p.G * tx
            - p.H * ty
            - p.I * tz
            + p.J
        ),
    )


@dataclass(frozen=True)
class QuadricInfo:
    """Python-scope description of a quadric surface.

    Attributes:
        params: The quadric equation coefficients.
        bbox_min: Minimum corner of the clipping box.
        bbox_max: Maximum corner of the clipping box.
        use_bbox: Whether the surface is clipped to the box.
    """

    params: QuadricParams
    bbox_min: tuple[float, float, float] = DEFAULT_BBOX_MIN
    bbox_max: tuple[float, float, float] = DEFAULT_BBOX_MAX
    use_bbox: bool = False

    def translated(self, offset: Sequence[float]) -> "QuadricInfo":
        """Return this surface moved by offset, box included."""
        tx, ty, tz = (float(v) for v in offset)
        return QuadricInfo(
            params=translate_params(self.params, (tx, ty, tz)),
            bbox_min=(self.bbox_min[0] + tx, self.bbox_min[1] + ty, self.bbox_min[2] + tz),
            bbox_max=(self.bbox_max[0] + tx, self.bbox_max[1] + ty, self.bbox_max[2] + tz),
            use_bbox=self.use_bbox,
        )

    def with_bounding_box(
        self,
        bbox_min: Sequence[float],
        bbox_max: Sequence[float],
    ) -> "QuadricInfo":
        """Return this surface clipped to the given box."""
        return replace(
            self,
            bbox_min=_as_vec3(bbox_min),
            bbox_max=_as_vec3(bbox_max),
            use_bbox=True,
        )

    def without_bounding_box(self) -> "QuadricInfo":
        """Return this surface with clipping disabled."""
        return replace(self, use_bbox=False)


def _as_vec3(values: Sequence[float]) -> tuple[float, float, float]:
    x, y, z = values
    return (float(x), float(y), float(z))


def _require_positive(**values: float) -> None:
    for name, value in values.items():
        if not value > 0.0:
            raise ValueError(f"{name} must be positive, got {value}")


def _z_aligned(params: QuadricParams, half_width: float, z_min: float, z_max: float) -> QuadricInfo:
    return QuadricInfo(
        params=params,
        bbox_min=(-half_width, -half_width, z_min),
        bbox_max=(half_width, half_width, z_max),
        use_bbox=True,
    )


# =============================================================================
# Factory Constructors
# =============================================================================


def make_sphere(radius: float) -> QuadricInfo:
    """Sphere x^2 + y^2 + z^2 - r^2 = 0 (bounded, no clipping box).

    Raises:
        ValueError: If radius is not positive.
    """
    _require_positive(radius=radius)
    return QuadricInfo(params=QuadricParams(A=1.0, B=1.0, C=1.0, J=-radius * radius))


def make_ellipsoid(a: float, b: float, c: float) -> QuadricInfo:
    """Ellipsoid x^2/a^2 + y^2/b^2 + z^2/c^2 - 1 = 0 (bounded, no clipping box).

    Raises:
        ValueError: If any semi-axis is not positive.
    """
    _require_positive(a=a, b=b, c=c)
    params = QuadricParams(A=1.0 / (a * a), B=1.0 / (b * b), C=1.0 / (c * c), J=-1.0)
    return QuadricInfo(params=params)


def make_cylinder(radius: float, height: float) -> QuadricInfo:
    """Circular cylinder x^2 + y^2 - r^2 = 0 along z, clipped to |z| <= height/2.

    Raises:
        ValueError: If radius or height is not positive.
    """
    _require_positive(radius=radius, height=height)
    params = QuadricParams(A=1.0, B=1.0, J=-radius * radius)
    return _z_aligned(params, radius + BBOX_MARGIN, -height / 2.0, height / 2.0)


def make_elliptic_cylinder(a: float, b: float, height: float) -> QuadricInfo:
    """Elliptic cylinder x^2/a^2 + y^2/b^2 - 1 = 0 along z, clipped to |z| <= height/2.

    Raises:
        ValueError: If a, b or height is not positive.
    """
    _require_positive(a=a, b=b, height=height)
    params = QuadricParams(A=1.0 / (a * a), B=1.0 / (b * b), J=-1.0)
    return _z_aligned(params, max(a, b) + BBOX_MARGIN, -height / 2.0, height / 2.0)


def make_cone(angle: float, height: float) -> QuadricInfo:
    """Cone x^2 + y^2 - (z tan(angle))^2 = 0 with its apex at the origin.

    Only the upper nappe, 0 <= z <= height, lies inside the clipping box.

    Args:
        angle: Half-angle at the apex, in radians, in (0, pi/2).
        height: Height of the clipped cone.

    Raises:
        ValueError: If angle is outside (0, pi/2) or height is not positive.
    """
    if not 0.0 < angle < math.pi / 2.0:
        raise ValueError(f"angle must be in (0, pi/2), got {angle}")
    _require_positive(height=height)
    tan_angle = math.tan(angle)
    params = QuadricParams(A=1.0, B=1.0, C=-tan_angle * tan_angle)
    return _z_aligned(params, height * tan_angle + BBOX_MARGIN, 0.0, height)


def make_hyperboloid_one_sheet(a: float, b: float, c: float, height: float) -> QuadricInfo:
    """Hyperboloid of one sheet x^2/a^2 + y^2/b^2 - z^2/c^2 - 1 = 0.

    Raises:
        ValueError: If any parameter is not positive.
    """
    _require_positive(a=a, b=b, c=c, height=height)
    params = QuadricParams(A=1.0 / (a * a), B=1.0 / (b * b), C=-1.0 / (c * c), J=-1.0)
    return _z_aligned(params, max(a, b) * 2.0, -height / 2.0, height / 2.0)


def make_hyperboloid_two_sheets(a: float, b: float, c: float, height: float) -> QuadricInfo:
    """Hyperboloid of two sheets -x^2/a^2 - y^2/b^2 + z^2/c^2 - 1 = 0.

    The sheets open along z with vertices at z = +-c.

    Raises:
        ValueError: If any parameter is not positive.
    """
    _require_positive(a=a, b=b, c=c, height=height)
    params = QuadricParams(A=-1.0 / (a * a), B=-1.0 / (b * b), C=1.0 / (c * c), J=-1.0)
    return _z_aligned(params, max(a, b) * 2.0, -height / 2.0, height / 2.0)


def make_elliptic_paraboloid(a: float, b: float, height: float) -> QuadricInfo:
    """Elliptic paraboloid z = x^2/a^2 + y^2/b^2, clipped to 0 <= z <= height.

    Raises:
        ValueError: If any parameter is not positive.
    """
    _require_positive(a=a, b=b, height=height)
    params = QuadricParams(A=-1.0 / (a * a), B=-1.0 / (b * b), I=1.0)
    return _z_aligned(params, max(a, b) * math.sqrt(height), 0.0, height)


def make_hyperbolic_paraboloid(a: float, b: float, height: float) -> QuadricInfo:
    """Hyperbolic paraboloid (saddle) z = x^2/a^2 - y^2/b^2, clipped to |z| <= height.

    Raises:
        ValueError: If any parameter is not positive.
    """
    _require_positive(a=a, b=b, height=height)
    params = QuadricParams(A=-1.0 / (a * a), B=1.0 / (b * b), I=1.0)
    return _z_aligned(params, max(a, b) * math.sqrt(height), -height, height)


# =============================================================================
# Presets
# =============================================================================

PRESET_NAMES = (
    "sphere",
    "ellipsoid",
    "cylinder",
    "cone",
    "paraboloid",
    "saddle",
    "hyperboloid1",
    "hyperboloid2",
)


def get_preset(name: str) -> QuadricInfo:
    """Return a named example surface.

    Unknown names fall back to the unit sphere.

    Args:
        name: One of PRESET_NAMES.
    """
    if name == "ellipsoid":
        return make_ellipsoid(2.0, 1.5, 1.0)
    if name == "cylinder":
        return make_cylinder(1.0, 10.0)
    if name == "cone":
        return make_cone(0.785, 10.0)
    if name == "paraboloid":
        return make_elliptic_paraboloid(1.0, 1.0, 5.0)
    if name == "saddle":
        return make_hyperbolic_paraboloid(1.0, 1.0, 5.0)
    if name == "hyperboloid1":
        return make_hyperboloid_one_sheet(1.0, 1.0, 1.0, 10.0)
    if name == "hyperboloid2":
        return make_hyperboloid_two_sheets(1.0, 1.0, 1.0, 10.0)
    return make_sphere(1.0)
