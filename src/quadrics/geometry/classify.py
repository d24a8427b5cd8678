"""Heuristic labelling of quadric coefficient sets.

These helpers are diagnostic and editor-facing only; the intersection code
never consults them. The decision tree is approximate: noise near zero
can turn a cylinder into a paraboloid, and a cone is reported as a
hyperboloid.
"""

from .shapes import QuadricParams

# Coefficients at or below this magnitude count as absent
PRESENCE_THRESHOLD = 1e-6

GENERAL_QUADRIC = "General Quadric"
ELLIPSOID = "Ellipsoid"
HYPERBOLOID = "Hyperboloid"
PARABOLOID = "Paraboloid"
CYLINDER = "Cylinder"
CONE = "Cone"
PLANE = "Plane"
QUADRIC_SURFACE = "Quadric Surface"


def _present(value: float) -> bool:
    return abs(value) > PRESENCE_THRESHOLD


def is_quadric_bounded(params: QuadricParams) -> bool:
    """Conservative boundedness test.

    True only when A, B and C are all strictly positive (ellipsoid-like).
    Many bounded coefficient sets, e.g. rotated ellipsoids or ones scaled by
    a negative factor, are reported as unbounded.
    """
    return all(value > PRESENCE_THRESHOLD for value in (params.A, params.B, params.C))


def quadric_type_name(params: QuadricParams) -> str:
    """Return a descriptive family name for a coefficient set."""
    has_a = _present(params.A)
    has_b = _present(params.B)
    has_c = _present(params.C)
    has_cross = _present(params.D) or _present(params.E) or _present(params.F)
    has_linear = _present(params.G) or _present(params.H) or _present(params.I)

    if has_cross:
        return GENERAL_QUADRIC

    if has_a and has_b and has_c:
        if params.A > 0 and params.B > 0 and params.C > 0:
            return ELLIPSOID
        if params.A > 0 and params.B > 0 and params.C < 0:
            return HYPERBOLOID
        return GENERAL_QUADRIC

    if has_a and has_b and not has_c:
        if has_linear:
            return PARABOLOID
        return CYLINDER

    # Unreachable: shadowed by the all-squares branch above
    if has_a and has_b and has_c and params.C * params.A < 0:
        return CONE

    if has_linear and not has_a and not has_b and not has_c:
        return PLANE

    return QUADRIC_SURFACE


_TERM_SUFFIXES = ("x²", "y²", "z²", "xy", "xz", "yz", "x", "y", "z", "")


def format_equation(params: QuadricParams, precision: int = 3) -> str:
    """Render the non-zero terms of the equation, e.g. ``1x² + 1y² - 4 = 0``.

    An all-zero coefficient set renders as ``0 = 0``.
    """
    terms = []
    for value, suffix in zip(params.as_tuple(), _TERM_SUFFIXES):
        if value == 0.0:
            continue
        magnitude = f"{abs(value):.{precision}g}{suffix}"
        if not terms:
            terms.append(magnitude if value > 0 else f"-{magnitude}")
        else:
            terms.append(f"+ {magnitude}" if value > 0 else f"- {magnitude}")
    if not terms:
        terms.append("0")
    return " ".join(terms) + " = 0"


def describe_quadric(params: QuadricParams) -> str:
    """One-line summary: family name, boundedness and equation."""
    bounded = "bounded" if is_quadric_bounded(params) else "unbounded"
    return f"{quadric_type_name(params)} ({bounded}): {format_equation(params)}"
