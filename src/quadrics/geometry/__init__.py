"""Geometry module for quadric surfaces and their bounding boxes.

Components:
    aabb: Axis-aligned bounding box with containment and slab intersection
    quadric: General quadric surface, evaluation, gradient and ray intersection
    shapes: Python-scope surface descriptions and family factory constructors
    classify: Diagnostic family labelling and equation formatting

Device-side intersection routines are Taichi functions (@ti.func). Surface
families are data, not subclasses: every factory produces the same ten
coefficients plus an optional clipping box.

Ray-object intersection follows the pattern:
    rec = hit_quadric(surface, ray_origin, ray_direction, t_min, t_max)
"""

from .aabb import BoundingBox, aabb_contains, aabb_is_empty, hit_aabb, make_aabb
from .classify import describe_quadric, format_equation, is_quadric_bounded, quadric_type_name
from .quadric import (
    T_MAX,
    T_MIN,
    HitRecord,
    QuadricCoefficients,
    QuadricSurface,
    evaluate_quadric,
    hit_quadric,
    hit_quadric_default,
    make_quadric_surface,
    quadric_gradient,
)
from .shapes import (
    PRESET_NAMES,
    QuadricInfo,
    QuadricParams,
    get_preset,
    make_cone,
    make_cylinder,
    make_ellipsoid,
    make_elliptic_cylinder,
    make_elliptic_paraboloid,
    make_hyperbolic_paraboloid,
    make_hyperboloid_one_sheet,
    make_hyperboloid_two_sheets,
    make_sphere,
    translate_params,
)

__all__ = [
    # Bounding box
    "BoundingBox",
    "make_aabb",
    "aabb_is_empty",
    "aabb_contains",
    "hit_aabb",
    # Intersection core
    "QuadricCoefficients",
    "QuadricSurface",
    "HitRecord",
    "make_quadric_surface",
    "evaluate_quadric",
    "quadric_gradient",
    "hit_quadric",
    "hit_quadric_default",
    "T_MIN",
    "T_MAX",
    # Factories
    "QuadricParams",
    "QuadricInfo",
    "translate_params",
    "make_sphere",
    "make_ellipsoid",
    "make_cylinder",
    "make_elliptic_cylinder",
    "make_cone",
    "make_hyperboloid_one_sheet",
    "make_hyperboloid_two_sheets",
    "make_elliptic_paraboloid",
    "make_hyperbolic_paraboloid",
    "get_preset",
    "PRESET_NAMES",
    # Classification
    "is_quadric_bounded",
    "quadric_type_name",
    "format_equation",
    "describe_quadric",
]
