"""Core ray module.

Components:
    ray: Ray structure, ray evaluation and the vector primitives used by the
        bounding box, quadric and scene intersection routines

All functions are Taichi functions (@ti.func) meant to be called from
inside kernels.
"""

from .ray import (
    ZERO_LENGTH_SQUARED,
    Ray,
    cross,
    dot,
    face_toward,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    vec3,
)

__all__ = [
    "Ray",
    "make_ray",
    "ray_at",
    "vec3",
    "dot",
    "cross",
    "length",
    "length_squared",
    "normalize",
    "near_zero",
    "face_toward",
    "ZERO_LENGTH_SQUARED",
]
