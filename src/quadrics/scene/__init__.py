"""Scene module for the fixed-capacity quadric scene.

This module handles scene representation and ray-scene queries:

Components:
    intersection: Device-side quadric storage and closest-hit scene queries
    manager: Python-scope scene container, editor helpers and serialization
    query: Batch ray casting and point evaluation over numpy arrays

Scene data is organized for efficient device access:
    - Structure-of-Arrays Taichi fields, one slot per quadric
    - A fixed capacity of MAX_QUADRICS slots plus an active count
    - Explicit upload from the Python-scope container
"""

from .intersection import (
    MAX_QUADRICS,
    SceneHitRecord,
    clear_quadrics,
    get_quadric_count,
    intersect_scene,
    intersect_scene_any,
    load_quadric,
    set_quadric_count,
    write_quadric,
)
from .manager import (
    EDITOR_PRESETS,
    MATERIAL_NAMES,
    QuadricEntry,
    QuadricScene,
    SceneConfig,
)
from .query import RayCastResult, cast_rays, evaluate_points

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "MAX_QUADRICS",
    "clear_quadrics",
    "write_quadric",
    "set_quadric_count",
    "get_quadric_count",
    "load_quadric",
    "intersect_scene",
    "intersect_scene_any",
    # Manager module
    "QuadricEntry",
    "QuadricScene",
    "SceneConfig",
    "EDITOR_PRESETS",
    "MATERIAL_NAMES",
    # Query module
    "RayCastResult",
    "cast_rays",
    "evaluate_points",
]
