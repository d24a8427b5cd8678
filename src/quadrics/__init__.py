"""Taichi implementation of a general quadric surface ray caster.

This package provides ray intersection against implicit quadric surfaces
Ax^2 + By^2 + Cz^2 + Dxy + Exz + Fyz + Gx + Hy + Iz + J = 0, with support for:
- Numerically stable ray-quadric intersection with analytic normals
- Bounding-box clipping of unbounded surfaces
- Factory constructors for the common surface families
- A fixed-capacity scene with closest-hit queries

Subpackages:
    core: Ray structure and vector utilities
    geometry: Bounding boxes, the quadric intersection core, factories and
        classification
    scene: Scene container, device storage and batch ray queries
    preview: PNG debug images of ray-cast results
"""

__version__ = "0.1.0"
