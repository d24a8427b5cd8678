"""Preview module for debug images of intersection results.

Components:
    export: PNG export of hit normals and hit slots

Example:
    >>> from src.quadrics.preview import save_normal_map_png
    >>> save_normal_map_png(result, 64, 64, "normals.png")
"""

from src.quadrics.preview.export import (
    normals_to_uint8,
    save_normal_map_png,
    save_png_from_array,
    save_slot_map_png,
    slots_to_uint8,
)

__all__ = [
    "normals_to_uint8",
    "slots_to_uint8",
    "save_png_from_array",
    "save_normal_map_png",
    "save_slot_map_png",
]
