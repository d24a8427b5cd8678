"""Image export of ray-cast results for debugging geometry.

A grid of rays cast with cast_rays() can be written out as an image where
each pixel shows the hit normal (components mapped from [-1, 1] to [0, 255])
or the slot that was hit. Misses are black. These images show intersection
geometry only; no shading or materials are involved.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from src.quadrics.preview.export import save_normal_map_png
    >>> result = cast_rays(origins, directions)   # 64 * 64 rays, row-major
    >>> save_normal_map_png(result, 64, 64, "normals.png")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from src.quadrics.scene.query import RayCastResult

# One colour per scene slot for index maps
SLOT_COLORS = np.array(
    [
        (230, 230, 230),
        (220, 60, 60),
        (60, 200, 80),
        (70, 110, 230),
        (240, 200, 40),
        (200, 80, 220),
        (60, 210, 220),
        (240, 140, 40),
    ],
    dtype=np.uint8,
)


def _check_size(result: RayCastResult, height: int, width: int) -> None:
    if result.hit.shape[0] != height * width:
        raise ValueError(
            f"Cannot arrange {result.hit.shape[0]} rays as a {height}x{width} image"
        )


def normals_to_uint8(
    result: RayCastResult,
    height: int,
    width: int,
) -> npt.NDArray[np.uint8]:
    """Convert hit normals to an 8-bit RGB image.

    Args:
        result: Ray-cast results for height * width rays in row-major order.
        height: Image height in pixels.
        width: Image width in pixels.

    Returns:
        Image array of shape (height, width, 3) with dtype uint8.

    Raises:
        ValueError: If the number of rays does not match the image size.
    """
    _check_size(result, height, width)

    colors = np.clip(result.normal * 0.5 + 0.5, 0.0, 1.0)
    colors[~result.hit] = 0.0
    return (colors * 255).astype(np.uint8).reshape(height, width, 3)


def slots_to_uint8(
    result: RayCastResult,
    height: int,
    width: int,
) -> npt.NDArray[np.uint8]:
    """Colour each pixel by the scene slot its ray hit.

    Raises:
        ValueError: If the number of rays does not match the image size.
    """
    _check_size(result, height, width)

    image = np.zeros((result.hit.shape[0], 3), dtype=np.uint8)
    slots = result.quadric_index[result.hit] % len(SLOT_COLORS)
    image[result.hit] = SLOT_COLORS[slots]
    return image.reshape(height, width, 3)


def save_png_from_array(image: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an 8-bit (H, W, 3) array as an RGB PNG file."""
    pil_image = PILImage.fromarray(image)
    pil_image.save(filepath)


def save_normal_map_png(
    result: RayCastResult,
    height: int,
    width: int,
    filepath: str,
) -> None:
    """Save the hit normals of a ray grid as a PNG file.

    Args:
        result: Ray-cast results for height * width rays in row-major order.
        height: Image height in pixels.
        width: Image width in pixels.
        filepath: Output file path (should end in .png).
    """
    save_png_from_array(normals_to_uint8(result, height, width), filepath)


def save_slot_map_png(
    result: RayCastResult,
    height: int,
    width: int,
    filepath: str,
) -> None:
    """Save the hit slots of a ray grid as a PNG file."""
    save_png_from_array(slots_to_uint8(result, height, width), filepath)
