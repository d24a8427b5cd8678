"""Fixed-capacity quadric scene handed to the renderer.

The QuadricScene holds up to MAX_QUADRICS entries, each a (coefficients,
bounding box, material index) triple, plus the number of active entries. It
is the authoritative Python-scope description of the scene: an interactive
editor mutates entries between frames and upload() copies them into the
Taichi fields read by the scene intersection kernels.

Out-of-range indices never fault:
- get_entry() with an invalid index returns a zeroed scratch entry that is
  not part of the scene, so edits to it are harmless;
- set_entry() with an invalid index does nothing;
- writing at or past the active count extends the count to index + 1.

The scene holds no intersection logic; see src.quadrics.scene.intersection.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.quadrics.geometry.shapes import make_cylinder
    >>> from src.quadrics.scene.manager import QuadricScene
    >>> scene = QuadricScene()
    >>> scene.initialize_defaults()
    >>> scene.add_surface(make_cylinder(0.5, 2.0).translated((0, 1, 0)), material_index=3)
    2
    >>> scene.upload()
"""

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from src.quadrics.geometry.shapes import QuadricInfo, QuadricParams, make_ellipsoid, make_sphere
from src.quadrics.scene.intersection import (
    MAX_QUADRICS,
    clear_quadrics,
    set_quadric_count,
    write_quadric,
)

# Material tags understood by the renderer, indexed by material_index
MATERIAL_NAMES = (
    "White Diffuse",
    "Red Diffuse",
    "Green Diffuse",
    "Chrome",
    "Gold",
    "Light",
    "Glass",
    "Blue Glossy",
    "Rough White",
    "Bronze",
)


def _corner_from_list(values: Sequence[float], key: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"Expected 3 values for {key}, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


@dataclass
class QuadricEntry:
    """One slot of the scene.

    The default entry is all zeros: a degenerate equation inside a point box
    at the origin, which never produces a hit.

    Attributes:
        params: The quadric equation coefficients.
        bbox_min: Minimum corner of the clipping box.
        bbox_max: Maximum corner of the clipping box.
        material_index: Material tag, an index into MATERIAL_NAMES.
    """

    params: QuadricParams = field(default_factory=QuadricParams)
    bbox_min: tuple[float, float, float] = (0.0, 0.0, 0.0)
    bbox_max: tuple[float, float, float] = (0.0, 0.0, 0.0)
    material_index: int = 0

    @classmethod
    def from_info(cls, info: QuadricInfo, material_index: int = 0) -> "QuadricEntry":
        """Create an entry from a factory surface.

        Scene entries are always clipped, so a surface without an enabled
        box keeps its (default) box corners as the clipping region.
        """
        return cls(
            params=info.params,
            bbox_min=tuple(info.bbox_min),
            bbox_max=tuple(info.bbox_max),
            material_index=material_index,
        )

    def to_info(self) -> QuadricInfo:
        """Return the clipped surface this entry describes."""
        return QuadricInfo(
            params=self.params,
            bbox_min=self.bbox_min,
            bbox_max=self.bbox_max,
            use_bbox=True,
        )

    def set_coefficient(self, name: str, value: float) -> None:
        """Change one coefficient (A..J) in place.

        Raises:
            ValueError: If name is not a coefficient name.
        """
        if name not in {"A", "B", "C", "D", "E", "F", "G", "H", "I", "J"}:
            raise ValueError(f"Unknown quadric coefficient: {name}")
        self.params = replace(self.params, **{name: float(value)})

    def to_dict(self) -> dict[str, Any]:
        """Export the entry as a JSON-friendly dictionary."""
        return {
            "coefficients": list(self.params.as_tuple()),
            "bbox_min": list(self.bbox_min),
            "bbox_max": list(self.bbox_max),
            "material_index": self.material_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QuadricEntry":
        """Load an entry exported by to_dict().

        Raises:
            ValueError: If the coefficient list does not hold ten values or a
                box corner does not hold three.
        """
        return cls(
            params=QuadricParams.from_sequence(data.get("coefficients", [0.0] * 10)),
            bbox_min=_corner_from_list(data.get("bbox_min", [0.0, 0.0, 0.0]), "bbox_min"),
            bbox_max=_corner_from_list(data.get("bbox_max", [0.0, 0.0, 0.0]), "bbox_max"),
            material_index=int(data.get("material_index", 0)),
        )


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        quadrics: Entry dictionaries for the active slots, in slot order.
    """

    quadrics: list[dict[str, Any]] = field(default_factory=list)


# Quick presets offered by the editor, keyed by button label
EDITOR_PRESETS: dict[str, QuadricEntry] = {
    "test_sphere": QuadricEntry(
        QuadricParams(A=1.0, B=1.0, C=1.0, I=4.0),
        (-3.0, -3.0, -5.0),
        (3.0, 3.0, 1.0),
        5,
    ),
    "sphere": QuadricEntry(
        QuadricParams(A=1.0, B=1.0, C=1.0, J=-1.0),
        (-1.0, -1.0, -1.0),
        (1.0, 1.0, 1.0),
        6,
    ),
    "cylinder": QuadricEntry(
        QuadricParams(A=1.0, B=1.0, J=-0.36),
        (-0.6, -0.6, -2.0),
        (0.6, 0.6, 2.0),
        3,
    ),
    "cone": QuadricEntry(
        QuadricParams(A=1.0, B=1.0, C=-1.0),
        (-2.0, -2.0, -3.0),
        (2.0, 2.0, 3.0),
        3,
    ),
    "paraboloid": QuadricEntry(
        QuadricParams(A=1.0, B=1.0, I=-1.0),
        (-1.5, -1.5, 0.0),
        (1.5, 1.5, 4.5),
        4,
    ),
    "ellipsoid": QuadricEntry(
        QuadricParams(A=1.5625, B=0.6944, C=2.7778, J=-1.0),
        (-0.8, -1.2, -0.6),
        (0.8, 1.2, 0.6),
        8,
    ),
    "hyperboloid": QuadricEntry(
        QuadricParams(A=4.0, B=4.0, C=-1.0, J=-1.0),
        (-1.0, -1.0, -2.0),
        (1.0, 1.0, 2.0),
        7,
    ),
}


class QuadricScene:
    """Fixed-capacity ordered collection of quadric entries.

    Attributes:
        entries: The MAX_QUADRICS slots, in order.

    Example:
        >>> scene = QuadricScene()
        >>> entry = scene.select_entry(3)   # active count becomes 4
        >>> entry.set_coefficient("J", -1.0)
        >>> scene.mark_changed()
        >>> scene.upload()
    """

    capacity = MAX_QUADRICS

    def __init__(self) -> None:
        """Initialize a scene with every slot zeroed and no active entries."""
        self.entries: list[QuadricEntry] = [QuadricEntry() for _ in range(MAX_QUADRICS)]
        self._num_active = 0
        self._scratch = QuadricEntry()
        self._revision = 0

    @property
    def num_active(self) -> int:
        """Number of leading slots the renderer considers."""
        return self._num_active

    @property
    def revision(self) -> int:
        """Counter bumped on every change, for resetting accumulated frames."""
        return self._revision

    def mark_changed(self) -> None:
        """Record an in-place edit of an entry returned by get_entry()."""
        self._revision += 1

    def clear(self) -> None:
        """Zero every slot and reset the active count."""
        for i in range(MAX_QUADRICS):
            self.entries[i] = QuadricEntry()
        self._num_active = 0
        self.mark_changed()

    # =========================================================================
    # Entry Access
    # =========================================================================

    @staticmethod
    def in_range(index: int) -> bool:
        """Whether index addresses a slot of the scene."""
        return 0 <= index < MAX_QUADRICS

    def get_entry(self, index: int) -> QuadricEntry:
        """Get the entry in a slot.

        Returns the live entry, so field edits apply to the scene. Invalid
        indices return a freshly zeroed scratch entry that is not part of the
        scene.
        """
        if not self.in_range(index):
            self._scratch = QuadricEntry()
            return self._scratch
        return self.entries[index]

    def set_entry(self, index: int, entry: QuadricEntry) -> None:
        """Replace the entry in a slot; a no-op for invalid indices.

        Writing at or past the active count extends it to index + 1.
        """
        if not self.in_range(index):
            return
        self.entries[index] = entry
        if index >= self._num_active:
            self._num_active = index + 1
        self.mark_changed()

    def select_entry(self, index: int) -> QuadricEntry:
        """Clamp an editor selection into range and return that entry.

        Selecting a slot at or past the active count activates it.
        """
        index = min(max(index, 0), MAX_QUADRICS - 1)
        if index >= self._num_active:
            self._num_active = index + 1
            self.mark_changed()
        return self.entries[index]

    def add_surface(self, info: QuadricInfo, material_index: int = 0) -> int:
        """Append a factory surface after the active entries.

        Returns:
            The slot the surface was stored in.

        Raises:
            RuntimeError: If the scene is full.
        """
        index = self._num_active
        if index >= MAX_QUADRICS:
            raise RuntimeError(f"Maximum number of quadrics ({MAX_QUADRICS}) exceeded")
        self.set_entry(index, QuadricEntry.from_info(info, material_index))
        return index

    def apply_preset(self, index: int, name: str) -> None:
        """Load one of the editor quick presets into a slot.

        Raises:
            ValueError: If name is not in EDITOR_PRESETS.
        """
        if name not in EDITOR_PRESETS:
            raise ValueError(f"Unknown preset: {name}")
        self.set_entry(index, replace(EDITOR_PRESETS[name]))

    def active_entries(self) -> list[QuadricEntry]:
        """The entries the renderer considers, in slot order."""
        return self.entries[: self._num_active]

    def initialize_defaults(self) -> None:
        """Load the default scene: a gold sphere and a rough-white ellipsoid."""
        self.clear()
        sphere = make_sphere(0.6).with_bounding_box((-0.6, -0.6, -0.6), (0.6, 0.6, 0.6))
        self.set_entry(0, QuadricEntry.from_info(sphere.translated((2.0, -2.0, 0.0)), 4))
        ellipsoid = make_ellipsoid(0.5, 0.8, 0.4).with_bounding_box(
            (-0.5, -0.8, -0.4), (0.5, 0.8, 0.4)
        )
        self.set_entry(1, QuadricEntry.from_info(ellipsoid.translated((-2.0, -2.0, -2.0)), 8))

    # =========================================================================
    # Device Upload
    # =========================================================================

    def upload(self) -> None:
        """Copy the active entries into the device fields.

        Kernels launched afterwards see exactly this snapshot; later edits
        stay invisible until the next upload.
        """
        clear_quadrics()
        for i, entry in enumerate(self.active_entries()):
            write_quadric(
                i,
                entry.params.as_tuple(),
                entry.bbox_min,
                entry.bbox_max,
                material_id=entry.material_index,
                use_bbox=True,
            )
        set_quadric_count(self._num_active)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the active entries to a configuration object."""
        return SceneConfig(quadrics=[entry.to_dict() for entry in self.active_entries()])

    def from_config(self, config: SceneConfig) -> None:
        """Load a configuration, replacing the current scene.

        Raises:
            ValueError: If the configuration holds more than MAX_QUADRICS
                entries or an entry has the wrong number of coefficients.
        """
        if len(config.quadrics) > MAX_QUADRICS:
            raise ValueError(
                f"Scene holds {len(config.quadrics)} quadrics, maximum is {MAX_QUADRICS}"
            )
        entries = [QuadricEntry.from_dict(data) for data in config.quadrics]
        self.clear()
        for i, entry in enumerate(entries):
            self.set_entry(i, entry)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        return {"quadrics": self.to_config().quadrics}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with a 'quadrics' list."""
        self.from_config(SceneConfig(quadrics=list(data.get("quadrics", []))))

    @staticmethod
    def material_name(material_index: int) -> str:
        """Human-readable name of a material tag."""
        if 0 <= material_index < len(MATERIAL_NAMES):
            return MATERIAL_NAMES[material_index]
        return f"Material {material_index}"

    @staticmethod
    def get_max_quadrics() -> int:
        """Get the maximum number of quadrics supported."""
        return MAX_QUADRICS

