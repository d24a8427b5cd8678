#!/usr/bin/env python3
"""Inspect the preset quadrics and cast test rays against them.

This script prints the equation, family and boundedness of every preset
surface, casts a few reference rays against each one, and optionally shows
an ASCII hit map of the default editor scene seen from +z.

Usage:
    python -m examples.quadric_presets [options]

Options:
    --preset NAME       Only inspect one preset (default: all)
    --map-size SIZE     Side of the ASCII hit map in characters (default: 32)
    --no-map            Skip the ASCII hit map
    --dump-scene PATH   Write the default scene as JSON to PATH
    --normal-map PATH   Save the hit normals of the map rays as a PNG
    --slot-map PATH     Save the hit slots of the map rays as a PNG
    --cpu               Force the CPU backend

Example:
    python -m examples.quadric_presets --preset cylinder --no-map
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import numpy as np
import taichi as ti

# Reference rays: (label, origin, direction)
TEST_RAYS = (
    ("down from +z", (0.0, 0.0, 6.0), (0.0, 0.0, -1.0)),
    ("side at z=3", (-5.0, 0.0, 3.0), (1.0, 0.0, 0.0)),
    ("side at z=0", (-5.0, 0.0, 0.0), (1.0, 0.0, 0.0)),
    ("side at z=10", (-5.0, 0.0, 10.0), (1.0, 0.0, 0.0)),
)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Inspect preset quadrics and cast test rays.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--preset",
        type=str,
        default=None,
        help="Only inspect one preset (default: all)",
    )
    parser.add_argument(
        "--map-size",
        type=int,
        default=32,
        help="Side of the ASCII hit map in characters (default: 32)",
    )
    parser.add_argument(
        "--no-map",
        action="store_true",
        help="Skip the ASCII hit map",
    )
    parser.add_argument(
        "--dump-scene",
        type=str,
        default=None,
        help="Write the default scene as JSON to this path",
    )
    parser.add_argument(
        "--normal-map",
        type=str,
        default=None,
        help="Save the hit normals of the map rays as a PNG",
    )
    parser.add_argument(
        "--slot-map",
        type=str,
        default=None,
        help="Save the hit slots of the map rays as a PNG",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    return parser.parse_args()


def inspect_presets(names: tuple[str, ...]) -> None:
    """Print each preset and the results of the reference rays."""
    # Lazy imports to allow Taichi initialization first
    from src.quadrics.geometry.classify import describe_quadric
    from src.quadrics.geometry.shapes import get_preset
    from src.quadrics.scene.manager import QuadricScene
    from src.quadrics.scene.query import cast_rays

    origins = np.array([ray[1] for ray in TEST_RAYS], dtype=np.float32)
    directions = np.array([ray[2] for ray in TEST_RAYS], dtype=np.float32)

    for name in names:
        info = get_preset(name)
        print(f"\n--- {name} ---")
        print(f"  {describe_quadric(info.params)}")
        if info.use_bbox:
            print(f"  Bounding box: {info.bbox_min} .. {info.bbox_max}")
        else:
            print("  Bounding box: disabled")

        scene = QuadricScene()
        scene.add_surface(info)
        scene.upload()
        result = cast_rays(origins, directions)

        for i, (label, _, _) in enumerate(TEST_RAYS):
            if result.hit[i]:
                p = result.point[i]
                n = result.normal[i]
                print(
                    f"  {label:>13}: hit t={result.t[i]:.3f} "
                    f"point=({p[0]:.2f}, {p[1]:.2f}, {p[2]:.2f}) "
                    f"normal=({n[0]:.2f}, {n[1]:.2f}, {n[2]:.2f})"
                )
            else:
                print(f"  {label:>13}: miss")


def cast_map_rays(size: int):
    """Cast an orthographic size x size grid of rays down -z at the default editor scene."""
    from src.quadrics.scene.manager import QuadricScene
    from src.quadrics.scene.query import cast_rays

    scene = QuadricScene()
    scene.initialize_defaults()
    scene.apply_preset(2, "cylinder")
    scene.apply_preset(3, "paraboloid")
    scene.upload()

    coords = np.linspace(-3.5, 3.5, size, dtype=np.float32)
    xs, ys = np.meshgrid(coords, coords[::-1])
    origins = np.stack([xs.ravel(), ys.ravel(), np.full(xs.size, 10.0, dtype=np.float32)], axis=1)
    directions = np.tile(np.array([0.0, 0.0, -1.0], dtype=np.float32), (xs.size, 1))

    return cast_rays(origins, directions, t_max=100.0)


def print_hit_map(result, size: int) -> None:
    """Print the map rays as ASCII, one slot digit per hit."""
    print(f"\nHit map of the default scene ({result.hit_count}/{size * size} rays hit):")
    glyphs = np.where(result.hit, result.quadric_index.astype(str), ".").reshape(size, size)
    for row in glyphs:
        print("  " + "".join(row))


def dump_scene(path: str) -> Path:
    """Save the default scene configuration as JSON."""
    from src.quadrics.scene.manager import QuadricScene

    scene = QuadricScene()
    scene.initialize_defaults()
    output_file = Path(path)
    output_file.write_text(json.dumps(scene.to_dict(), indent=2))
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.cpu:
        ti.init(arch=ti.cpu)
        print("Using CPU backend")
    else:
        # Use GPU if available, fall back to CPU
        try:
            ti.init(arch=ti.gpu)
            print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            print("Using CPU backend")

    try:
        from src.quadrics.geometry.shapes import PRESET_NAMES

        if args.preset is not None and args.preset not in PRESET_NAMES:
            print(f"Error: unknown preset {args.preset!r}", file=sys.stderr)
            return 1
        names = PRESET_NAMES if args.preset is None else (args.preset,)
        inspect_presets(names)

        if not args.no_map or args.normal_map or args.slot_map:
            from src.quadrics.preview.export import save_normal_map_png, save_slot_map_png

            result = cast_map_rays(args.map_size)
            if not args.no_map:
                print_hit_map(result, args.map_size)
            if args.normal_map:
                save_normal_map_png(result, args.map_size, args.map_size, args.normal_map)
                print(f"\nSaved normal map to: {Path(args.normal_map).absolute()}")
            if args.slot_map:
                save_slot_map_png(result, args.map_size, args.map_size, args.slot_map)
                print(f"\nSaved slot map to: {Path(args.slot_map).absolute()}")

        if args.dump_scene:
            output_file = dump_scene(args.dump_scene)
            print(f"\nSaved scene to: {output_file.absolute()}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
