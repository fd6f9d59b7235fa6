#!/usr/bin/env python3
"""
Brick Save Converter Demo Script

This script demonstrates the full conversion pipeline by:
1. Building a synthetic save in memory (no save files needed)
2. Converting it into an instance tree
3. Exporting to all supported formats
4. Printing statistics

Run with: python examples/demo.py
"""

import sys
from pathlib import Path
import time

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from brs_converter import SaveConverter, SaveData, Brick, Color
from brs_converter.model import export_model


ASSETS = [
    "PB_DefaultBrick",
    "PB_DefaultRamp",
    "PB_DefaultWedge",
    "B_2x2_Round",
    "PB_DefaultTile",
    "B_Flower",  # no converter, reported as skipped
]

MATERIALS = ["BMC_Plastic", "BMC_Glass", "BMC_Glow", "BMC_Metallic"]

PALETTE = [
    Color(120, 120, 120),
    Color(180, 40, 30),
    Color(40, 90, 200),
    Color(255, 220, 120),
]


def create_test_save() -> SaveData:
    """
    Create a small tower: a floor, four pillars, a ramp on every side,
    a glass roof and a lamp.
    """
    bricks = []

    # Floor of 4x4 tiles
    for x in range(4):
        for y in range(4):
            bricks.append(Brick(
                position=(x * 20, y * 20, 2),
                size=(10, 10, 2),
                asset_name_index=ASSETS.index("PB_DefaultTile"),
                color=0,
            ))

    # Round pillars at the corners
    for x, y in ((0, 0), (60, 0), (0, 60), (60, 60)):
        bricks.append(Brick(
            position=(x, y, 16),
            asset_name_index=ASSETS.index("B_2x2_Round"),
            color=1,
            material_index=MATERIALS.index("BMC_Metallic"),
        ))

    # One ramp per side, facing outwards
    for rotation, (x, y) in enumerate(((30, -20), (80, 30), (30, 80), (-20, 30))):
        bricks.append(Brick(
            position=(x, y, 10),
            rotation=rotation,
            size=(20, 10, 6),
            asset_name_index=ASSETS.index("PB_DefaultRamp"),
            color=2,
        ))

    # Glass roof
    bricks.append(Brick(
        position=(30, 30, 34),
        size=(40, 40, 2),
        asset_name_index=ASSETS.index("PB_DefaultBrick"),
        color=2,
        material_index=MATERIALS.index("BMC_Glass"),
        material_intensity=3,
    ))

    # Glowing lamp with a light
    bricks.append(Brick(
        position=(30, 30, 40),
        size=(5, 5, 5),
        asset_name_index=ASSETS.index("PB_DefaultWedge"),
        color=3,
        material_index=MATERIALS.index("BMC_Glow"),
        components={"BCD_PointLight": {"Brightness": 40.0, "Range": 300.0, "bUseBrickColor": True}},
    ))

    # Something without a converter
    bricks.append(Brick(
        position=(0, 30, 6),
        asset_name_index=ASSETS.index("B_Flower"),
    ))

    return SaveData(
        description="Demo tower",
        author="demo",
        brick_assets=ASSETS,
        materials=MATERIALS,
        colors=PALETTE,
        bricks=bricks,
    ).validate()


def run_demo():
    """Run the full demo pipeline."""
    print("=" * 60)
    print("Brick Save Converter Demo")
    print("=" * 60)

    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    save = create_test_save()
    print(f"\nSave: {save.description!r} by {save.author}, {len(save.bricks)} bricks")

    for workers in (1, 4):
        converter = SaveConverter(workers=workers)

        start = time.time()
        model = converter.convert(save, name="demo_tower")
        elapsed = time.time() - start

        print(f"\n  workers={workers}: {elapsed*1000:.1f}ms")
        for line in converter.report.summary().splitlines():
            print(f"    {line}")

    print("\n  Exporting...")
    try:
        for path in export_model(model, output_dir / "demo_tower.model.json", ["json", "obj"]):
            print(f"    Saved: {path}")
    except Exception as e:
        print(f"    Export failed: {e}")
        return 1

    print("\n" + "=" * 60)
    print(f"Demo complete! Output files in: {output_dir}")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(run_demo())
