"""
Brick Save Converter
====================

Converts grid-placed bricks into oriented rigid primitives for a Y-up model
format.

Each brick (grid position, one of 24 orientations, size, material and color)
is decomposed by a per-asset rule into one or more parts. Every part is
placed by composing the brick's orientation and grid position with the
part's local offset, then given the brick's color and material.

Key Features:
- Exact affine frame algebra (CoordinateFrame)
- 24-entry orientation table with the Z-up to Y-up axis swap built in
- Multi-part ramps and wedges that tile without gaps
- Linear to sRGB color conversion (Numba JIT kernels)
- JSON instance tree and OBJ preview export

Example Usage:
    from brs_converter import SaveConverter, load_save

    converter = SaveConverter()
    model = converter.convert(load_save("castle.json"), name="castle")
    print(converter.report.summary())
"""

__version__ = "1.0.0"
__author__ = "brs_converter contributors"

from .cframe import CoordinateFrame, compose
from .orientation import ORIENTATION_TABLE, Direction, Rotation, orientation_index, orientation_matrix
from .color import to_perceptual, color_to_perceptual, palette_to_perceptual
from .save import Brick, Color, SaveData, MalformedSaveError, load_save
from .part import PartDef, InstanceDescriptor, Material, SurfaceType, PartType
from .converter import BrickConverter, RULES
from .model import SaveConverter, BatchProcessor, ConversionReport

__all__ = [
    "CoordinateFrame",
    "compose",
    "ORIENTATION_TABLE",
    "Direction",
    "Rotation",
    "orientation_index",
    "orientation_matrix",
    "to_perceptual",
    "color_to_perceptual",
    "palette_to_perceptual",
    "Brick",
    "Color",
    "SaveData",
    "MalformedSaveError",
    "load_save",
    "PartDef",
    "InstanceDescriptor",
    "Material",
    "SurfaceType",
    "PartType",
    "BrickConverter",
    "RULES",
    "SaveConverter",
    "BatchProcessor",
    "ConversionReport",
]
