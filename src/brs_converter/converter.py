"""
Brick Shape Decomposition

Maps each brick asset to a rule that splits the brick into one or more
PartDefs. Assets without a rule have no mapping: convert() returns None and
the caller decides how to report it. There is no fallback shape.

Sizes:
    Procedural brick sizes are half-extents in source units. Dividing by
    SIZE_SCALE gives the full extent in world units, in source axis order
    (x, y horizontal, z up). Rules permute this into target order
    (x, up, z) when sizing their parts.

Ramp seams:
    Ramps and wedges are built from a wedge plus flat slabs. The wedge is
    lifted by WEDGE_INSET / 2 and shortened by WEDGE_INSET so it sits on a
    slab of height WEDGE_INSET; the flat top segment of a ramp is RAMP_LIP
    long and the wedge takes the rest of the run. Slab, wedge and lip
    together cover the brick's extent exactly.
"""

from math import pi
from typing import Callable, Dict, List, Optional, Tuple
import logging
import numpy as np

from .part import PartDef, PartType, SurfaceType, InstanceDescriptor, POSITION_SCALE
from .save import Brick, SaveData


logger = logging.getLogger(__name__)

SIZE_SCALE = 5.0

WEDGE_INSET = 0.2
RAMP_LIP = 1.0

Size = Tuple[float, float, float]
Rule = Callable[[Size], List[PartDef]]


# ----------------------------------------------------------------------
# Cuboid-like rules
# ----------------------------------------------------------------------

def default_brick(size: Size) -> List[PartDef]:
    sx, sy, sz = size
    return [PartDef().with_size(sx, sz, sy)]


def default_tile(size: Size) -> List[PartDef]:
    sx, sy, sz = size
    return [
        PartDef()
        .with_size(sx, sz, sy)
        .with_surfaces(top=SurfaceType.SMOOTH)
    ]


def micro_brick(size: Size) -> List[PartDef]:
    sx, sy, sz = size
    return [
        PartDef()
        .with_size(sx, sz, sy)
        .with_surfaces(top=SurfaceType.SMOOTH, bottom=SurfaceType.SMOOTH)
    ]


# ----------------------------------------------------------------------
# Ramps and wedges
# ----------------------------------------------------------------------

def _ramp(size: Size, inverted: bool) -> List[PartDef]:
    """
    Ramp split along the source X axis.

    Parts, in order:
        lip:   flat RAMP_LIP-long block at the +X end
        wedge: slope over the remaining run, resting on the slab
        slab:  WEDGE_INSET-high base under the slope
    """
    sx, sy, sz = size
    # Inverted ramps hang the slab from the top and flip the wedge
    side = -1.0 if inverted else 1.0
    run = sx - RAMP_LIP
    center = -RAMP_LIP / 2

    lip = (
        PartDef()
        .with_size(RAMP_LIP, sz, sy)
        .with_offset(sx / 2 - RAMP_LIP / 2, 0.0, 0.0)
    )

    wedge = (
        PartDef("WedgePart")
        .with_size(sy, sz - WEDGE_INSET, run)
        .with_offset(center, side * WEDGE_INSET / 2, 0.0)
    )
    if inverted:
        wedge.with_rotation("x", pi)
    wedge.with_rotation("y", pi / 2)

    slab = (
        PartDef()
        .with_size(run, WEDGE_INSET, sy)
        .with_offset(center, side * (-sz / 2 + WEDGE_INSET / 2), 0.0)
    )

    return [lip, wedge, slab]


def default_ramp(size: Size) -> List[PartDef]:
    return _ramp(size, inverted=False)


def default_ramp_inverted(size: Size) -> List[PartDef]:
    return _ramp(size, inverted=True)


def default_wedge(size: Size) -> List[PartDef]:
    """Full-length wedge on a WEDGE_INSET slab."""
    sx, sy, sz = size
    return [
        PartDef("WedgePart")
        .with_size(sy, sz - WEDGE_INSET, sx)
        .with_offset(0.0, WEDGE_INSET / 2, 0.0)
        .with_rotation("y", pi / 2),
        PartDef()
        .with_size(sy, WEDGE_INSET, sx)
        .with_offset(0.0, -sz / 2 + WEDGE_INSET / 2, 0.0)
        .with_rotation("y", pi / 2),
    ]


# ----------------------------------------------------------------------
# Side wedges and corners
# ----------------------------------------------------------------------

def _side_wedge(size: Size, right_surface: SurfaceType) -> List[PartDef]:
    sx, sy, sz = size
    return [
        PartDef("WedgePart")
        .with_size(sz, sx, sy)
        .with_rotation("z", pi / 2)
        .with_surfaces(
            top=SurfaceType.SMOOTH,
            bottom=SurfaceType.SMOOTH,
            left=SurfaceType.INLET,
            right=right_surface,
        )
    ]


def default_side_wedge(size: Size) -> List[PartDef]:
    return _side_wedge(size, SurfaceType.STUDS)


def default_side_wedge_tile(size: Size) -> List[PartDef]:
    return _side_wedge(size, SurfaceType.SMOOTH)


def micro_wedge(size: Size) -> List[PartDef]:
    sx, sy, sz = size
    return [
        PartDef("WedgePart")
        .with_size(sz, sy, sx)
        .with_rotation("z", pi / 2)
        .with_rotation("x", -pi / 2)
        .with_rotation("y", pi)
        .with_surfaces(bottom=SurfaceType.SMOOTH)
    ]


def micro_wedge_inner_corner(size: Size) -> List[PartDef]:
    """Two crossing wedges; the first is turned a quarter about the brick's up axis."""
    sx, sy, sz = size
    return [
        PartDef("WedgePart")
        .with_size(sx, sz, sy)
        .with_rotation_adjustment(3)
        .with_surfaces(bottom=SurfaceType.SMOOTH),
        PartDef("WedgePart")
        .with_size(sy, sz, sx)
        .with_surfaces(bottom=SurfaceType.SMOOTH),
    ]


# ----------------------------------------------------------------------
# Rounded parts (fixed size assets)
# ----------------------------------------------------------------------

def _round(height: float, diameter: float) -> Rule:
    """Cylinder rule; the cylinder axis is local X, turned upright."""
    def rule(size: Size) -> List[PartDef]:
        return [
            PartDef()
            .with_size(height, diameter, diameter)
            .with_rotation("z", pi / 2)
            .with_property("Shape", PartType.CYLINDER)
            .with_surfaces(
                top=SurfaceType.SMOOTH,
                bottom=SurfaceType.SMOOTH,
                left=SurfaceType.INLET,
                right=SurfaceType.STUDS,
            )
        ]
    return rule


BRICK_HEIGHT = 1.2
PLATE_HEIGHT = 0.4


RULES: Dict[str, Rule] = {
    "PB_DefaultBrick": default_brick,
    "PB_DefaultTile": default_tile,
    "PB_DefaultMicroBrick": micro_brick,
    "PB_DefaultRamp": default_ramp,
    "PB_DefaultRampInverted": default_ramp_inverted,
    "PB_DefaultWedge": default_wedge,
    "PB_DefaultSideWedge": default_side_wedge,
    "PB_DefaultSideWedgeTile": default_side_wedge_tile,
    "PB_DefaultMicroWedge": micro_wedge,
    "PB_DefaultMicroWedgeInnerCorner": micro_wedge_inner_corner,
    "B_2x2_Round": _round(BRICK_HEIGHT, 2.0),
    "B_2x2F_Round": _round(PLATE_HEIGHT, 2.0),
    "B_1x1_Round": _round(BRICK_HEIGHT, 1.0),
    "B_1x1_Cone": _round(BRICK_HEIGHT, 1.0),
    "B_1x1F_Round": _round(BRICK_HEIGHT, 1.0),
}


class BrickConverter:
    """
    Converts single bricks into resolved instance descriptors.

    Conversion depends only on the brick and the read-only save metadata,
    so one converter can be shared across threads.
    """

    def __init__(
        self,
        size_scale: float = SIZE_SCALE,
        position_scale: float = POSITION_SCALE,
        rules: Optional[Dict[str, Rule]] = None
    ):
        """
        Initialize the converter.

        Args:
            size_scale: Source size units per world unit
            position_scale: Source position units per world unit
            rules: Asset name -> rule table (default: RULES)
        """
        self.size_scale = size_scale
        self.position_scale = position_scale
        self.rules = dict(RULES if rules is None else rules)

    def has_rule(self, asset: str) -> bool:
        return asset in self.rules

    def supported_assets(self) -> List[str]:
        return sorted(self.rules)

    def normalized_size(self, brick: Brick) -> Size:
        """Brick size in world units, source axis order; zeros for fixed-size assets."""
        if brick.size is None:
            return (0.0, 0.0, 0.0)
        x, y, z = np.asarray(brick.size, dtype=np.float64) / self.size_scale
        return (float(x), float(y), float(z))

    def decompose(self, asset: str, size: Size) -> Optional[List[PartDef]]:
        """
        Split an asset of the given size into PartDefs.

        Returns:
            Non-empty list of PartDefs, or None when the asset has no rule
        """
        rule = self.rules.get(asset)
        if rule is None:
            return None
        return rule(size)

    def convert(self, brick: Brick, save: SaveData) -> Optional[List[InstanceDescriptor]]:
        """
        Convert a brick into resolved instances.

        Args:
            brick: Brick to convert
            save: Shared save metadata

        Returns:
            Instances in rule order, or None when the asset has no rule

        Raises:
            MalformedSaveError: If the brick indexes outside the save tables
        """
        asset = save.asset_name(brick)
        parts = self.decompose(asset, self.normalized_size(brick))
        if parts is None:
            return None

        logger.debug("%s -> %d part(s)", asset, len(parts))
        return [part.resolve(save, brick, self.position_scale) for part in parts]
