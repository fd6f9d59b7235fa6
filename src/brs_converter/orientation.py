"""
Brick Orientation Table

Bricks are oriented by a face direction (0-5) and a quarter-turn rotation
(0-3) about that direction. The 24 combinations map to fixed rotation
matrices in the target coordinate system.

Coordinate Systems:
- Source (save file): Right-handed, Z-up (+X, +Y horizontal, +Z Up)
- Target (model): Right-handed, Y-up (+X Right, +Y Up, +Z Back)

Each entry is written as a right/up/forward basis already expressed in the
target convention, so the lookup performs the Y/Z swap as well. The matrix
columns are (right, up, -forward).

Index layout: (direction << 2) | rotation
"""

from enum import IntEnum
from typing import Tuple
import numpy as np


Vec3 = Tuple[float, float, float]

DIRECTION_COUNT = 6
ROTATION_COUNT = 4


class Direction(IntEnum):
    """Face direction of a brick in the source save."""
    X_POSITIVE = 0
    X_NEGATIVE = 1
    Y_POSITIVE = 2
    Y_NEGATIVE = 3
    Z_POSITIVE = 4
    Z_NEGATIVE = 5


class Rotation(IntEnum):
    """Quarter-turn rotation about the face direction."""
    DEG_0 = 0
    DEG_90 = 1
    DEG_180 = 2
    DEG_270 = 3


def _basis(right: Vec3, up: Vec3, forward: Vec3) -> np.ndarray:
    """Build a rotation matrix with columns (right, up, -forward)."""
    return np.array([
        [right[0], up[0], -forward[0]],
        [right[1], up[1], -forward[1]],
        [right[2], up[2], -forward[2]],
    ], dtype=np.float64)


_BASES = [
    # X_POSITIVE
    ((0.0, -1.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, -1.0)),
    ((0.0, 0.0, 1.0), (1.0, 0.0, 0.0), (0.0, -1.0, 0.0)),
    ((0.0, 1.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 1.0)),
    ((0.0, 0.0, -1.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
    # X_NEGATIVE
    ((0.0, -1.0, 0.0), (-1.0, 0.0, 0.0), (0.0, 0.0, 1.0)),
    ((0.0, 0.0, -1.0), (-1.0, 0.0, 0.0), (0.0, -1.0, 0.0)),
    ((0.0, 1.0, 0.0), (-1.0, 0.0, 0.0), (0.0, 0.0, -1.0)),
    ((0.0, 0.0, 1.0), (-1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
    # Y_POSITIVE
    ((0.0, -1.0, 0.0), (0.0, 0.0, 1.0), (1.0, 0.0, 0.0)),
    ((-1.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, -1.0, 0.0)),
    ((0.0, 1.0, 0.0), (0.0, 0.0, 1.0), (-1.0, 0.0, 0.0)),
    ((1.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 1.0, 0.0)),
    # Y_NEGATIVE
    ((0.0, -1.0, 0.0), (0.0, 0.0, -1.0), (-1.0, 0.0, 0.0)),
    ((1.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, -1.0, 0.0)),
    ((0.0, 1.0, 0.0), (0.0, 0.0, -1.0), (1.0, 0.0, 0.0)),
    ((-1.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 1.0, 0.0)),
    # Z_POSITIVE
    ((-1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)),
    ((0.0, 0.0, -1.0), (0.0, 1.0, 0.0), (-1.0, 0.0, 0.0)),
    ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, -1.0)),
    ((0.0, 0.0, 1.0), (0.0, 1.0, 0.0), (1.0, 0.0, 0.0)),
    # Z_NEGATIVE
    ((1.0, 0.0, 0.0), (0.0, -1.0, 0.0), (0.0, 0.0, 1.0)),
    ((0.0, 0.0, -1.0), (0.0, -1.0, 0.0), (1.0, 0.0, 0.0)),
    ((-1.0, 0.0, 0.0), (0.0, -1.0, 0.0), (0.0, 0.0, -1.0)),
    ((0.0, 0.0, 1.0), (0.0, -1.0, 0.0), (-1.0, 0.0, 0.0)),
]

# (24, 3, 3) read-only lookup table
ORIENTATION_TABLE = np.stack([_basis(*basis) for basis in _BASES])
ORIENTATION_TABLE.setflags(write=False)


def orientation_index(direction: int, rotation: int, adjustment: int = 0) -> int:
    """
    Table index for a direction/rotation pair.

    Args:
        direction: Face direction, 0 <= direction < 6
        rotation: Quarter-turn rotation, 0 <= rotation < 4
        adjustment: Extra quarter turns added mod 4 before lookup

    Returns:
        Index into ORIENTATION_TABLE
    """
    if not 0 <= direction < DIRECTION_COUNT:
        raise ValueError(f"Direction out of range: {direction}")
    if not 0 <= rotation < ROTATION_COUNT:
        raise ValueError(f"Rotation out of range: {rotation}")

    return (int(direction) << 2) | ((int(rotation) + int(adjustment)) % ROTATION_COUNT)


def orientation_matrix(direction: int, rotation: int, adjustment: int = 0) -> np.ndarray:
    """3x3 target-space rotation for a direction/rotation pair."""
    return ORIENTATION_TABLE[orientation_index(direction, rotation, adjustment)]
