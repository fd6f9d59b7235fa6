"""
Coordinate Frame Algebra

Affine transforms used to place converted primitives in the target (Y-up)
coordinate system.

A CoordinateFrame is a 4x4 homogeneous matrix:
    | R00 R01 R02 tx |
    | R10 R11 R12 ty |
    | R20 R21 R22 tz |
    |  0   0   0   1 |

Composition follows matrix multiplication: compose(a, b) applies b first,
then a. Nothing is re-orthogonalized, so the rotation block stays orthonormal
only while every composed frame comes from the constructors in this module.
"""

from typing import Optional, Sequence, Tuple, Union
import math
import numpy as np


Axis = Union[str, int]

_AXIS_NAMES = {"x": 0, "y": 1, "z": 2}


class CoordinateFrame:
    """
    Immutable affine transform (rotation + translation).

    Frames are values: every operation returns a new frame and the
    underlying matrix is kept read-only.
    """

    __slots__ = ("_matrix",)

    def __init__(self, matrix: Optional[np.ndarray] = None):
        """
        Create a frame from a 4x4 homogeneous matrix.

        Args:
            matrix: 4x4 array; identity when omitted
        """
        if matrix is None:
            matrix = np.eye(4, dtype=np.float64)
        else:
            matrix = np.array(matrix, dtype=np.float64)
            if matrix.shape != (4, 4):
                raise ValueError(f"Expected a 4x4 matrix, got shape {matrix.shape}")
        matrix.setflags(write=False)
        self._matrix = matrix

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls) -> "CoordinateFrame":
        return cls()

    @classmethod
    def translation(cls, x: float, y: float, z: float) -> "CoordinateFrame":
        """Pure translation by (x, y, z)."""
        matrix = np.eye(4, dtype=np.float64)
        matrix[:3, 3] = (x, y, z)
        return cls(matrix)

    @classmethod
    def from_rotation(
        cls,
        x: float, y: float, z: float,
        rotation: np.ndarray
    ) -> "CoordinateFrame":
        """
        Frame with the given 3x3 rotation block, placed at (x, y, z).

        Args:
            x, y, z: Translation
            rotation: 3x3 rotation matrix (or 9 values in row-major order)
        """
        matrix = np.eye(4, dtype=np.float64)
        matrix[:3, :3] = np.asarray(rotation, dtype=np.float64).reshape(3, 3)
        matrix[:3, 3] = (x, y, z)
        return cls(matrix)

    @classmethod
    def rotation_x(cls, angle: float) -> "CoordinateFrame":
        """Right-handed rotation about the X axis (radians)."""
        c, s = math.cos(angle), math.sin(angle)
        return cls.from_rotation(0.0, 0.0, 0.0, [
            [1.0, 0.0, 0.0],
            [0.0, c, -s],
            [0.0, s, c],
        ])

    @classmethod
    def rotation_y(cls, angle: float) -> "CoordinateFrame":
        """Right-handed rotation about the Y axis (radians)."""
        c, s = math.cos(angle), math.sin(angle)
        return cls.from_rotation(0.0, 0.0, 0.0, [
            [c, 0.0, s],
            [0.0, 1.0, 0.0],
            [-s, 0.0, c],
        ])

    @classmethod
    def rotation_z(cls, angle: float) -> "CoordinateFrame":
        """Right-handed rotation about the Z axis (radians)."""
        c, s = math.cos(angle), math.sin(angle)
        return cls.from_rotation(0.0, 0.0, 0.0, [
            [c, -s, 0.0],
            [s, c, 0.0],
            [0.0, 0.0, 1.0],
        ])

    @classmethod
    def rotation(cls, axis: Axis, angle: float) -> "CoordinateFrame":
        """
        Rotation about a named axis.

        Args:
            axis: "x", "y", "z" (or 0, 1, 2)
            angle: Angle in radians
        """
        index = _AXIS_NAMES.get(axis.lower()) if isinstance(axis, str) else axis
        if index == 0:
            return cls.rotation_x(angle)
        elif index == 1:
            return cls.rotation_y(angle)
        elif index == 2:
            return cls.rotation_z(angle)
        raise ValueError(f"Unknown rotation axis: {axis!r}")

    @classmethod
    def angles(cls, x: float, y: float, z: float) -> "CoordinateFrame":
        """Euler rotation applied X first, then Y, then Z."""
        return compose(cls.rotation_z(z), cls.rotation_y(y), cls.rotation_x(x))

    # ------------------------------------------------------------------
    # Decomposition
    # ------------------------------------------------------------------

    @property
    def matrix(self) -> np.ndarray:
        """The read-only 4x4 homogeneous matrix."""
        return self._matrix

    def position(self) -> np.ndarray:
        """Translation vector (3,)."""
        return self._matrix[:3, 3].copy()

    def rotation_matrix(self) -> np.ndarray:
        """Rotation block (3, 3)."""
        return self._matrix[:3, :3].copy()

    def transform_points(self, points: np.ndarray) -> np.ndarray:
        """
        Apply the frame to an array of points.

        Args:
            points: Array of shape (N, 3) or (3,)

        Returns:
            Transformed points with the same shape
        """
        points = np.asarray(points, dtype=np.float64)
        rotated = points @ self._matrix[:3, :3].T
        return rotated + self._matrix[:3, 3]

    def allclose(self, other: "CoordinateFrame", atol: float = 1e-9) -> bool:
        """Element-wise comparison within an absolute tolerance."""
        return bool(np.allclose(self._matrix, other._matrix, rtol=0.0, atol=atol))

    def __matmul__(self, other: "CoordinateFrame") -> "CoordinateFrame":
        if not isinstance(other, CoordinateFrame):
            return NotImplemented
        return CoordinateFrame(self._matrix @ other._matrix)

    def __repr__(self) -> str:
        x, y, z = self._matrix[:3, 3]
        return f"CoordinateFrame(position=({x:.4g}, {y:.4g}, {z:.4g}))"


def compose(*frames: CoordinateFrame) -> CoordinateFrame:
    """
    Compose frames right-to-left.

    compose(a, b) applies b first, then a. With more arguments the
    rightmost frame is applied first.
    """
    if not frames:
        return CoordinateFrame.identity()

    matrix = frames[0].matrix
    for frame in frames[1:]:
        matrix = matrix @ frame.matrix
    return CoordinateFrame(matrix)


def decompose(frame: CoordinateFrame) -> Tuple[np.ndarray, np.ndarray]:
    """Split a frame into (position, rotation matrix) for output."""
    return frame.position(), frame.rotation_matrix()


def is_orthonormal(rotation: Sequence[Sequence[float]], atol: float = 1e-9) -> bool:
    """Check that a 3x3 matrix has unit, mutually orthogonal columns."""
    rotation = np.asarray(rotation, dtype=np.float64)
    return bool(np.allclose(rotation.T @ rotation, np.eye(3), rtol=0.0, atol=atol))
