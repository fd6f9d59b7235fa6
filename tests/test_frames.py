"""
Unit tests for the frame algebra and the orientation table.
"""

import sys
from math import pi
from pathlib import Path
import numpy as np
import unittest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from brs_converter.cframe import CoordinateFrame, compose, decompose, is_orthonormal
from brs_converter.orientation import (
    ORIENTATION_TABLE, Direction, orientation_index, orientation_matrix
)


def random_frames(count: int, seed: int = 0):
    """Frames built only from the primitive constructors."""
    rng = np.random.default_rng(seed)
    frames = []
    for _ in range(count):
        x, y, z = rng.uniform(-10, 10, size=3)
        ax, ay, az = rng.uniform(-pi, pi, size=3)
        frames.append(compose(
            CoordinateFrame.translation(x, y, z),
            CoordinateFrame.rotation_x(ax),
            CoordinateFrame.rotation_y(ay),
            CoordinateFrame.rotation_z(az),
        ))
    return frames


class TestCoordinateFrame(unittest.TestCase):
    """Tests for CoordinateFrame."""

    def test_identity(self):
        """Identity has no translation and no rotation."""
        frame = CoordinateFrame.identity()
        assert np.array_equal(frame.matrix, np.eye(4))
        assert np.array_equal(frame.position(), np.zeros(3))

    def test_translation(self):
        """Translation moves points without rotating them."""
        frame = CoordinateFrame.translation(1, 2, 3)
        assert np.allclose(frame.position(), [1, 2, 3])
        assert np.allclose(frame.rotation_matrix(), np.eye(3))
        assert np.allclose(frame.transform_points([1, 1, 1]), [2, 3, 4])

    def test_axis_rotations(self):
        """Quarter turns follow the right-hand rule."""
        rx = CoordinateFrame.rotation_x(pi / 2)
        ry = CoordinateFrame.rotation_y(pi / 2)
        rz = CoordinateFrame.rotation_z(pi / 2)

        assert np.allclose(rx.transform_points([0, 1, 0]), [0, 0, 1])
        assert np.allclose(ry.transform_points([0, 0, 1]), [1, 0, 0])
        assert np.allclose(rz.transform_points([1, 0, 0]), [0, 1, 0])

    def test_named_axis(self):
        """rotation() dispatches on axis name or index."""
        assert CoordinateFrame.rotation("x", 0.3).allclose(CoordinateFrame.rotation_x(0.3))
        assert CoordinateFrame.rotation("Y", 0.3).allclose(CoordinateFrame.rotation_y(0.3))
        assert CoordinateFrame.rotation(2, 0.3).allclose(CoordinateFrame.rotation_z(0.3))

        with self.assertRaises(ValueError):
            CoordinateFrame.rotation("w", 0.3)

    def test_angles(self):
        """Euler angles apply X, then Y, then Z."""
        frame = CoordinateFrame.angles(0.1, 0.2, 0.3)
        expected = compose(
            CoordinateFrame.rotation_z(0.3),
            CoordinateFrame.rotation_y(0.2),
            CoordinateFrame.rotation_x(0.1),
        )
        assert frame.allclose(expected)

    def test_compose_applies_right_first(self):
        """compose(a, b) applies b, then a."""
        move = CoordinateFrame.translation(1, 0, 0)
        turn = CoordinateFrame.rotation_z(pi / 2)

        # Rotate then move: (1, 0, 0) -> (0, 1, 0) -> (1, 1, 0)
        assert np.allclose(compose(move, turn).transform_points([1, 0, 0]), [1, 1, 0])
        # Move then rotate: (1, 0, 0) -> (2, 0, 0) -> (0, 2, 0)
        assert np.allclose(compose(turn, move).transform_points([1, 0, 0]), [0, 2, 0])

    def test_matmul_operator(self):
        """The @ operator is composition."""
        a, b = random_frames(2)
        assert (a @ b).allclose(compose(a, b))

    def test_associativity(self):
        """compose(compose(a, b), c) == compose(a, compose(b, c))."""
        frames = random_frames(30, seed=1)
        for a, b, c in zip(frames[0::3], frames[1::3], frames[2::3]):
            left = compose(compose(a, b), c)
            right = compose(a, compose(b, c))
            assert left.allclose(right, atol=1e-9)

    def test_identity_laws(self):
        """Identity is neutral on both sides."""
        identity = CoordinateFrame.identity()
        for frame in random_frames(10, seed=2):
            assert compose(identity, frame).allclose(frame)
            assert compose(frame, identity).allclose(frame)

    def test_not_commutative(self):
        """Swapping operands changes the result."""
        move = CoordinateFrame.translation(0, 0, 5)
        turn = CoordinateFrame.rotation_x(pi / 2)
        assert not compose(move, turn).allclose(compose(turn, move))

    def test_rotation_stays_orthonormal(self):
        """Compositions of primitives keep an orthonormal rotation block."""
        frame = compose(*random_frames(12, seed=3))
        assert is_orthonormal(frame.rotation_matrix(), atol=1e-9)

    def test_decompose(self):
        """decompose() splits position and rotation."""
        rotation = CoordinateFrame.rotation_y(0.7).rotation_matrix()
        frame = CoordinateFrame.from_rotation(4, 5, 6, rotation)

        position, rot = decompose(frame)
        assert np.allclose(position, [4, 5, 6])
        assert np.allclose(rot, rotation)

    def test_immutable(self):
        """The matrix cannot be written through."""
        frame = CoordinateFrame.translation(1, 2, 3)
        with self.assertRaises(ValueError):
            frame.matrix[0, 3] = 10.0

        # Extracted parts are copies
        position = frame.position()
        position[0] = 99.0
        assert frame.position()[0] == 1.0

    def test_bad_shape(self):
        """Only 4x4 matrices are accepted."""
        with self.assertRaises(ValueError):
            CoordinateFrame(np.eye(3))


class TestOrientationTable(unittest.TestCase):
    """Tests for the 24-entry orientation table."""

    def test_shape(self):
        """24 entries of 3x3 matrices."""
        assert ORIENTATION_TABLE.shape == (24, 3, 3)

    def test_orthonormal(self):
        """Every entry has unit, mutually orthogonal columns."""
        for i, rotation in enumerate(ORIENTATION_TABLE):
            for c in range(3):
                assert np.isclose(np.linalg.norm(rotation[:, c]), 1.0), i
            assert np.isclose(np.dot(rotation[:, 0], rotation[:, 1]), 0.0), i
            assert np.isclose(np.dot(rotation[:, 0], rotation[:, 2]), 0.0), i
            assert np.isclose(np.dot(rotation[:, 1], rotation[:, 2]), 0.0), i

    def test_proper_rotations(self):
        """No entry is a reflection."""
        for rotation in ORIENTATION_TABLE:
            assert np.isclose(np.linalg.det(rotation), 1.0)

    def test_entries_distinct(self):
        """All 24 orientations are different."""
        flat = {tuple(np.round(r, 6).ravel()) for r in ORIENTATION_TABLE}
        assert len(flat) == 24

    def test_index_layout(self):
        """Index is (direction << 2) | rotation."""
        seen = set()
        for direction in range(6):
            for rotation in range(4):
                index = orientation_index(direction, rotation)
                assert index == (direction << 2) | rotation
                seen.add(index)
        assert seen == set(range(24))

    def test_adjustment_wraps(self):
        """Adjustments are added mod 4 within the same direction."""
        assert orientation_index(2, 3, 1) == orientation_index(2, 0)
        assert orientation_index(5, 1, 3) == orientation_index(5, 0)
        assert orientation_index(0, 2, 6) == orientation_index(0, 0)

    def test_quarter_turn_consistency(self):
        """Each rotation step is a -90 degree turn about the local up axis."""
        step = CoordinateFrame.rotation_y(-pi / 2).rotation_matrix()
        for direction in range(6):
            for rotation in range(4):
                current = orientation_matrix(direction, rotation)
                following = orientation_matrix(direction, rotation, 1)
                assert np.allclose(following, current @ step, atol=1e-12)

    def test_up_axis(self):
        """Upward-facing bricks keep the target +Y axis up."""
        for rotation in range(4):
            matrix = orientation_matrix(Direction.Z_POSITIVE, rotation)
            assert np.allclose(matrix[:, 1], [0, 1, 0])

            matrix = orientation_matrix(Direction.Z_NEGATIVE, rotation)
            assert np.allclose(matrix[:, 1], [0, -1, 0])

    def test_identity_entry(self):
        """Upward facing, half turn is the identity."""
        assert np.allclose(orientation_matrix(Direction.Z_POSITIVE, 2), np.eye(3))

    def test_out_of_range(self):
        """Invalid direction or rotation is rejected."""
        with self.assertRaises(ValueError):
            orientation_index(6, 0)
        with self.assertRaises(ValueError):
            orientation_index(0, 4)
        with self.assertRaises(ValueError):
            orientation_index(-1, 0)

    def test_read_only(self):
        """The table cannot be modified."""
        with self.assertRaises(ValueError):
            ORIENTATION_TABLE[0, 0, 0] = 5.0


if __name__ == "__main__":
    unittest.main(verbosity=2)
