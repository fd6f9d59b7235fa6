"""
Primitive Mesh Generation

Builds triangle meshes for resolved parts so a converted model can be
previewed in any 3D tool. Each primitive is generated in a unit local space,
scaled by the part size, then placed with the part's resolved frame.

Supported shapes (target conventions):
- Block: axis-aligned box
- WedgePart: full height along the +Z face, sloping down to the -Z bottom edge
- Cylinder: axis along local X, diameter = min(size.y, size.z)

All shapes are convex, so face winding is fixed once in unit space by
pointing every face normal away from the shape centroid.
"""

from typing import List, NamedTuple, Sequence
import numpy as np

from .part import InstanceDescriptor, PartType


CYLINDER_SEGMENTS = 16


class MeshData(NamedTuple):
    """Container for mesh geometry data."""
    vertices: np.ndarray     # (N, 3) float32 positions
    normals: np.ndarray      # (N, 3) float32 normals
    colors: np.ndarray       # (N, 4) uint8 RGBA colors
    indices: np.ndarray      # (M,) uint32 triangle indices


def _outward(vertices: np.ndarray, faces: List[List[int]]) -> List[List[int]]:
    """Reverse any face loop whose normal points into the shape."""
    centroid = vertices.mean(axis=0)
    oriented = []
    for loop in faces:
        v0, v1, v2 = vertices[loop[0]], vertices[loop[1]], vertices[loop[2]]
        normal = np.cross(v1 - v0, v2 - v0)
        face_center = vertices[loop].mean(axis=0)
        if np.dot(normal, face_center - centroid) < 0:
            loop = loop[::-1]
        oriented.append(list(loop))
    return oriented


def _unit_box():
    vertices = np.array([
        [(i & 1) - 0.5, ((i >> 1) & 1) - 0.5, ((i >> 2) & 1) - 0.5]
        for i in range(8)
    ], dtype=np.float64)
    faces = [
        [1, 3, 7, 5],  # +X
        [0, 4, 6, 2],  # -X
        [2, 6, 7, 3],  # +Y
        [0, 1, 5, 4],  # -Y
        [4, 5, 7, 6],  # +Z
        [0, 2, 3, 1],  # -Z
    ]
    return vertices, _outward(vertices, faces)


def _unit_wedge():
    vertices = np.array([
        [-0.5, -0.5, -0.5],
        [0.5, -0.5, -0.5],
        [-0.5, -0.5, 0.5],
        [0.5, -0.5, 0.5],
        [-0.5, 0.5, 0.5],
        [0.5, 0.5, 0.5],
    ], dtype=np.float64)
    faces = [
        [0, 1, 3, 2],  # bottom
        [2, 3, 5, 4],  # back
        [0, 4, 5, 1],  # slope
        [0, 2, 4],     # left
        [1, 5, 3],     # right
    ]
    return vertices, _outward(vertices, faces)


def _unit_cylinder(segments: int = CYLINDER_SEGMENTS):
    angles = np.linspace(0.0, 2.0 * np.pi, segments, endpoint=False)
    ring = np.column_stack([0.5 * np.cos(angles), 0.5 * np.sin(angles)])

    vertices = np.vstack([
        np.column_stack([np.full(segments, -0.5), ring]),
        np.column_stack([np.full(segments, 0.5), ring]),
    ])

    faces = []
    for i in range(segments):
        j = (i + 1) % segments
        faces.append([i, j, segments + j, segments + i])
    faces.append(list(range(segments)))
    faces.append(list(range(segments, 2 * segments)))
    return vertices, _outward(vertices, faces)


_UNIT_SHAPES = {
    "block": _unit_box(),
    "wedge": _unit_wedge(),
    "cylinder": _unit_cylinder(),
}


def _to_byte(value: float) -> int:
    return int(round(max(0.0, min(1.0, value)) * 255.0))


def shape_of(part: InstanceDescriptor) -> str:
    """Mesh shape used for a part."""
    if part.class_name == "WedgePart":
        return "wedge"
    if part.properties.get("Shape") == PartType.CYLINDER:
        return "cylinder"
    return "block"


def build_mesh(part: InstanceDescriptor) -> MeshData:
    """
    Build a flat-shaded triangle mesh for one resolved part.

    Args:
        part: Part descriptor with size, position and rotation

    Returns:
        MeshData in world (target) coordinates
    """
    shape = shape_of(part)
    unit_vertices, faces = _UNIT_SHAPES[shape]

    size = np.asarray(part.size, dtype=np.float64)
    if shape == "cylinder":
        diameter = min(size[1], size[2])
        size = np.array([size[0], diameter, diameter])

    world = part.frame.transform_points(unit_vertices * size)

    color = part.color or (1.0, 1.0, 1.0)
    rgba = np.array([
        _to_byte(color[0]),
        _to_byte(color[1]),
        _to_byte(color[2]),
        _to_byte(1.0 - part.transparency),
    ], dtype=np.uint8)

    vertices, normals, indices = [], [], []
    for loop in faces:
        points = world[loop]
        normal = np.cross(points[1] - points[0], points[2] - points[0])
        length = np.linalg.norm(normal)
        if length > 1e-12:
            normal = normal / length

        base = len(vertices)
        vertices.extend(points)
        normals.extend([normal] * len(loop))
        # Triangle fan (faces are convex)
        for k in range(1, len(loop) - 1):
            indices.extend([base, base + k, base + k + 1])

    return MeshData(
        vertices=np.array(vertices, dtype=np.float32).reshape(-1, 3),
        normals=np.array(normals, dtype=np.float32).reshape(-1, 3),
        colors=np.tile(rgba, (len(vertices), 1)),
        indices=np.array(indices, dtype=np.uint32),
    )


def merge_meshes(meshes: Sequence[MeshData]) -> MeshData:
    """Concatenate meshes, offsetting indices."""
    if not meshes:
        return MeshData(
            vertices=np.zeros((0, 3), dtype=np.float32),
            normals=np.zeros((0, 3), dtype=np.float32),
            colors=np.zeros((0, 4), dtype=np.uint8),
            indices=np.zeros(0, dtype=np.uint32),
        )

    offsets = np.cumsum([0] + [len(m.vertices) for m in meshes[:-1]])
    return MeshData(
        vertices=np.concatenate([m.vertices for m in meshes]),
        normals=np.concatenate([m.normals for m in meshes]),
        colors=np.concatenate([m.colors for m in meshes]),
        indices=np.concatenate([
            m.indices + np.uint32(offset) for m, offset in zip(meshes, offsets)
        ]).astype(np.uint32),
    )


def build_model_mesh(model: InstanceDescriptor, skip_invisible: bool = True) -> MeshData:
    """
    Build one mesh for every part of a model tree.

    Args:
        model: Root descriptor
        skip_invisible: Leave out fully transparent parts
    """
    meshes = [
        build_mesh(part) for part in model.iter_parts()
        if not (skip_invisible and part.transparency >= 1.0)
    ]
    return merge_meshes(meshes)
