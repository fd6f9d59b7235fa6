"""
Wavefront OBJ Format Exporter

OBJ is a universal text-based format supported by virtually all 3D software,
which makes it a convenient preview of a converted model. Every part is
meshed (see brs_converter.mesh) and written as one object.

Options:
- Geometry-only export
- MTL file with per-face materials (one per distinct part color)
- Extended format with vertex colors (v x y z r g b)

Limitations:
- Transparency is only carried by the MTL "d" value
- Cylinders are approximated by prisms
"""

from pathlib import Path
from typing import Union, List
import numpy as np

from ..mesh import MeshData, build_model_mesh
from ..part import InstanceDescriptor


class OBJExporter:
    """
    Export a converted model to Wavefront OBJ format.

    Supports:
    - Standard OBJ with MTL materials
    - Extended OBJ with vertex colors (v x y z r g b)
    """

    def __init__(
        self,
        include_normals: bool = True,
        vertex_colors_mode: str = "extended",
        skip_invisible: bool = True
    ):
        """
        Initialize the exporter.

        Args:
            include_normals: Whether to include vertex normals
            vertex_colors_mode: How to handle vertex colors
                - "none": No colors
                - "extended": v x y z r g b format
                - "mtl": Generate MTL file with materials
            skip_invisible: Leave out fully transparent parts
        """
        if vertex_colors_mode not in ("none", "extended", "mtl"):
            raise ValueError(f"Unknown vertex colors mode: {vertex_colors_mode}")

        self.include_normals = include_normals
        self.vertex_colors_mode = vertex_colors_mode
        self.skip_invisible = skip_invisible

    def export(
        self,
        model: InstanceDescriptor,
        output_path: Union[str, Path],
        model_name: str = None
    ):
        """
        Export a model tree to an OBJ file.

        Args:
            model: Root descriptor from SaveConverter
            output_path: Output file path (.obj)
            model_name: Name for the OBJ object (default: model name)
        """
        mesh = build_model_mesh(model, skip_invisible=self.skip_invisible)
        self.export_mesh(mesh, output_path, model_name or model.name or "brick_model")

    def export_mesh(
        self,
        mesh: MeshData,
        output_path: Union[str, Path],
        model_name: str = "brick_model"
    ):
        """
        Export prebuilt mesh data to an OBJ file.

        Args:
            mesh: MeshData from build_model_mesh
            output_path: Output file path (.obj)
            model_name: Name for the model/object
        """
        output_path = Path(output_path)

        if len(mesh.vertices) == 0:
            raise ValueError("Cannot export empty mesh")

        vertices = mesh.vertices
        normals = mesh.normals
        colors = mesh.colors
        indices = mesh.indices

        lines = []
        lines.append("# brs_converter OBJ Export")
        lines.append(f"# Vertices: {len(vertices)}")
        lines.append(f"# Triangles: {len(indices) // 3}")
        lines.append("")

        if self.vertex_colors_mode == "mtl":
            mtl_path = output_path.with_suffix('.mtl')
            lines.append(f"mtllib {mtl_path.name}")
            lines.append("")

        lines.append(f"o {_sanitize(model_name)}")
        lines.append("")

        # Vertices
        if self.vertex_colors_mode == "extended":
            for v, c in zip(vertices, colors):
                r, g, b = c[0] / 255.0, c[1] / 255.0, c[2] / 255.0
                lines.append(f"v {v[0]:.6f} {v[1]:.6f} {v[2]:.6f} {r:.4f} {g:.4f} {b:.4f}")
        else:
            for v in vertices:
                lines.append(f"v {v[0]:.6f} {v[1]:.6f} {v[2]:.6f}")

        lines.append("")

        normal_indices = None
        if self.include_normals:
            unique_normals, normal_indices = np.unique(
                np.round(normals, 6), axis=0, return_inverse=True
            )
            normal_indices = normal_indices.reshape(-1)
            for n in unique_normals:
                lines.append(f"vn {n[0]:.6f} {n[1]:.6f} {n[2]:.6f}")
            lines.append("")

        if self.vertex_colors_mode == "mtl":
            self._export_with_materials(lines, indices, colors, normal_indices)
        else:
            for i in range(0, len(indices), 3):
                lines.append(self._face(indices, i, normal_indices))

        with open(output_path, 'w') as f:
            f.write('\n'.join(lines) + '\n')

        if self.vertex_colors_mode == "mtl":
            self._write_mtl(colors, output_path.with_suffix('.mtl'))

    @staticmethod
    def _face(indices: np.ndarray, i: int, normal_indices) -> str:
        i0, i1, i2 = indices[i] + 1, indices[i + 1] + 1, indices[i + 2] + 1
        if normal_indices is not None:
            # Flat shading: the first vertex normal stands for the face
            ni = normal_indices[indices[i]] + 1
            return f"f {i0}//{ni} {i1}//{ni} {i2}//{ni}"
        return f"f {i0} {i1} {i2}"

    def _export_with_materials(
        self,
        lines: List[str],
        indices: np.ndarray,
        colors: np.ndarray,
        normal_indices
    ):
        """Export faces grouped by material."""
        material_names = _material_names(colors)

        color_faces = {}
        for i in range(0, len(indices), 3):
            color = tuple(int(c) for c in colors[indices[i]])
            color_faces.setdefault(color, []).append(i)

        for color, face_starts in color_faces.items():
            lines.append(f"usemtl {material_names[color]}")
            for i in face_starts:
                lines.append(self._face(indices, i, normal_indices))
            lines.append("")

    def _write_mtl(self, colors: np.ndarray, mtl_path: Path):
        """Write MTL material file."""
        lines = []
        lines.append("# brs_converter MTL Export")
        lines.append("")

        for color, name in _material_names(colors).items():
            r, g, b, a = (c / 255.0 for c in color)

            lines.append(f"newmtl {name}")
            lines.append(f"Kd {r:.4f} {g:.4f} {b:.4f}")  # Diffuse color
            lines.append(f"Ka {r*0.1:.4f} {g*0.1:.4f} {b*0.1:.4f}")  # Ambient
            lines.append("Ks 0.0 0.0 0.0")
            lines.append("Ns 0")
            lines.append(f"d {a:.4f}")  # Opacity
            lines.append("illum 1")
            lines.append("")

        with open(mtl_path, 'w') as f:
            f.write('\n'.join(lines))


def _material_names(colors: np.ndarray) -> dict:
    """Stable RGBA -> material name mapping."""
    unique = np.unique(colors, axis=0)
    return {
        tuple(int(c) for c in color): f"material_{i}"
        for i, color in enumerate(unique)
    }


def _sanitize(name: str) -> str:
    return "_".join(str(name).split()) or "brick_model"
