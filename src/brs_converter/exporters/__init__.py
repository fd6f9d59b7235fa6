"""
Export modules for converted models.

Supported formats:
- JSON instance tree (.json) - Input for model writers and importers
- Wavefront (.obj) - Geometry preview in any 3D tool
"""

from .json_exporter import JSONExporter
from .obj_exporter import OBJExporter

__all__ = ["JSONExporter", "OBJExporter"]
