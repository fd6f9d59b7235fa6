"""
JSON Instance Tree Exporter

Writes a converted model as a nested snapshot tree that model writers and
importers can consume without knowing about this package:

    {
      "_class": "Model",
      "_name": "castle.json",
      "_properties": {},
      "_children": [
        {"_class": "Part", "_name": "PB_DefaultBrick (dir 4, rot 0)",
         "_properties": {"Size": [2, 1.2, 2],
                         "CFrame": {"position": [...], "rotation": [[...], ...]},
                         "Color": [r, g, b], "Transparency": 0.0,
                         "CanCollide": true, "Anchored": true, ...},
         "_children": []}
      ]
    }

Enum values are written as {"enum": "<Type>.<NAME>", "value": <int>}.
"""

from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Union
import json
import numpy as np

from ..part import InstanceDescriptor


FORMAT_VERSION = 1


def encode_value(value: Any) -> Any:
    """Convert property values into JSON-compatible data."""
    if isinstance(value, IntEnum):
        return {"enum": f"{type(value).__name__}.{value.name}", "value": int(value)}
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, (np.floating, np.integer, np.bool_)):
        return value.item()
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): encode_value(v) for k, v in value.items()}
    return value


def descriptor_to_dict(node: InstanceDescriptor) -> Dict[str, Any]:
    """
    Convert a descriptor subtree to snapshot form.

    Parts get their geometry and policy fields as properties; other nodes
    only carry a color (lights) and their explicit properties.
    """
    properties: Dict[str, Any] = {}

    if node.is_part:
        properties["Size"] = encode_value(node.size)
        properties["CFrame"] = {
            "position": encode_value(node.position),
            "rotation": encode_value(node.rotation),
        }

    if node.color is not None:
        properties["Color"] = [float(c) for c in node.color]

    if node.is_part:
        if node.material is not None:
            properties["Material"] = encode_value(node.material)
        properties["Transparency"] = float(node.transparency)
        properties["CanCollide"] = bool(node.can_collide)
        properties["Anchored"] = bool(node.anchored)

    for key, value in node.properties.items():
        properties[key] = encode_value(value)

    return {
        "_class": node.class_name,
        "_name": node.name,
        "_properties": properties,
        "_children": [descriptor_to_dict(child) for child in node.children],
    }


class JSONExporter:
    """Export a model tree to a JSON snapshot file."""

    def __init__(self, indent: int = 2):
        """
        Initialize the exporter.

        Args:
            indent: JSON indentation (None for compact output)
        """
        self.indent = indent

    def to_dict(self, model: InstanceDescriptor) -> Dict[str, Any]:
        return {
            "version": FORMAT_VERSION,
            "root": descriptor_to_dict(model),
        }

    def export(self, model: InstanceDescriptor, output_path: Union[str, Path]):
        """
        Write the model tree.

        Args:
            model: Root descriptor from SaveConverter
            output_path: Output file path
        """
        output_path = Path(output_path)

        if not model.children and not model.is_part:
            raise ValueError("Cannot export empty model")

        with open(output_path, 'w', encoding="utf-8") as f:
            json.dump(self.to_dict(model), f, indent=self.indent)
