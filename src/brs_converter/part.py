"""
Part Definitions and Resolution

A PartDef describes one output primitive relative to its brick: a local
offset frame, a size, and property overrides. resolve() places it in the
world using the brick's orientation and grid position, then applies the
material/visibility/collision policy shared by every shape rule.

Offset convention:
    Each with_offset/with_rotation call is right-multiplied onto the
    accumulated offset (offset = offset @ new). A later call therefore acts
    in the local frame set up by the earlier ones:

        PartDef().with_offset(-0.5, 0.1, 0).with_rotation("y", pi / 2)

    rotates the part in place and then moves its center to (-0.5, 0.1, 0).
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple
import numpy as np

from .cframe import CoordinateFrame, compose
from .color import color_to_perceptual
from .orientation import orientation_matrix
from .save import Brick, Color, SaveData, MAX_MATERIAL_INTENSITY, parse_color


POSITION_SCALE = 10.0

POINT_LIGHT_COMPONENT = "BCD_PointLight"
LIGHT_BRIGHTNESS_DIVISOR = 10.0
LIGHT_RANGE_DIVISOR = 10.0

WHITE = Color(255, 255, 255, 255)


class Material(IntEnum):
    """Target material enum values."""
    PLASTIC = 256
    SMOOTH_PLASTIC = 272
    NEON = 288
    METAL = 1088
    GLASS = 1568
    FORCE_FIELD = 1584


class SurfaceType(IntEnum):
    """Target surface enum values."""
    SMOOTH = 0
    GLUE = 1
    WELD = 2
    STUDS = 3
    INLET = 4
    UNIVERSAL = 5


class PartType(IntEnum):
    """Target part shape enum values."""
    BALL = 0
    BLOCK = 1
    CYLINDER = 2


# material name -> (material, transparency); None keeps the target default
MATERIAL_TABLE: Dict[str, Tuple[Optional[Material], Optional[float]]] = {
    "BMC_Ghost": (Material.NEON, 0.5),
    "BMC_Ghost_Fail": (Material.NEON, 0.5),
    "BMC_Glow": (Material.NEON, None),
    "BMC_Metallic": (Material.METAL, None),
    "BMC_Hologram": (Material.FORCE_FIELD, None),
}

GLASS_MATERIAL = "BMC_Glass"

# property overrides that replace a policy field instead of adding a property
_FIELD_PROPERTIES = {
    "Material": "material",
    "Transparency": "transparency",
    "CanCollide": "can_collide",
    "Anchored": "anchored",
}


@dataclass
class InstanceDescriptor:
    """
    Output node handed to the model writer.

    Parts carry geometry (size, position, rotation) and appearance. Grouping
    nodes, lights and scripts use the same type with geometry left as None.
    """

    class_name: str
    name: str = ""
    size: Optional[np.ndarray] = None
    position: Optional[np.ndarray] = None
    rotation: Optional[np.ndarray] = None
    color: Optional[Tuple[float, float, float]] = None
    material: Optional[Material] = None
    transparency: float = 0.0
    can_collide: bool = True
    anchored: bool = True
    properties: Dict[str, Any] = field(default_factory=dict)
    children: List["InstanceDescriptor"] = field(default_factory=list)

    @property
    def is_part(self) -> bool:
        """True for nodes with resolved geometry."""
        return self.size is not None and self.position is not None

    @property
    def frame(self) -> CoordinateFrame:
        """Resolved world frame of a part."""
        return CoordinateFrame.from_rotation(*self.position, self.rotation)

    def with_name(self, name: str) -> "InstanceDescriptor":
        self.name = name
        return self

    def add_child(self, child: "InstanceDescriptor") -> "InstanceDescriptor":
        self.children.append(child)
        return self

    def iter_parts(self):
        """Yield every part in this subtree, depth first."""
        if self.is_part:
            yield self
        for child in self.children:
            yield from child.iter_parts()


class PartDef:
    """
    Builder for one output primitive of a brick.

    Created, configured and resolved for a single brick; never shared.
    """

    def __init__(self, class_name: str = "Part"):
        self.class_name = class_name
        self.offset = CoordinateFrame.identity()
        self.size = np.zeros(3, dtype=np.float64)
        self.color: Optional[Color] = None
        self.rotation_adjustment = 0
        self.properties: Dict[str, Any] = {}

    def with_frame(self, frame: CoordinateFrame) -> "PartDef":
        """Compose a frame into the local offset (applied in the current local frame)."""
        self.offset = compose(self.offset, frame)
        return self

    def with_offset(self, x: float, y: float, z: float) -> "PartDef":
        return self.with_frame(CoordinateFrame.translation(x, y, z))

    def with_rotation(self, axis, angle: float) -> "PartDef":
        return self.with_frame(CoordinateFrame.rotation(axis, angle))

    def with_size(self, x: float, y: float, z: float) -> "PartDef":
        self.size = np.array([x, y, z], dtype=np.float64)
        return self

    def with_color(self, color: Color) -> "PartDef":
        self.color = Color(*color)
        return self

    def with_rotation_adjustment(self, quarter_turns: int) -> "PartDef":
        """Extra quarter turns added to the brick rotation before lookup."""
        self.rotation_adjustment = quarter_turns % 4
        return self

    def with_property(self, key: str, value: Any) -> "PartDef":
        self.properties[key] = value
        return self

    def with_surfaces(self, **surfaces: SurfaceType) -> "PartDef":
        """
        Set surface properties by face name.

        Example:
            part.with_surfaces(top=SurfaceType.SMOOTH, bottom=SurfaceType.SMOOTH)
        """
        for face, surface in surfaces.items():
            self.with_property(f"{face.capitalize()}Surface", surface)
        return self

    def global_frame(self, brick: Brick, position_scale: float = POSITION_SCALE) -> CoordinateFrame:
        """
        World placement of the brick this part belongs to.

        The grid position is scaled to world units and its Y/Z components
        swapped; the rotation comes from the orientation table.
        """
        rotation = orientation_matrix(brick.direction, brick.rotation, self.rotation_adjustment)
        x, y, z = brick.position
        return CoordinateFrame.from_rotation(
            x / position_scale,
            z / position_scale,
            y / position_scale,
            rotation,
        )

    def resolve(
        self,
        save: SaveData,
        brick: Brick,
        position_scale: float = POSITION_SCALE
    ) -> InstanceDescriptor:
        """
        Resolve this part against its brick.

        Args:
            save: Shared save metadata (palette, material names)
            brick: The brick being converted
            position_scale: Source grid units per world unit

        Returns:
            InstanceDescriptor ready for the model writer
        """
        frame = compose(self.global_frame(brick, position_scale), self.offset)

        instance = InstanceDescriptor(
            class_name=self.class_name,
            size=self.size.copy(),
            position=frame.position(),
            rotation=frame.rotation_matrix(),
            color=self._resolve_color(save, brick),
        )

        apply_material_policy(instance, save, brick)
        light = build_point_light(brick, instance.color)
        if light is not None:
            instance.add_child(light)

        for key, value in self.properties.items():
            if key in _FIELD_PROPERTIES:
                setattr(instance, _FIELD_PROPERTIES[key], value)
            else:
                instance.properties[key] = value

        return instance

    def _resolve_color(self, save: SaveData, brick: Brick) -> Tuple[float, float, float]:
        if self.color is not None:
            return color_to_perceptual(self.color)
        if isinstance(brick.color, int):
            return save.perceptual_color(brick.color)
        return color_to_perceptual(parse_color(brick.color))


def apply_material_policy(instance: InstanceDescriptor, save: SaveData, brick: Brick):
    """
    Apply the visibility, material, collision and anchoring rules.

    Invisible bricks become fully transparent regardless of material.
    """
    if brick.visibility:
        material_name = save.material_name(brick)
        if material_name == GLASS_MATERIAL:
            instance.transparency = 1.0 - brick.material_intensity / MAX_MATERIAL_INTENSITY
        elif material_name in MATERIAL_TABLE:
            material, transparency = MATERIAL_TABLE[material_name]
            instance.material = material
            if transparency is not None:
                instance.transparency = transparency
    else:
        instance.transparency = 1.0

    if not brick.player_collision:
        instance.can_collide = False

    # Brick mobility is not modeled
    instance.anchored = True


def build_point_light(
    brick: Brick,
    part_color: Tuple[float, float, float]
) -> Optional[InstanceDescriptor]:
    """
    Build a PointLight child from the brick's light component, if any.

    Args:
        brick: Brick whose components are inspected
        part_color: Resolved perceptual part color

    Returns:
        Light descriptor or None
    """
    component = brick.components.get(POINT_LIGHT_COMPONENT)
    if component is None:
        return None

    brightness = _component_value(component, "Brightness", (int, float), 10.0)
    light_range = _component_value(component, "Range", (int, float), 100.0)
    shadows = _component_value(component, "bCastShadows", bool, False)

    if _component_value(component, "bUseBrickColor", bool, False):
        color = part_color
    else:
        raw = component.get("Color", WHITE)
        if not isinstance(raw, (dict, list, tuple)):
            raw = WHITE
        # Raises MalformedSaveError for bad channels
        color = color_to_perceptual(parse_color(raw))

    return InstanceDescriptor(
        class_name="PointLight",
        name="PointLight",
        color=color,
        properties={
            "Brightness": brightness / LIGHT_BRIGHTNESS_DIVISOR,
            "Range": light_range / LIGHT_RANGE_DIVISOR,
            "Shadows": shadows,
        },
    )


def _component_value(component: Dict[str, Any], key: str, types, default):
    """Typed component property lookup; mismatched types use the default."""
    value = component.get(key, default)
    # bool is an int subclass
    if isinstance(value, bool) and bool not in _as_tuple(types):
        return default
    if not isinstance(value, types):
        return default
    return value


def _as_tuple(types) -> tuple:
    return types if isinstance(types, tuple) else (types,)
