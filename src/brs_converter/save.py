"""
Save Data Model and Loading

This module handles:
- The read-only brick and save metadata types consumed by the converter
- Loading saves from their JSON form
- Validation of every index into the shared asset/material/color tables

The binary save container is decoded elsewhere; this reader accepts the JSON
dump of a save, either flat or split into header1/header2 sections.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union
import json
import logging
import numpy as np

from .color import palette_to_perceptual
from .orientation import DIRECTION_COUNT, ROTATION_COUNT


logger = logging.getLogger(__name__)

MAX_MATERIAL_INTENSITY = 10


class MalformedSaveError(ValueError):
    """The save references tables out of range or is structurally invalid."""


class Color(NamedTuple):
    """Byte RGBA color as stored in the save."""
    r: int
    g: int
    b: int
    a: int = 255


@dataclass(frozen=True)
class Brick:
    """
    A single placed brick.

    Positions and sizes are in source units on a Z-up grid. A size of None
    marks a brick whose asset has a fixed, non-procedural size.
    """

    position: Tuple[int, int, int]
    direction: int = 4
    rotation: int = 0
    size: Optional[Tuple[int, int, int]] = None
    asset_name_index: int = 0
    color: Union[int, Color] = 0
    material_index: int = 0
    material_intensity: int = 5
    visibility: bool = True
    player_collision: bool = True
    components: Dict[str, Dict[str, Any]] = field(default_factory=dict)


@dataclass
class SaveData:
    """
    Shared, read-only metadata plus the ordered brick list.

    Attributes:
        description: Free-text save description
        author: Author display name
        brick_assets: Asset names indexed by Brick.asset_name_index
        materials: Material names indexed by Brick.material_index
        colors: Palette indexed by integer Brick.color values
        bricks: Bricks in save order
    """

    description: str = ""
    author: str = ""
    brick_assets: List[str] = field(default_factory=list)
    materials: List[str] = field(default_factory=list)
    colors: List[Color] = field(default_factory=list)
    bricks: List[Brick] = field(default_factory=list)
    _perceptual_palette: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Precompute the perceptual palette."""
        self.colors = [parse_color(c) for c in self.colors]
        raw = np.array([tuple(c) for c in self.colors], dtype=np.uint8).reshape(-1, 4)
        self._perceptual_palette = palette_to_perceptual(raw)
        self._perceptual_palette.setflags(write=False)

    # ------------------------------------------------------------------
    # Table access
    # ------------------------------------------------------------------

    def asset_name(self, brick: Brick) -> str:
        """Asset name of a brick."""
        return self.brick_assets[_checked(brick.asset_name_index, self.brick_assets, "asset")]

    def material_name(self, brick: Brick) -> str:
        """Material name of a brick."""
        return self.materials[_checked(brick.material_index, self.materials, "material")]

    def palette_color(self, index: int) -> Color:
        """Raw palette entry."""
        return self.colors[_checked(index, self.colors, "color")]

    def perceptual_color(self, index: int) -> Tuple[float, float, float]:
        """Palette entry converted to perceptual floats."""
        row = self._perceptual_palette[_checked(index, self.colors, "color")]
        return (float(row[0]), float(row[1]), float(row[2]))

    def validate(self) -> "SaveData":
        """
        Check every brick against the shared tables.

        Raises:
            MalformedSaveError: On the first invalid brick

        Returns:
            self for method chaining
        """
        for i, brick in enumerate(self.bricks):
            try:
                _validate_brick(self, brick)
            except MalformedSaveError as e:
                raise MalformedSaveError(f"Brick {i}: {e}") from None
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SaveData":
        """
        Build a save from its JSON structure.

        Accepts either flat keys or header1/header2 sections:
            {"header1": {"description": ..., "author": {"name": ...}},
             "header2": {"brick_assets": [...], "materials": [...], "colors": [...]},
             "bricks": [...]}

        Raises:
            MalformedSaveError: If the structure cannot be read
        """
        if not isinstance(data, dict):
            raise MalformedSaveError("Save root must be a JSON object")

        header1 = data.get("header1", data)
        header2 = data.get("header2", data)

        author = header1.get("author", "")
        if isinstance(author, dict):
            author = author.get("name", "")

        try:
            save = cls(
                description=str(header1.get("description", "")),
                author=str(author),
                brick_assets=[str(a) for a in header2.get("brick_assets", [])],
                materials=[str(m) for m in header2.get("materials", [])],
                colors=[parse_color(c) for c in header2.get("colors", [])],
                bricks=[_parse_brick(b) for b in data.get("bricks", [])],
            )
        except (TypeError, ValueError, KeyError) as e:
            if isinstance(e, MalformedSaveError):
                raise
            raise MalformedSaveError(f"Invalid save structure: {e}") from e

        return save


def load_save(path: Union[str, Path]) -> SaveData:
    """
    Load and validate a JSON save file.

    Args:
        path: Path to the JSON save

    Returns:
        Validated SaveData
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Save not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedSaveError(f"Invalid JSON in {path}: {e}") from e

    save = SaveData.from_dict(data).validate()
    logger.info(
        "Loaded %s: %d bricks, %d assets, %d materials, %d colors",
        path.name, len(save.bricks), len(save.brick_assets),
        len(save.materials), len(save.colors)
    )
    return save


def _checked(index: int, table: list, kind: str) -> int:
    """Bounds-check an index; negative indices are rejected too."""
    if not 0 <= index < len(table):
        raise MalformedSaveError(
            f"{kind} index {index} out of range (table has {len(table)} entries)"
        )
    return index


def _validate_brick(save: SaveData, brick: Brick):
    if not 0 <= brick.direction < DIRECTION_COUNT:
        raise MalformedSaveError(f"direction {brick.direction} out of range")
    if not 0 <= brick.rotation < ROTATION_COUNT:
        raise MalformedSaveError(f"rotation {brick.rotation} out of range")
    if brick.size is not None and any(s < 0 for s in brick.size):
        raise MalformedSaveError(f"negative size {brick.size}")

    save.asset_name(brick)
    save.material_name(brick)
    if isinstance(brick.color, int):
        save.palette_color(brick.color)
    else:
        parse_color(brick.color)


def parse_color(value: Any) -> Color:
    """
    Read a byte color from its JSON form.

    Accepts [r, g, b], [r, g, b, a] or {"r", "g", "b"[, "a"]}; every
    channel must be an integer in 0..255.

    Raises:
        MalformedSaveError: On any other shape or an out-of-range channel
    """
    original = value
    if isinstance(value, dict):
        try:
            value = [value["r"], value["g"], value["b"], value.get("a", 255)]
        except KeyError as e:
            raise MalformedSaveError(f"Color missing channel {e}: {original!r}") from None
    if not isinstance(value, (list, tuple)) or len(value) not in (3, 4):
        raise MalformedSaveError(f"Invalid color: {original!r}")

    if any(isinstance(c, bool) for c in value):
        raise MalformedSaveError(f"Invalid color channel: {original!r}")
    try:
        channels = [int(c) for c in value]
    except (TypeError, ValueError):
        raise MalformedSaveError(f"Invalid color channel: {original!r}") from None

    if any(not 0 <= c <= 255 for c in channels):
        raise MalformedSaveError(f"Color channel out of range: {original!r}")
    return Color(*channels)


def _parse_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise MalformedSaveError(f"Invalid {name}: {value!r} (expected true/false)")
    return value


def _parse_triple(value: Any, name: str) -> Tuple[int, int, int]:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise MalformedSaveError(f"Invalid {name}: {value!r}")
    return (int(value[0]), int(value[1]), int(value[2]))


def _parse_brick(data: Dict[str, Any]) -> Brick:
    size = data.get("size")
    if size is not None:
        size = _parse_triple(size, "size")
        if size == (0, 0, 0):
            size = None

    color = data.get("color", 0)
    if isinstance(color, bool):
        raise MalformedSaveError(f"Invalid brick color: {color!r}")
    color = color if isinstance(color, int) else parse_color(color)

    collision = data.get("collision", {})
    if isinstance(collision, dict):
        player_collision = collision.get("player", data.get("player_collision", True))
    else:
        player_collision = collision
    player_collision = _parse_bool(player_collision, "player collision")

    components = data.get("components", {}) or {}
    if not isinstance(components, dict):
        raise MalformedSaveError(f"Invalid components: {components!r}")

    return Brick(
        position=_parse_triple(data.get("position", (0, 0, 0)), "position"),
        direction=int(data.get("direction", 4)),
        rotation=int(data.get("rotation", 0)),
        size=size,
        asset_name_index=int(data.get("asset_name_index", 0)),
        color=color,
        material_index=int(data.get("material_index", 0)),
        material_intensity=int(data.get("material_intensity", 5)),
        visibility=_parse_bool(data.get("visibility", True), "visibility"),
        player_collision=player_collision,
        components=components,
    )
