"""
Save to Model Conversion

This is the primary interface for converting a whole save.
It orchestrates:
1. Per-brick decomposition and resolution (BrickConverter)
2. Naming and grouping of each brick's instances
3. Reporting of bricks with no shape rule
4. Export to the supported output formats

Example Usage:
    converter = SaveConverter()
    model = converter.convert(load_save("castle.json"), name="castle")
    print(converter.report.summary())
    JSONExporter().export(model, "castle.model.json")
"""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union
import logging

from .converter import BrickConverter, SIZE_SCALE
from .part import InstanceDescriptor, POSITION_SCALE
from .save import Brick, SaveData, load_save
from .exporters import JSONExporter, OBJExporter


logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".model.json"
ANNOTATION_NAME = "brs2model"


@dataclass
class ConversionReport:
    """Counts gathered while converting one save."""

    bricks: int = 0
    converted: int = 0
    primitives: int = 0
    unmapped: Counter = field(default_factory=Counter)

    @property
    def skipped(self) -> int:
        return sum(self.unmapped.values())

    def summary(self) -> str:
        lines = [
            f"Bricks: {self.bricks}",
            f"Converted: {self.converted}",
            f"Primitives: {self.primitives}",
            f"Skipped: {self.skipped}",
        ]
        for asset, count in self.unmapped.most_common():
            lines.append(f"  no converter for {asset} ({count})")
        return "\n".join(lines)


def brick_label(asset: str, brick: Brick) -> str:
    """Display name of a brick's instance or group."""
    return f"{asset} (dir {brick.direction}, rot {brick.rotation})"


def annotation_source(save: SaveData) -> str:
    """Source of the script that carries the save's description and author."""
    return (
        f"print'\"{save.description}\"'"
        f"print'Saved by {save.author}'"
        f"print''"
        f"print'Exported from Brickadia with brs2model'"
    )


class SaveConverter:
    """
    High-level interface for converting saves into instance trees.

    Attributes:
        brick_converter: Per-brick decomposition engine
        workers: Number of threads used to convert bricks
        report: Report of the last conversion
    """

    def __init__(
        self,
        size_scale: float = SIZE_SCALE,
        position_scale: float = POSITION_SCALE,
        workers: int = 1,
        annotate: bool = True
    ):
        """
        Initialize the converter.

        Args:
            size_scale: Source size units per world unit
            position_scale: Source position units per world unit
            workers: Threads for brick conversion (1 = sequential)
            annotate: Add the description/author script to the model
        """
        self.brick_converter = BrickConverter(size_scale, position_scale)
        self.workers = max(1, workers)
        self.annotate = annotate
        self.report = ConversionReport()

    def convert(self, save: SaveData, name: str = "Model") -> InstanceDescriptor:
        """
        Convert every brick of a save.

        Bricks without a shape rule are logged and skipped. Malformed
        bricks abort the conversion with MalformedSaveError.

        Args:
            save: Loaded save
            name: Name of the root model

        Returns:
            Root "Model" descriptor
        """
        self.report = ConversionReport(bricks=len(save.bricks))

        model = InstanceDescriptor(class_name="Model", name=name)
        if self.annotate:
            model.add_child(InstanceDescriptor(
                class_name="Script",
                name=ANNOTATION_NAME,
                properties={"Source": annotation_source(save)},
            ))

        def convert_one(brick: Brick):
            return self.brick_converter.convert(brick, save)

        if self.workers > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                # map() keeps save order
                results = list(executor.map(convert_one, save.bricks))
        else:
            results = [convert_one(brick) for brick in save.bricks]

        for brick, instances in zip(save.bricks, results):
            asset = save.asset_name(brick)
            if instances is None:
                logger.warning("Unimplemented brick converter for asset %s", asset)
                self.report.unmapped[asset] += 1
                continue

            label = brick_label(asset, brick)
            if len(instances) == 1:
                model.add_child(instances[0].with_name(label))
            else:
                group = InstanceDescriptor(class_name="Model", name=label)
                for instance in instances:
                    group.add_child(instance.with_name(instance.class_name))
                model.add_child(group)

            self.report.converted += 1
            self.report.primitives += len(instances)

        logger.info(
            "Converted %d/%d bricks into %d primitives",
            self.report.converted, self.report.bricks, self.report.primitives
        )
        return model

    def convert_file(
        self,
        input_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None,
        formats: Optional[List[str]] = None
    ) -> List[Path]:
        """
        Load, convert and export one save file.

        Args:
            input_path: JSON save
            output_path: Output base path (default: input path + OUTPUT_SUFFIX)
            formats: Any of "json", "obj" (default: json)

        Returns:
            Written file paths
        """
        input_path = Path(input_path)
        formats = formats or ["json"]
        output_path = Path(output_path) if output_path else default_output_path(input_path)

        save = load_save(input_path)
        model = self.convert(save, name=input_path.name)
        return export_model(model, output_path, formats)


def default_output_path(input_path: Union[str, Path]) -> Path:
    """Input path with OUTPUT_SUFFIX appended."""
    input_path = Path(input_path)
    return input_path.with_name(input_path.name + OUTPUT_SUFFIX)


def export_model(
    model: InstanceDescriptor,
    output_path: Union[str, Path],
    formats: List[str]
) -> List[Path]:
    """
    Write a model in each requested format.

    The JSON output goes to output_path itself; other formats replace its
    suffix.
    """
    output_path = Path(output_path)
    written = []

    if "json" in formats:
        JSONExporter().export(model, output_path)
        written.append(output_path)

    if "obj" in formats:
        obj_path = output_path.with_suffix(".obj")
        OBJExporter().export(model, obj_path)
        written.append(obj_path)

    return written


class BatchProcessor:
    """
    Batch conversion of every save in a directory.

    Each save is converted independently; a malformed save stops the batch.
    """

    def __init__(self, **converter_kwargs):
        """
        Initialize the batch processor.

        Args:
            **converter_kwargs: Arguments passed to SaveConverter
        """
        self.converter_kwargs = converter_kwargs
        self.reports = {}

    def process_directory(
        self,
        input_dir: Union[str, Path],
        output_dir: Union[str, Path],
        pattern: str = "*.json",
        formats: Optional[List[str]] = None
    ) -> List[Path]:
        """
        Convert all saves in a directory.

        Args:
            input_dir: Input directory
            output_dir: Output directory
            pattern: Glob pattern for input files
            formats: Export formats

        Returns:
            List of written file paths
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        outputs = []

        for input_path in sorted(input_dir.glob(pattern)):
            if input_path.name.endswith(OUTPUT_SUFFIX):
                continue

            converter = SaveConverter(**self.converter_kwargs)
            output_path = output_dir / (input_path.name + OUTPUT_SUFFIX)
            outputs.extend(converter.convert_file(input_path, output_path, formats))
            self.reports[input_path.name] = converter.report

        return outputs
