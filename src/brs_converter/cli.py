"""
Command-Line Interface for brs_converter

Usage:
    brsconv castle.json
    brsconv castle.json -o castle.model.json --format json obj
    brsconv --batch saves/ --output-dir models/

"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional
import time

from . import __version__
from .converter import SIZE_SCALE
from .model import SaveConverter, BatchProcessor, OUTPUT_SUFFIX, default_output_path
from .part import POSITION_SCALE


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="brsconv",
        description="Convert brick saves (JSON form) into oriented primitive models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  brsconv castle.json
      Convert castle.json to castle.json{OUTPUT_SUFFIX}

  brsconv castle.json -o castle.model.json --format json obj
      Also write an OBJ preview next to the JSON model

  brsconv --batch saves/ --output-dir models/
      Convert every JSON save in a directory
        """
    )

    # Input
    parser.add_argument(
        "input",
        nargs="?",
        help="Input save file (JSON)"
    )

    # Output
    parser.add_argument(
        "-o", "--output",
        help=f"Output file path (default: input path + {OUTPUT_SUFFIX})"
    )

    parser.add_argument(
        "-f", "--format",
        nargs="+",
        choices=["json", "obj"],
        default=["json"],
        help="Output format(s) (default: json)"
    )

    # Conversion settings
    parser.add_argument(
        "--size-scale",
        type=float,
        default=SIZE_SCALE,
        help=f"Source size units per world unit (default: {SIZE_SCALE})"
    )

    parser.add_argument(
        "--position-scale",
        type=float,
        default=POSITION_SCALE,
        help=f"Source position units per world unit (default: {POSITION_SCALE})"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used to convert bricks (default: 1)"
    )

    parser.add_argument(
        "--no-annotation",
        action="store_true",
        help="Don't embed the description/author script"
    )

    # Batch processing
    parser.add_argument(
        "--batch",
        help="Batch process directory of saves"
    )

    parser.add_argument(
        "--output-dir",
        help="Output directory for batch processing"
    )

    parser.add_argument(
        "--pattern",
        default="*.json",
        help="File pattern for batch processing (default: *.json)"
    )

    # Misc
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output with statistics"
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print conversion statistics"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def _converter_kwargs(args) -> dict:
    return {
        "size_scale": args.size_scale,
        "position_scale": args.position_scale,
        "workers": args.workers,
        "annotate": not args.no_annotation,
    }


def process_single(args) -> int:
    """Convert a single save file."""
    if not args.input:
        print("Error: No input file specified", file=sys.stderr)
        return 1

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    output_path = Path(args.output) if args.output else default_output_path(input_path)

    start_time = time.time()

    try:
        converter = SaveConverter(**_converter_kwargs(args))

        if args.verbose:
            print(f"Loading: {input_path}")

        outputs = converter.convert_file(input_path, output_path, args.format)

        if args.stats or args.verbose:
            print("\nConversion Statistics:")
            for line in converter.report.summary().splitlines():
                print(f"  {line}")

        for path in outputs:
            print(f"Exported: {path}")

        elapsed = time.time() - start_time
        if args.verbose:
            print(f"\nCompleted in {elapsed:.2f}s")

        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def process_batch(args) -> int:
    """Convert a directory of saves."""
    batch_dir = Path(args.batch)
    if not batch_dir.is_dir():
        print(f"Error: Batch directory not found: {batch_dir}", file=sys.stderr)
        return 1

    output_dir = Path(args.output_dir) if args.output_dir else batch_dir / "output"

    start_time = time.time()

    try:
        processor = BatchProcessor(**_converter_kwargs(args))

        outputs = processor.process_directory(
            batch_dir,
            output_dir,
            pattern=args.pattern,
            formats=args.format
        )

        if args.stats or args.verbose:
            for name, report in processor.reports.items():
                print(f"\n{name}:")
                for line in report.summary().splitlines():
                    print(f"  {line}")

        elapsed = time.time() - start_time
        print(f"Processed {len(processor.reports)} saves in {elapsed:.2f}s")
        print(f"Wrote {len(outputs)} files to {output_dir}")

        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s"
    )

    if args.batch:
        return process_batch(args)
    else:
        return process_single(args)


if __name__ == "__main__":
    sys.exit(main())
