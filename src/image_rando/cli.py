from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import DistributionConfig, load_config, normalize_extensions, parse_size
from .distributor import DistributionPlan, distribute
from .errors import ImageRandoError, InvalidConfig
from .inventory import build_inventory
from .materializer import materialize, prepare_destination

logger = logging.getLogger("image_rando")


def _resolve_cli_path(path: Path) -> Path:
    return path.expanduser().resolve()


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-rando",
        description=(
            "Copy JPGs from a source folder into numbered destination folders (1..X) in random order, "
            "keeping every folder under a file-count and a byte-size limit."
        ),
    )
    parser.add_argument("--config", type=Path, help="YAML file with default settings")
    parser.add_argument("--src", type=Path, help="Source folder containing the images")
    parser.add_argument("--dst", type=Path, help="Destination folder; must be empty or missing")
    parser.add_argument("--max-files", type=int, help="Maximum number of files per folder (default: 1200)")
    parser.add_argument(
        "--max-bytes",
        type=str,
        help="Maximum bytes per folder, e.g. 4294967296 or 4GiB (default: 4GiB)",
    )
    parser.add_argument("--seed", type=int, help="Shuffle seed; reuse a reported seed to repeat a run")
    parser.add_argument(
        "--ext",
        action="append",
        dest="extensions",
        metavar="EXT",
        help="Accepted file extension, may be given several times (default: jpg, jpeg)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print the plan without copying anything")
    parser.add_argument("--no-progress", action="store_true", help="Disable the copy progress bar")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def resolve_config(args: argparse.Namespace) -> DistributionConfig:
    config = load_config(_resolve_cli_path(args.config)) if args.config else DistributionConfig()
    if args.src:
        config.source_dir = _resolve_cli_path(args.src)
    if args.dst:
        config.dest_dir = _resolve_cli_path(args.dst)
    if args.max_files is not None:
        config.max_count = args.max_files
    if args.max_bytes is not None:
        config.max_bytes = parse_size(args.max_bytes)
    if args.seed is not None:
        config.seed = args.seed
    if args.extensions:
        config.extensions = normalize_extensions(args.extensions)

    if config.source_dir is None:
        raise InvalidConfig("source_dir", None, "pass --src or set source_dir in --config")
    if config.dest_dir is None and not args.dry_run:
        raise InvalidConfig("dest_dir", None, "pass --dst or set dest_dir in --config")
    config.validate()
    return config


def format_plan(plan: DistributionPlan) -> List[str]:
    lines = []
    for item in plan:
        marker = " (oversized)" if item.oversized else ""
        lines.append(f"folder {item.index}: {len(item.entries)} files, {item.total_bytes} bytes{marker}")
    return lines


def run(config: DistributionConfig, *, dry_run: bool = False, progress: bool = True) -> DistributionPlan:
    entries = build_inventory(config.source_dir, config.extensions)
    plan = distribute(entries, seed=config.seed, max_count=config.max_count, max_bytes=config.max_bytes)
    logger.info("Seed used: %d", plan.seed)
    logger.info("Planned %d folder(s) for %d file(s)", len(plan), plan.total_files)
    if dry_run:
        return plan
    prepare_destination(config.dest_dir)
    copied = materialize(plan, config.dest_dir, progress=progress)
    logger.info("Wrote %d bytes under %s", copied, config.dest_dir)
    return plan


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = resolve_config(args)
        plan = run(config, dry_run=args.dry_run, progress=not args.no_progress)
    except ImageRandoError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.dry_run:
        for line in format_plan(plan):
            print(line)
        print(f"Planned {plan.total_files} photos into {len(plan)} folders (dry run, nothing copied)")
    else:
        print(f"Copied {plan.total_files} photos into {len(plan)} folders under {config.dest_dir}")
        print(f"Total bytes copied: {plan.total_bytes}")
    print(f"Seed: {plan.seed}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
