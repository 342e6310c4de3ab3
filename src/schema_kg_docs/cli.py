"""Command line interface for schema-kg-docs."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .codec import dump_schema, load_schema
from .config import Config
from .errors import SchemaKGError, VersionMismatchError
from .exporter import export_schema_pack, schema_summary
from .version import __version__

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Filter, annotate and relation-complete schema snapshots"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        help="Config file (default: discover .schema-kg.yml or schema-kg.yml)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect_parser = subparsers.add_parser("inspect", help="Summarize a schema snapshot")
    inspect_parser.add_argument("snapshot", type=Path, help="Schema snapshot JSON")

    build_parser = subparsers.add_parser(
        "build", help="Apply inference, filters and annotations to a snapshot"
    )
    build_parser.add_argument("snapshot", type=Path, help="Schema snapshot JSON")
    build_parser.add_argument("--output", type=Path, required=True, help="Output snapshot path")
    build_parser.add_argument("--include", action="append", help="Table pattern to include")
    build_parser.add_argument("--exclude", action="append", help="Table pattern to exclude")
    build_parser.add_argument("--label", action="append", help="Include tables with this label")
    build_parser.add_argument("--distance", type=int, help="Relation hops around included tables")

    export_parser = subparsers.add_parser(
        "export-pack", help="Apply the config and export snapshot, graph and summary"
    )
    export_parser.add_argument("snapshot", type=Path, help="Schema snapshot JSON")
    export_parser.add_argument(
        "--output-dir",
        type=Path,
        required=True,
        help="Destination directory for the schema pack",
    )

    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    config = Config.load(args.config)
    try:
        config.check_version()
    except VersionMismatchError as exc:
        logger.warning(str(exc))
        raise
    if config.dsn.url:
        logger.info(f"Documenting {config.masked_dsn()}")
    return config


def cmd_inspect(snapshot: Path) -> None:
    schema = load_schema(snapshot)
    print(json.dumps(schema_summary(schema), indent=2))


def cmd_build(
    config: Config,
    snapshot: Path,
    output: Path,
    include: Optional[List[str]],
    exclude: Optional[List[str]],
    labels: Optional[List[str]],
    distance: Optional[int],
) -> None:
    overrides = {
        "include": include,
        "exclude": exclude,
        "include_labels": labels,
        "distance": distance,
    }
    config = config.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    schema = load_schema(snapshot)
    config.modify_schema(schema)
    dump_schema(schema, output)
    print(f"Schema saved to {output} ({len(schema.tables)} tables, {len(schema.relations)} relations)")


def cmd_export_pack(config: Config, snapshot: Path, output_dir: Path) -> None:
    schema = load_schema(snapshot)
    config.modify_schema(schema)
    outputs = export_schema_pack(schema, output_dir)
    print(f"Schema pack exported to {output_dir}")
    for kind, path in outputs.items():
        print(f"  - {kind}: {path}")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.command == "inspect":
            cmd_inspect(args.snapshot)
        elif args.command == "build":
            cmd_build(
                load_config(args),
                args.snapshot,
                args.output,
                include=args.include,
                exclude=args.exclude,
                labels=args.label,
                distance=args.distance,
            )
        elif args.command == "export-pack":
            cmd_export_pack(load_config(args), args.snapshot, args.output_dir)
        else:
            raise ValueError(f"Unknown command: {args.command}")
    except (SchemaKGError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
