"""
CLI script to build the bundled corpus store and its gzip payload.

Usage:
    python scripts/build_corpus.py data/poems/           # All *.json under a directory
    python scripts/build_corpus.py a.json b.json         # Explicit source files
    python scripts/build_corpus.py data/ --no-pack       # Keep only the .db
    python scripts/build_corpus.py data/ --config path/to/config.json
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from liumo.core import get_config, get_logger, ConfigurationError, CorpusBuildError
from liumo.core.config_loader import reload_config
from liumo.indexer import CorpusBuilder, pack_payload

DEFAULT_OUTPUT = Path("build") / "liumo.db"
DEFAULT_PAYLOAD = Path(__file__).parent.parent / "liumo" / "resources" / "liumo.db.gz"


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Build the corpus store from source JSON files"
    )

    parser.add_argument(
        "sources",
        nargs="+",
        help="Source JSON files or directories containing them"
    )

    parser.add_argument(
        "--output",
        type=str,
        default=str(DEFAULT_OUTPUT),
        help=f"Path of the store to build (default: {DEFAULT_OUTPUT})"
    )

    parser.add_argument(
        "--payload",
        type=str,
        default=str(DEFAULT_PAYLOAD),
        help="Path of the gzip payload to write (default: bundled resource)"
    )

    parser.add_argument(
        "--no-pack",
        action="store_true",
        help="Skip writing the gzip payload"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to custom config.json file"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output"
    )

    return parser.parse_args()


def collect_sources(entries):
    """Expand directories into their *.json files, sorted."""
    paths = []
    for entry in entries:
        path = Path(entry)
        if path.is_dir():
            paths.extend(sorted(path.rglob("*.json")))
        else:
            paths.append(path)
    return paths


def progress_callback(current: int, total: int, filename: str) -> None:
    """Print progress to console."""
    percent = (current / total) * 100 if total > 0 else 0
    bar_width = 30
    filled = int(bar_width * current / total) if total > 0 else 0
    bar = "=" * filled + "-" * (bar_width - filled)

    print(f"\r[{bar}] {percent:5.1f}% ({current}/{total}) {filename[:40]:<40}", end="", flush=True)


def main():
    """Main entry point for the build CLI."""
    args = parse_args()

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}")
            sys.exit(1)
        reload_config(config_path)

    try:
        get_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}")
        sys.exit(1)

    logger = get_logger(__name__)

    sources = collect_sources(args.sources)
    if not sources:
        print("Error: No source files found")
        sys.exit(1)

    print("=" * 60)
    print("Liumo - Corpus Build")
    print("=" * 60)
    print(f"Source files:      {len(sources):,}")
    print(f"Store path:        {args.output}")
    print(f"Payload path:      {'(skipped)' if args.no_pack else args.payload}")
    print("=" * 60)

    callback = None if args.quiet else progress_callback

    builder = CorpusBuilder(args.output, progress_callback=callback)

    print("\nBuilding store...\n")

    stats = builder.build(sources)

    if not args.quiet:
        print("\n")

    if not args.no_pack:
        try:
            pack_payload(args.output, args.payload)
        except CorpusBuildError as e:
            logger.error(f"Packing failed: {e}")
            print(f"Error: {e.message}")
            sys.exit(1)

    print("=" * 60)
    print("Build Complete")
    print("=" * 60)
    print(f"Files scanned:     {stats.files_scanned:,}")
    print(f"Files failed:      {stats.files_failed:,}")
    print(f"Records read:      {stats.records_read:,}")
    print(f"Records inserted:  {stats.records_inserted:,}")
    print(f"Without content:   {stats.records_skipped:,}")
    print(f"Duplicate ids:     {stats.duplicates:,}")
    print("=" * 60)

    if stats.errors:
        print(f"\nErrors ({len(stats.errors)}):")
        for error in stats.errors[:20]:
            print(f"  - {error}")
        if len(stats.errors) > 20:
            print(f"  ... and {len(stats.errors) - 20} more errors")

    if stats.files_failed > 0:
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
