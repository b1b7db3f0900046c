"""
CLI script to search the corpus from a terminal.

Provisions the store exactly like the browser does, then runs one query.

Usage:
    python scripts/search_corpus.py 明月
    python scripts/search_corpus.py --dynasty 唐 --tag 唐诗三百首
    python scripts/search_corpus.py 春 --limit 5 --offset 10
    python scripts/search_corpus.py --facets
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from liumo.bootstrap import start
from liumo.core import get_config, ConfigurationError, LiumoError
from liumo.core.config_loader import reload_config
from liumo.utils import truncate_text


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Search the Liumo poetry corpus"
    )

    parser.add_argument(
        "keyword",
        nargs="?",
        default="",
        help="Search text; omit to browse by dynasty and tag"
    )

    parser.add_argument("--dynasty", type=str, help="Only records of this dynasty")
    parser.add_argument("--tag", type=str, help="Only records carrying this tag")
    parser.add_argument("--offset", type=int, default=0, help="Results to skip")
    parser.add_argument("--limit", type=int, default=10, help="Page size (max 100)")

    parser.add_argument(
        "--facets",
        action="store_true",
        help="List available dynasties and tags instead of searching"
    )

    parser.add_argument(
        "--full",
        action="store_true",
        help="Print the whole poem for every result"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to custom config.json file"
    )

    return parser.parse_args()


def main():
    """Main entry point for the search CLI."""
    args = parse_args()

    if args.config:
        reload_config(Path(args.config))

    try:
        get_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}")
        sys.exit(1)

    try:
        engine = start()

        if args.facets:
            facets = engine.facets()
            print("Dynasties: " + ", ".join(facets.dynasties))
            print("Tags:      " + ", ".join(facets.sorted_tags(engine.curated_tags)))
            sys.exit(0)

        results = engine.search_simple(
            args.keyword,
            dynasty=args.dynasty,
            tag=args.tag,
            offset=args.offset,
            limit=args.limit
        )
    except LiumoError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except ValueError as e:
        print(f"Invalid arguments: {e}")
        sys.exit(2)

    print(f"{len(results)} results")
    print("-" * 60)

    for record in results:
        print(f"[{record.id}] {record.title} - {record.author} ({record.dynasty})")
        if args.full:
            print(record.plain_text)
            print()
        else:
            print(f"    {truncate_text(record.plain_text.replace(chr(10), ' '), 60)}")

    sys.exit(0)


if __name__ == "__main__":
    main()
