#!/usr/bin/env python3
"""
Catalog CLI - query a configured source from the command line

    python catalog_cli.py sources
    python catalog_cli.py popular MangaLib --page 2
    python catalog_cli.py search ManhuaUS "solo leveling"
    python catalog_cli.py pages MangaLib /some-manga/v1/c1
"""

import sys
import json
import logging
import argparse
from dataclasses import asdict, is_dataclass
from enum import Enum

import config
from exceptions import CatalogError
from sources import get_source, list_sources

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(levelname)s - %(name)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _to_json(value):
    if isinstance(value, Enum):
        return value.name
    if is_dataclass(value):
        return asdict(value)
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Browse manga catalogs through one interface")
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('sources', help="List configured sources")

    for command in ('popular', 'latest'):
        p = sub.add_parser(command, help=f"Fetch the {command} listing")
        p.add_argument('source')
        p.add_argument('--page', type=int, default=1)

    p = sub.add_parser('search', help="Search a source")
    p.add_argument('source')
    p.add_argument('query')
    p.add_argument('--page', type=int, default=1)

    for command in ('details', 'chapters'):
        p = sub.add_parser(command, help=f"Fetch {command} for an item")
        p.add_argument('source')
        p.add_argument('item_url')

    p = sub.add_parser('pages', help="Fetch the page images of a chapter")
    p.add_argument('source')
    p.add_argument('chapter_url')

    return parser


def run(args) -> object:
    if args.command == 'sources':
        return list_sources()

    adapter = get_source(args.source)
    if args.command == 'popular':
        return adapter.fetch_popular(args.page)
    if args.command == 'latest':
        if not adapter.supports_latest:
            raise CatalogError(f"{adapter.name} has no latest listing")
        return adapter.fetch_latest(args.page)
    if args.command == 'search':
        return adapter.fetch_search(args.page, args.query)
    if args.command == 'details':
        return adapter.fetch_details(args.item_url)
    if args.command == 'chapters':
        return adapter.fetch_chapter_list(args.item_url)
    return adapter.fetch_pages(args.chapter_url)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        result = run(args)
    except KeyError as e:
        logger.error(str(e))
        return 2
    except CatalogError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    print(json.dumps(result, default=_to_json, ensure_ascii=False, indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
