"""
Main module for the Pinterest image scraper.
Command-line entry point for single page scrapes, image searches and batches.
Results are printed as JSON.
"""

import sys
import asyncio
import argparse
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from utils.logger import setup_logger
from pipeline.parser import parse_batch_request, validate_count
from pipeline.scraper import ScraperService
from pipeline.scraper.errors import InvalidRequestError
from config import DEFAULT_IMAGE_COUNT

logger = setup_logger(__name__)


async def run_command(args: argparse.Namespace) -> BaseModel:
    """Dispatch one CLI command to the scraper service and return its result."""
    async with ScraperService() as service:
        if args.command == "page":
            return await service.scrape_page(args.url)
        if args.command == "search":
            validate_count(args.count)
            return await service.scrape_image_search(args.query, args.count, args.download)

        queries_text: Optional[str] = None
        if args.file:
            queries_text = Path(args.file).read_text(encoding="utf-8")
        elif not args.queries and not sys.stdin.isatty():
            queries_text = sys.stdin.read()
        queries = parse_batch_request(
            queries_text=queries_text,
            queries=args.queries,
            extension=args.extension,
            count_per_query=args.count,
        )
        logger.info(f"Batch scraping Pinterest for {len(queries)} queries (download: {args.download})")
        return await service.scrape_image_search_batch(queries, args.count, args.download)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Pinterest image scraper - collect and rank high quality images with a headless browser',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py page https://example.com
  python main.py search "northern lights" --count 5
  python main.py batch "glass igloo hotel" "santa claus village" --extension "arctic finland"
  python main.py batch --file queries.txt --count 10 --download
  cat queries.txt | python main.py batch
        """
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    page = subparsers.add_parser('page', help='Scrape the title and HTML of any URL')
    page.add_argument('url', help='Absolute URL to load')

    search = subparsers.add_parser('search', help='Search Pinterest for one query')
    search.add_argument('query', help='Search query')
    search.add_argument('--count', type=int, default=DEFAULT_IMAGE_COUNT,
                        help=f'Number of images (default: {DEFAULT_IMAGE_COUNT})')
    search.add_argument('--download', action='store_true', help='Download the selected images locally')

    batch = subparsers.add_parser('batch', help='Search Pinterest for many queries in parallel')
    batch.add_argument('queries', nargs='*', help='Search queries (or use --file / stdin, one per line)')
    batch.add_argument('--file', help='Text file with one query per line')
    batch.add_argument('--extension', help='Text appended to every query, e.g. "arctic finland"')
    batch.add_argument('--count', type=int, default=DEFAULT_IMAGE_COUNT,
                       help=f'Number of images per query (default: {DEFAULT_IMAGE_COUNT})')
    batch.add_argument('--download', action='store_true', help='Download the selected images locally')

    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        result = asyncio.run(run_command(args))
    except InvalidRequestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(result.model_dump_json(indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
