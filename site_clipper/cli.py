"""
site-clipper - Crawl a site and save its pages as markdown clippings

Usage:
    site-clipper site https://example.com/docs -o clippings
    site-clipper scrape -u https://example.com/post -v ~/Vault --folder Clippings
    site-clipper find https://example.com -d 1 -o urls.txt
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .crawler import DEFAULT_MAX_URLS, CrawlConfig, crawl_urls
from .pipeline import RunReport, SiteScrapeOptions, process_urls, scrape_site
from .urls import split_patterns

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def read_url_file(path: str) -> List[str]:
    """Read newline-separated URLs, ignoring lines that don't start with http."""
    with open(path, 'r', encoding='utf-8') as f:
        lines = [line.strip() for line in f]
    return [line for line in lines if line.startswith('http')]


def print_report(report: RunReport, output: Path):
    """Print a short summary of a pipeline run."""
    print(f"\n✅ Processing complete!")
    print(f"📊 Summary:")
    print(f"   - Saved: {len(report.saved)}")
    print(f"   - Skipped: {len(report.skipped)}")
    print(f"   - Failed: {len(report.failed)}")
    for url, reason in report.errors:
        print(f"     {url}: {reason}")
    print(f"📁 Output saved to: {output}")


def _add_crawl_arguments(parser: argparse.ArgumentParser, default_depth: int):
    parser.add_argument(
        '-d', '--depth',
        type=int,
        default=default_depth,
        help=f'Crawl depth (number of levels to follow links, default: {default_depth})'
    )
    parser.add_argument(
        '-m', '--max-urls',
        type=int,
        default=DEFAULT_MAX_URLS,
        help=f'Maximum number of URLs to collect (default: {DEFAULT_MAX_URLS})'
    )
    parser.add_argument(
        '-e', '--exclude',
        help='Exclude URLs matching these patterns (comma-separated, * and ? allowed)'
    )
    parser.add_argument(
        '-i', '--include',
        help='Only include URLs matching these patterns (comma-separated, * and ? allowed)'
    )


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--timeout',
        type=float,
        default=None,
        help='Request timeout in seconds (default: none)'
    )
    common.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    parser = argparse.ArgumentParser(
        prog='site-clipper',
        description='Save web pages as markdown clippings, one file per page'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    site = subparsers.add_parser('site', parents=[common], help='Find sub-URLs of a page and scrape them all')
    site.add_argument('url', help='Base URL to extract links from and scrape')
    site.add_argument('-o', '--output', required=True, help='Output directory for the markdown files')
    site.add_argument('-t', '--template', help='Template file path for formatting')
    _add_crawl_arguments(site, default_depth=2)

    scrape = subparsers.add_parser('scrape', parents=[common], help='Scrape specific URLs')
    scrape.add_argument('-u', '--url', nargs='+', action='extend', default=[],
                        help='URL to scrape (can be provided multiple times)')
    scrape.add_argument('-f', '--file', help='File containing URLs to scrape (one per line)')
    scrape.add_argument('-o', '--output', help='Output directory for the markdown files')
    scrape.add_argument('-v', '--vault', help='Path to Obsidian vault (used if --output is not set)')
    scrape.add_argument('--folder', default='Clippings',
                        help='Folder within vault to save clippings (default: Clippings)')
    scrape.add_argument('-t', '--template', help='Template file path for formatting')

    find = subparsers.add_parser('find', parents=[common], help='Only discover URLs reachable from a page')
    find.add_argument('url', help='Seed URL')
    find.add_argument('-o', '--output', help='Write URLs to this file instead of stdout')
    find.add_argument('--sub-urls-only', action='store_true',
                      help="Keep only URLs on the seed's host under the seed's path")
    _add_crawl_arguments(find, default_depth=1)

    return parser


def run_site(args) -> int:
    report = scrape_site(SiteScrapeOptions(
        url=args.url,
        output=args.output,
        depth=args.depth,
        max_urls=args.max_urls,
        template=args.template,
        exclude=args.exclude,
        include=args.include,
        timeout=args.timeout,
    ))
    if not report.outcomes:
        print("No URLs found to scrape.")
        return 0
    print_report(report, Path(args.output))
    return 0


def run_scrape(args, parser: argparse.ArgumentParser) -> int:
    if not args.url and not args.file:
        parser.error("Either --url or --file must be provided.")
    if bool(args.output) == bool(args.vault):
        parser.error("Exactly one of --output or --vault must be provided.")

    urls = list(args.url)
    if args.file:
        try:
            urls.extend(read_url_file(args.file))
        except OSError as e:
            logger.error(f"Error reading URL file: {e}")
            return 1

    output = Path(args.output) if args.output else Path(args.vault) / args.folder
    report = process_urls(urls, output, args.template)
    print_report(report, output)
    return 0


def run_find(args) -> int:
    config = CrawlConfig(
        max_urls=args.max_urls,
        include_patterns=split_patterns(args.include),
        exclude_patterns=split_patterns(args.exclude),
        sub_urls_only=args.sub_urls_only,
        timeout=args.timeout,
    )
    urls = crawl_urls(args.url, args.depth, config)
    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(''.join(f"{url}\n" for url in urls), encoding='utf-8')
        print(f"📄 {len(urls)} URLs saved to: {output}")
    else:
        for url in urls:
            print(url)
    return 0


def main(argv: Optional[List[str]] = None):
    """Main execution function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if args.command == 'site':
            status = run_site(args)
        elif args.command == 'scrape':
            status = run_scrape(args, parser)
        else:
            status = run_find(args)
    except KeyboardInterrupt:
        print("\n⚠️ Processing interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        print(f"\n❌ Error: {e}")
        sys.exit(1)

    sys.exit(status)


if __name__ == '__main__':
    main()
