"""Command-line interface for the health crawler."""

import asyncio
import json
import signal
import sys
from typing import Optional

from pydantic import ValidationError

from healthcrawler.config import CrawlConfig, settings
from healthcrawler.logging_config import setup_logging
from healthcrawler.models import CrawlReport
from healthcrawler.output_manager import ReportStore
from healthcrawler.site_crawler import SiteCrawler
from healthcrawler.url_utils import CrawlError


def print_report_summary(report: CrawlReport) -> None:
    """Print a crawl report in a formatted way.

    Args:
        report: Finished crawl report
    """
    print(f"\n{'=' * 60}")
    print(f"Crawl Report for: {report.website}")
    print(f"{'=' * 60}")
    print(f"\nCrawl ID: {report.crawl_id}")
    print(f"Pages: {report.total_pages} ({report.stop_reason})")
    print(f"Duration: {report.duration_ms / 1000:.2f}s")
    print(f"Total links: {report.statistics.total_links}")
    print(f"Total images: {report.statistics.total_images}")
    print(f"Avg load time: {report.statistics.avg_load_time:.0f}ms")

    print("\nSitemap:")
    for path, entry in report.sitemap.items():
        if entry.error:
            print(f"  ✗ [{entry.depth}] {path} - {entry.error}")
        else:
            print(f"  ✓ [{entry.depth}] {path} ({entry.status_code}, {entry.load_time_ms}ms)")

    print(f"\n{'=' * 60}\n")


async def _run_crawl(crawler: SiteCrawler) -> CrawlReport:
    """Run a crawl, stopping gracefully on SIGINT/SIGTERM."""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
        except (NotImplementedError, RuntimeError):
            # Signal handlers are unavailable on some platforms (Windows)
            pass
    return await crawler.crawl(cancel_event=cancel_event)


def crawl_command(args) -> int:
    """Handle the 'crawl' command."""
    try:
        config = CrawlConfig(
            max_depth=args.max_depth,
            max_pages=args.max_pages,
            timeout_ms=args.timeout,
            respect_robots_txt=not args.ignore_robots,
            screenshot_enabled=not args.no_screenshots,
            user_agent=args.user_agent or settings.USER_AGENT,
        )
        crawler = SiteCrawler(
            args.url,
            config=config,
            on_progress=lambda done, total, url: print(f"  [{done}/{total}] {url}"),
        )
        report = asyncio.run(_run_crawl(crawler))
    except (CrawlError, ValidationError) as e:
        print(f"\n❌ Crawl failed: {e}", file=sys.stderr)
        return 1

    if not args.no_save:
        store = ReportStore(args.output_dir)
        path = store.save(report, include_pages=args.save_pages)
        print(f"💾 Saved report to {path}")

    if args.output == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print_report_summary(report)
    return 0


def show_command(args) -> int:
    """Handle the 'show' command."""
    store = ReportStore(args.output_dir)
    report = store.get(args.crawl_id)
    if report is None:
        print(f"Crawl not found: {args.crawl_id}", file=sys.stderr)
        return 1
    print(json.dumps(report, indent=2))
    return 0


def history_command(args) -> int:
    """Handle the 'history' command."""
    store = ReportStore(args.output_dir)
    reports = store.recent(args.website, limit=args.limit)
    if not reports:
        print(f"No crawls found for {args.website}")
        return 0

    print(f"\nRecent crawls for {args.website}:")
    print("-" * 60)
    for report in reports:
        stats = report.get("statistics") or {}
        print(
            f"  {report.get('crawledAt')}  {report.get('crawlId')}  "
            f"pages={report.get('totalPages')}  avgLoad={stats.get('avgLoadTime') or 0:.0f}ms"
        )
    return 0


def stats_command(args) -> int:
    """Handle the 'stats' command."""
    store = ReportStore(args.output_dir)
    stats = store.stats(recent_days=args.days)

    print(f"\nStored crawls in {stats['storageDir']}:")
    print(f"  Total: {stats['totalCrawls']}")
    print(f"  Last {args.days} days: {stats['recentCrawls']}")
    print(f"  Oldest: {stats['oldestCrawl'] or '-'}")
    print(f"  Newest: {stats['newestCrawl'] or '-'}")
    return 0


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        description="Health Crawler - Render and map a website with a headless browser"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        default=settings.LOG_LEVEL.upper(),
        help="Set logging verbosity (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )
    parser.add_argument(
        "--output-dir",
        default=settings.OUTPUT_DIR,
        help=f"Directory for saved reports (default: {settings.OUTPUT_DIR})",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    crawl_parser = subparsers.add_parser("crawl", help="Crawl a website breadth-first.")
    crawl_parser.add_argument("url", help="Seed URL to crawl")
    crawl_parser.add_argument(
        "--max-depth", type=int, default=5,
        help="Maximum link depth from the seed (default: 5)",
    )
    crawl_parser.add_argument(
        "--max-pages", type=int, default=100,
        help="Maximum pages to crawl (default: 100)",
    )
    crawl_parser.add_argument(
        "--timeout", type=int, default=30000,
        help="Navigation timeout per page in milliseconds (default: 30000)",
    )
    crawl_parser.add_argument(
        "--ignore-robots", action="store_true",
        help="Do not fetch or honour robots.txt",
    )
    crawl_parser.add_argument(
        "--no-screenshots", action="store_true",
        help="Skip page screenshots",
    )
    crawl_parser.add_argument("--user-agent", help="Override the crawler user agent")
    crawl_parser.add_argument(
        "--output", "-o", choices=["text", "json"], default="text",
        help="Output format (default: text)",
    )
    crawl_parser.add_argument(
        "--no-save", action="store_true",
        help="Do not save the report to the output directory",
    )
    crawl_parser.add_argument(
        "--save-pages", action="store_true",
        help="Also save full per-page results",
    )
    crawl_parser.set_defaults(func=crawl_command)

    show_parser = subparsers.add_parser("show", help="Print a saved crawl report.")
    show_parser.add_argument("crawl_id", help="Crawl id, e.g. crawl_1732371022000_k3j9x0a1b")
    show_parser.set_defaults(func=show_command)

    history_parser = subparsers.add_parser("history", help="List recent crawls for a website.")
    history_parser.add_argument("website", help="Seed URL as recorded in the report")
    history_parser.add_argument("--limit", type=int, default=10)
    history_parser.set_defaults(func=history_command)

    stats_parser = subparsers.add_parser("stats", help="Summarize saved crawl reports.")
    stats_parser.add_argument(
        "--days", type=int, default=7,
        help="Window for the recent crawl count (default: 7)",
    )
    stats_parser.set_defaults(func=stats_command)

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=args.log_level,
        log_file=getattr(args, "log_file", None),
    )

    if hasattr(args, "func"):
        return args.func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
