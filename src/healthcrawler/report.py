"""Folds per-page results into the final crawl report."""

import logging
from datetime import datetime
from typing import Dict, Iterable, Optional

from healthcrawler.frontier import CrawlState
from healthcrawler.models import (
    CrawlJob,
    CrawlReport,
    CrawlStatistics,
    PageResult,
    SitemapEntry,
    utc_now,
)
from healthcrawler.url_utils import DomainScope

logger = logging.getLogger(__name__)


def build_sitemap_entry(page: PageResult) -> SitemapEntry:
    return SitemapEntry(
        url=page.url,
        title=page.title,
        depth=page.depth,
        links=list(page.links.internal),
        css_count=len(page.resources.css),
        js_count=len(page.resources.js),
        image_count=len(page.resources.images),
        load_time_ms=page.load_time_ms,
        status_code=page.status_code,
        error=page.error,
    )


def compute_statistics(pages: Iterable[PageResult]) -> CrawlStatistics:
    """Aggregate link, image and load-time figures over all pages.

    The average load time only counts successful pages. Failed pages,
    including HTTP error responses that still carry a load time, contribute
    no sample.
    """
    total_links = 0
    total_images = 0
    load_times = []

    for page in pages:
        total_links += page.links.total
        total_images += len(page.resources.images)
        if page.succeeded and page.load_time_ms is not None:
            load_times.append(page.load_time_ms)

    avg_load_time = sum(load_times) / len(load_times) if load_times else 0.0

    return CrawlStatistics(
        total_links=total_links,
        total_images=total_images,
        avg_load_time=round(avg_load_time, 2),
    )


def build_report(
    job: CrawlJob,
    state: CrawlState,
    scope: DomainScope,
    finished_at: Optional[datetime] = None,
) -> CrawlReport:
    """Build the read-only report for a finished crawl.

    Args:
        job: The crawl job
        state: Final crawl state
        scope: Domain scope of the seed URL, used for sitemap paths
        finished_at: Completion time (defaults to now)

    Returns:
        CrawlReport
    """
    if finished_at is None:
        finished_at = utc_now()

    sitemap: Dict[str, SitemapEntry] = {}
    for url, page in state.results.items():
        sitemap[scope.path_for(url)] = build_sitemap_entry(page)

    duration_ms = max(0, int((finished_at - job.start_time).total_seconds() * 1000))

    report = CrawlReport(
        crawl_id=job.crawl_id,
        website=job.seed_url,
        total_pages=state.pages_crawled,
        crawled_at=finished_at,
        duration_ms=duration_ms,
        config=job.config.snapshot(),
        sitemap=sitemap,
        statistics=compute_statistics(state.results.values()),
        stop_reason=state.status.value,
        pages=dict(state.results),
    )

    logger.debug(
        f"Report {job.crawl_id}: {report.total_pages} pages, "
        f"{report.statistics.total_links} links, {report.duration_ms}ms"
    )
    return report
