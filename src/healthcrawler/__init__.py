"""Breadth-first website crawler driven by a headless browser."""

__version__ = "0.1.0"

from healthcrawler.site_crawler import SiteCrawler, crawl_website
from healthcrawler.browser_crawler import BrowserSession, BrowserLaunchError
from healthcrawler.extractor import PageExtractor
from healthcrawler.frontier import CrawlFrontier, CrawlState, FrontierStatus
from healthcrawler.robots import RobotsPolicy, load_robots_policy
from healthcrawler.report import build_report
from healthcrawler.output_manager import ReportStore
from healthcrawler.url_utils import (
    CrawlError,
    DomainScope,
    InvalidUrlError,
    normalize_url,
)
from healthcrawler.models import (
    CrawlJob,
    CrawlReport,
    CrawlStatistics,
    FrontierEntry,
    Headings,
    ImageResource,
    PageLinks,
    PageResources,
    PageResult,
    ResponseHeaders,
    SitemapEntry,
)
from healthcrawler.config import CrawlConfig, settings

__all__ = [
    # Core
    "SiteCrawler",
    "crawl_website",
    "BrowserSession",
    "PageExtractor",
    "CrawlFrontier",
    "CrawlState",
    "FrontierStatus",
    "RobotsPolicy",
    "load_robots_policy",
    "build_report",
    "ReportStore",
    "DomainScope",
    "normalize_url",
    # Errors
    "CrawlError",
    "InvalidUrlError",
    "BrowserLaunchError",
    # Models
    "CrawlJob",
    "CrawlReport",
    "CrawlStatistics",
    "FrontierEntry",
    "Headings",
    "ImageResource",
    "PageLinks",
    "PageResources",
    "PageResult",
    "ResponseHeaders",
    "SitemapEntry",
    "CrawlConfig",
    "settings",
]
