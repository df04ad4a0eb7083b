"""Data models for crawl jobs, page results and reports."""

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from healthcrawler.config import CrawlConfig


def generate_crawl_id() -> str:
    """Create a unique id of the form ``crawl_<epoch-ms>_<9 base36 chars>``."""
    alphabet = string.digits + string.ascii_lowercase
    suffix = "".join(random.choice(alphabet) for _ in range(9))
    return f"crawl_{int(time.time() * 1000)}_{suffix}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CrawlJob:
    """A single crawl request: the seed URL plus its frozen configuration."""

    seed_url: str
    config: CrawlConfig = field(default_factory=CrawlConfig)
    crawl_id: str = field(default_factory=generate_crawl_id)
    start_time: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class FrontierEntry:
    """A discovered URL waiting to be crawled."""

    url: str
    depth: int
    parent_url: Optional[str] = None


@dataclass
class PageLinks:
    """Anchor targets found on a page, split by domain scope."""

    internal: List[str] = field(default_factory=list)
    external: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.internal) + len(self.external)


@dataclass
class ImageResource:
    url: str
    alt: str = ""


@dataclass
class PageResources:
    """Stylesheets, scripts and images referenced by a page."""

    css: List[str] = field(default_factory=list)
    js: List[str] = field(default_factory=list)
    images: List[ImageResource] = field(default_factory=list)


@dataclass
class Headings:
    h1: List[str] = field(default_factory=list)
    h2: List[str] = field(default_factory=list)
    h3: List[str] = field(default_factory=list)
    h4: List[str] = field(default_factory=list)
    h5: List[str] = field(default_factory=list)
    h6: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "h1": self.h1, "h2": self.h2, "h3": self.h3,
            "h4": self.h4, "h5": self.h5, "h6": self.h6,
        }


@dataclass
class ResponseHeaders:
    """The subset of response headers kept for each page."""

    content_type: Optional[str] = None
    server: Optional[str] = None
    cache_control: Optional[str] = None
    x_frame_options: Optional[str] = None
    strict_transport_security: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "contentType": self.content_type,
            "server": self.server,
            "cacheControl": self.cache_control,
            "xFrameOptions": self.x_frame_options,
            "strictTransportSecurity": self.strict_transport_security,
        }


@dataclass(frozen=True)
class PageResult:
    """Outcome of crawling a single URL.

    A failed page carries only url, depth, parent_url, crawled_at and error;
    status_code and load_time_ms stay None when navigation never completed.
    """

    url: str
    depth: int
    parent_url: Optional[str] = None
    crawled_at: datetime = field(default_factory=utc_now)
    title: Optional[str] = None
    status_code: Optional[int] = None
    load_time_ms: Optional[int] = None
    meta: Dict[str, str] = field(default_factory=dict)
    headings: Headings = field(default_factory=Headings)
    links: PageLinks = field(default_factory=PageLinks)
    resources: PageResources = field(default_factory=PageResources)
    headers: ResponseHeaders = field(default_factory=ResponseHeaders)
    screenshot_ref: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, entry: FrontierEntry, error: str) -> "PageResult":
        """Build the error-only result for a page that could not be loaded."""
        return cls(
            url=entry.url,
            depth=entry.depth,
            parent_url=entry.parent_url,
            error=error,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "depth": self.depth,
            "parentUrl": self.parent_url,
            "statusCode": self.status_code,
            "loadTime": self.load_time_ms,
            "crawledAt": self.crawled_at.isoformat(),
            "meta": dict(self.meta),
            "headings": self.headings.to_dict(),
            "links": {
                "internal": list(self.links.internal),
                "external": list(self.links.external),
            },
            "resources": {
                "css": list(self.resources.css),
                "js": list(self.resources.js),
                "images": [
                    {"url": image.url, "alt": image.alt}
                    for image in self.resources.images
                ],
            },
            "headers": self.headers.to_dict(),
            "screenshot": self.screenshot_ref,
            "error": self.error,
        }


@dataclass
class SitemapEntry:
    """Condensed view of a PageResult stored in the report sitemap."""

    url: str
    depth: int
    title: Optional[str] = None
    links: List[str] = field(default_factory=list)
    css_count: int = 0
    js_count: int = 0
    image_count: int = 0
    load_time_ms: Optional[int] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "depth": self.depth,
            "links": list(self.links),
            "resources": {
                "cssCount": self.css_count,
                "jsCount": self.js_count,
                "imageCount": self.image_count,
            },
            "loadTime": self.load_time_ms,
            "statusCode": self.status_code,
            "error": self.error,
        }


@dataclass
class CrawlStatistics:
    total_links: int = 0
    total_images: int = 0
    avg_load_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalLinks": self.total_links,
            "totalImages": self.total_images,
            "avgLoadTime": self.avg_load_time,
        }


@dataclass
class CrawlReport:
    """Final, read-only summary of a crawl job."""

    crawl_id: str
    website: str
    total_pages: int
    crawled_at: datetime
    duration_ms: int
    config: Dict[str, Any]
    sitemap: Dict[str, SitemapEntry] = field(default_factory=dict)
    statistics: CrawlStatistics = field(default_factory=CrawlStatistics)
    stop_reason: str = "exhausted"
    pages: Dict[str, PageResult] = field(default_factory=dict, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape consumed by the API and storage layers."""
        return {
            "crawlId": self.crawl_id,
            "website": self.website,
            "totalPages": self.total_pages,
            "crawledAt": self.crawled_at.isoformat(),
            "duration": self.duration_ms,
            "stopReason": self.stop_reason,
            "config": dict(self.config),
            "sitemap": {
                path: entry.to_dict() for path, entry in self.sitemap.items()
            },
            "statistics": self.statistics.to_dict(),
        }
