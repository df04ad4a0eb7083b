"""
Structured data extraction from rendered HTML.

Each category (meta tags, links, resources, headings) is extracted on its
own so that a failure in one never costs the others.
"""
import logging
from typing import Callable, Dict, List, Mapping, Optional, TypeVar
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from healthcrawler.constants import HEADING_LEVELS, MAX_RESOURCES_PER_CATEGORY
from healthcrawler.models import (
    Headings,
    ImageResource,
    PageLinks,
    PageResources,
    ResponseHeaders,
)
from healthcrawler.url_utils import DomainScope, resolve_link

logger = logging.getLogger(__name__)

T = TypeVar("T")


def extract_headers(headers: Optional[Mapping[str, str]]) -> ResponseHeaders:
    """Pick the tracked response headers, matching names case-insensitively."""
    if not headers:
        return ResponseHeaders()

    lowered = {str(k).lower(): v for k, v in headers.items()}
    return ResponseHeaders(
        content_type=lowered.get("content-type"),
        server=lowered.get("server"),
        cache_control=lowered.get("cache-control"),
        x_frame_options=lowered.get("x-frame-options"),
        strict_transport_security=lowered.get("strict-transport-security"),
    )


class ExtractedPage:
    """Everything pulled out of one page's HTML."""

    def __init__(
        self,
        meta: Dict[str, str],
        links: PageLinks,
        resources: PageResources,
        headings: Headings,
        title: Optional[str] = None,
    ):
        self.meta = meta
        self.links = links
        self.resources = resources
        self.headings = headings
        self.title = title


class PageExtractor:
    """Extracts meta tags, links, resources and headings from HTML."""

    def __init__(self, scope: DomainScope, max_resources: int = MAX_RESOURCES_PER_CATEGORY):
        """
        Initialize the extractor.

        Args:
            scope: Domain scope used to classify links
            max_resources: Cap on stylesheets, scripts and images per page
        """
        self.scope = scope
        self.max_resources = max_resources

    def extract(self, url: str, html: str) -> ExtractedPage:
        """Extract every category from a page's HTML.

        Args:
            url: URL of the page (base for relative references)
            html: Rendered HTML

        Returns:
            ExtractedPage; a category that failed is left empty
        """
        soup = BeautifulSoup(html or "", "html.parser")

        return ExtractedPage(
            meta=self._safely("meta", url, lambda: self.extract_meta(soup), dict),
            links=self._safely("links", url, lambda: self.extract_links(soup, url), PageLinks),
            resources=self._safely(
                "resources", url, lambda: self.extract_resources(soup, url), PageResources
            ),
            headings=self._safely("headings", url, lambda: self.extract_headings(soup), Headings),
            title=self._safely("title", url, lambda: self.extract_title(soup), lambda: None),
        )

    def _safely(self, category: str, url: str, func: Callable[[], T], default: Callable[[], T]) -> T:
        try:
            return func()
        except Exception as e:
            logger.warning(f"Failed to extract {category} from {url}: {e}")
            return default()

    def extract_title(self, soup: BeautifulSoup) -> Optional[str]:
        if soup.title and soup.title.string:
            return soup.title.string.strip()
        return None

    def extract_meta(self, soup: BeautifulSoup) -> Dict[str, str]:
        """Collect ``name``/``property`` → ``content`` pairs from meta tags."""
        meta: Dict[str, str] = {}
        for tag in soup.find_all("meta"):
            name = tag.get("name") or tag.get("property")
            content = tag.get("content")
            if name and content:
                meta[name] = content
        return meta

    def extract_links(self, soup: BeautifulSoup, page_url: str) -> PageLinks:
        """Resolve and classify every anchor on the page.

        Links are de-duplicated within the page only, keeping first-seen
        order. Cross-page deduplication is the frontier's job.
        """
        links = PageLinks()
        seen = set()

        for anchor in soup.find_all("a", href=True):
            absolute_url = resolve_link(page_url, anchor.get("href"))
            if not absolute_url or absolute_url in seen:
                continue
            seen.add(absolute_url)

            if self.scope.is_internal(absolute_url):
                links.internal.append(absolute_url)
            else:
                links.external.append(absolute_url)

        return links

    def extract_resources(self, soup: BeautifulSoup, page_url: str) -> PageResources:
        """Collect stylesheet, script and image references."""
        css: List[str] = []
        for tag in soup.find_all("link", href=True):
            rel = tag.get("rel") or []
            if isinstance(rel, str):
                rel = rel.split()
            if "stylesheet" in [r.lower() for r in rel]:
                css.append(urljoin(page_url, tag["href"].strip()))

        js = [
            urljoin(page_url, tag["src"].strip())
            for tag in soup.find_all("script", src=True)
        ]

        images = [
            ImageResource(url=urljoin(page_url, tag["src"].strip()), alt=tag.get("alt") or "")
            for tag in soup.find_all("img", src=True)
        ]

        return PageResources(
            css=css[:self.max_resources],
            js=js[:self.max_resources],
            images=images[:self.max_resources],
        )

    def extract_headings(self, soup: BeautifulSoup) -> Headings:
        """Group heading text by level."""
        headings = Headings()
        for level in HEADING_LEVELS:
            texts = [tag.get_text(" ", strip=True) for tag in soup.find_all(level)]
            setattr(headings, level, texts)
        return headings
