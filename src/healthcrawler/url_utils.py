"""URL normalization and single-domain scoping."""

import logging
import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from healthcrawler.constants import NON_NAVIGABLE_SCHEMES

logger = logging.getLogger(__name__)

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


class CrawlError(Exception):
    """Base class for errors that abort a whole crawl."""


class InvalidUrlError(CrawlError, ValueError):
    """Raised when a URL cannot be parsed into an absolute http(s) URL."""

    def __init__(self, url: str, reason: Optional[str] = None):
        self.url = url
        self.reason = reason
        message = f"Invalid URL: {url}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


def normalize_url(url: str) -> str:
    """Normalize a URL into the canonical form used for deduplication.

    Missing schemes default to https. Scheme and host are lowercased, the
    fragment is dropped and trailing slashes are stripped from the path
    (``https://example.com/`` becomes ``https://example.com``). The query
    string is kept. Applying the function twice gives the same result.

    Args:
        url: URL to normalize

    Returns:
        Normalized URL

    Raises:
        InvalidUrlError: If the URL has no host, a non-http(s) scheme, an
            invalid port or embedded whitespace
    """
    if url is None:
        raise InvalidUrlError("None", "empty")

    url = url.strip()
    if not url:
        raise InvalidUrlError(url, "empty")
    if any(ch.isspace() for ch in url):
        raise InvalidUrlError(url, "contains whitespace")

    if not _SCHEME_PATTERN.match(url):
        url = "https://" + url

    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme not in ("http", "https"):
        raise InvalidUrlError(url, f"unsupported scheme '{scheme}'")

    try:
        hostname = parsed.hostname
        port = parsed.port
    except ValueError as e:
        raise InvalidUrlError(url, str(e)) from e

    if not hostname:
        raise InvalidUrlError(url, "missing host")

    netloc = f"[{hostname}]" if ":" in hostname else hostname
    if parsed.username or parsed.password:
        raise InvalidUrlError(url, "credentials are not allowed")
    if port is not None:
        netloc = f"{netloc}:{port}"

    path = parsed.path.rstrip("/")
    normalized = f"{scheme}://{netloc}{path}"
    if parsed.query:
        normalized += f"?{parsed.query}"
    return normalized


def get_hostname(url: str) -> Optional[str]:
    """Return the lowercased hostname of a URL, or None if it has none."""
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def resolve_link(base_url: str, href: Optional[str]) -> Optional[str]:
    """Resolve an anchor href against the page it was found on.

    Args:
        base_url: URL of the page containing the link
        href: Raw href attribute value

    Returns:
        Normalized absolute URL, or None for empty hrefs, bare fragments,
        non-navigable schemes (mailto:, javascript:, ...) and unparsable URLs
    """
    if not href:
        return None

    href = href.strip()
    if not href or href.startswith("#"):
        return None
    if href.lower().startswith(NON_NAVIGABLE_SCHEMES):
        return None

    try:
        return normalize_url(urljoin(base_url, href))
    except (InvalidUrlError, ValueError):
        logger.debug(f"Skipping unparsable link {href!r} on {base_url}")
        return None


class DomainScope:
    """Classifies URLs against the seed URL's hostname."""

    def __init__(self, seed_url: str):
        """
        Initialize the scope.

        Args:
            seed_url: Normalized seed URL that defines the crawl's domain
        """
        parsed = urlparse(seed_url)
        self.seed_url = seed_url
        self.hostname = parsed.hostname
        self.origin = f"{parsed.scheme}://{parsed.netloc}"

    def is_internal(self, url: str) -> bool:
        """Check whether a URL is on the same host as the seed."""
        return get_hostname(url) == self.hostname

    def path_for(self, url: str) -> str:
        """Strip the seed origin from a URL for use as a sitemap key.

        URLs on a different origin (another scheme or port) are returned
        unchanged.
        """
        if url == self.origin:
            return "/"
        if url.startswith(self.origin) and url[len(self.origin)] in "/?":
            return url[len(self.origin):]
        return url
