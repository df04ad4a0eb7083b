"""Robots.txt policy loading for the seed domain."""

import logging
from typing import Optional
from urllib.parse import urlparse
from urllib.robotparser import RobotFileParser

import httpx

from healthcrawler.constants import ROBOTS_TXT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class RobotsPolicy:
    """Allow/deny predicate built from a robots.txt file.

    A policy without a parser allows everything; that is what a crawl gets
    whenever robots.txt is missing or could not be fetched.
    """

    def __init__(self, parser: Optional[RobotFileParser] = None, robots_url: Optional[str] = None):
        self._parser = parser
        self.robots_url = robots_url

    @classmethod
    def allow_all(cls, robots_url: Optional[str] = None) -> "RobotsPolicy":
        return cls(parser=None, robots_url=robots_url)

    @classmethod
    def from_text(cls, content: str, robots_url: Optional[str] = None) -> "RobotsPolicy":
        """Parse robots.txt content into a policy.

        Args:
            content: Raw robots.txt body
            robots_url: URL the content was fetched from

        Returns:
            RobotsPolicy enforcing the parsed rules
        """
        parser = RobotFileParser()
        if robots_url:
            parser.set_url(robots_url)
        parser.parse(content.splitlines())
        return cls(parser=parser, robots_url=robots_url)

    @property
    def is_allow_all(self) -> bool:
        return self._parser is None

    def is_allowed(self, url: str, user_agent: str) -> bool:
        """Check if a URL may be crawled by the given user agent.

        Args:
            url: URL to check
            user_agent: User agent string to match rules against

        Returns:
            True if the URL can be crawled
        """
        if self._parser is None:
            return True
        return self._parser.can_fetch(user_agent or "*", url)


def robots_url_for(url: str) -> str:
    """Return ``{origin}/robots.txt`` for a URL."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}/robots.txt"


async def load_robots_policy(
    seed_url: str,
    user_agent: str,
    timeout: float = ROBOTS_TXT_TIMEOUT_SECONDS,
    client: Optional[httpx.AsyncClient] = None,
) -> RobotsPolicy:
    """Fetch and parse robots.txt for the seed URL's origin.

    Makes exactly one request. Any failure (network error, timeout, non-2xx
    status, undecodable body) falls back to an allow-all policy; a missing
    robots.txt never fails the crawl.

    Args:
        seed_url: Normalized seed URL
        user_agent: User agent header for the request
        timeout: Request timeout in seconds
        client: Optional shared httpx client (mainly for tests)

    Returns:
        RobotsPolicy for the origin
    """
    robots_url = robots_url_for(seed_url)
    headers = {
        "User-Agent": user_agent,
        "Accept": "text/plain,text/html,*/*",
    }

    try:
        if client is not None:
            response = await client.get(robots_url, headers=headers, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as owned_client:
                response = await owned_client.get(robots_url, headers=headers)

        if not response.is_success:
            logger.info(f"No robots.txt found at {robots_url} (status: {response.status_code})")
            return RobotsPolicy.allow_all(robots_url)

        policy = RobotsPolicy.from_text(response.text, robots_url)
        logger.info(f"Loaded robots.txt from {robots_url}")
        if not policy.is_allowed(seed_url, user_agent):
            logger.warning(f"robots.txt blocks crawling of {seed_url}")
        return policy

    except Exception as e:
        logger.warning(f"Could not load robots.txt: {e}")
        return RobotsPolicy.allow_all(robots_url)
