"""
Browser session management using Playwright.

One BrowserSession owns one headless browser process for the lifetime of a
crawl job. Every URL is loaded in its own isolated browser context, which is
closed whether or not navigation succeeded:

    async with BrowserSession(config) as session:
        result = await session.fetch(entry, extractor)
"""
import base64
import logging
import time
from typing import Optional

from healthcrawler.config import CrawlConfig
from healthcrawler.constants import (
    BROWSER_LAUNCH_ARGS,
    NAVIGATION_WAIT_UNTIL,
    SCREENSHOT_JPEG_QUALITY,
    SCREENSHOT_REF_PREFIX_LENGTH,
)
from healthcrawler.extractor import PageExtractor, extract_headers
from healthcrawler.models import FrontierEntry, PageResult
from healthcrawler.url_utils import CrawlError

logger = logging.getLogger(__name__)


class BrowserLaunchError(CrawlError):
    """Raised when the browser process cannot be started."""


class BrowserSession:
    """
    Playwright-backed browser for a single crawl job.

    Use as an async context manager; the browser is launched on entry and
    closed exactly once on exit, including when the crawl raises.
    """

    def __init__(self, config: CrawlConfig):
        """
        Initialize the session.

        Args:
            config: Crawl configuration (user agent, viewport, timeouts)
        """
        self._config = config
        self._playwright = None
        self._browser = None

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    async def __aenter__(self) -> "BrowserSession":
        """Launch the browser."""
        try:
            from playwright.async_api import async_playwright
        except ImportError:
            raise ImportError(
                "Playwright is required for browser-based crawling. "
                "Install with: pip install playwright && playwright install chromium"
            )

        logger.info(f"Launching chromium browser (headless={self._config.headless})")

        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._config.headless,
                args=BROWSER_LAUNCH_ARGS,
            )
        except Exception as e:
            await self._shutdown()
            raise BrowserLaunchError(f"Failed to launch browser: {e}") from e

        logger.info("Browser launched successfully")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close the browser."""
        await self._shutdown()
        logger.info("Browser closed")

    async def _shutdown(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None

        try:
            if browser:
                await browser.close()
        except Exception as e:
            logger.warning(f"Error while closing browser: {e}")
        finally:
            if playwright:
                await playwright.stop()

    async def fetch(self, entry: FrontierEntry, extractor: PageExtractor) -> PageResult:
        """
        Load a URL in a fresh browser context and extract its data.

        Navigation is attempted once. A timeout or network error produces an
        error-only PageResult instead of raising. A non-2xx final status is
        recorded as an error too, keeping status and load time.

        Args:
            entry: Frontier entry to crawl
            extractor: Extractor bound to the crawl's domain scope

        Returns:
            PageResult for the URL

        Raises:
            RuntimeError: If the session has not been entered
        """
        if not self._browser:
            raise RuntimeError(
                "Browser is not running. Use BrowserSession as an async context manager: "
                "async with BrowserSession(config) as session:"
            )

        url = entry.url
        context = None
        try:
            context = await self._browser.new_context(
                user_agent=self._config.user_agent,
                viewport={
                    "width": self._config.viewport_width,
                    "height": self._config.viewport_height,
                },
            )
            page = await context.new_page()

            start_time = time.monotonic()
            response = await page.goto(
                url,
                wait_until=NAVIGATION_WAIT_UNTIL,
                timeout=self._config.timeout_ms,
            )
            load_time_ms = int((time.monotonic() - start_time) * 1000)

            status_code = response.status if response else None
            headers = extract_headers(dict(response.headers) if response else None)

            if status_code is not None and not 200 <= status_code < 300:
                logger.warning(f"HTTP {status_code} for {url}")
                return PageResult(
                    url=url,
                    depth=entry.depth,
                    parent_url=entry.parent_url,
                    status_code=status_code,
                    load_time_ms=load_time_ms,
                    headers=headers,
                    error=f"HTTP {status_code}",
                )

            html = await page.content()
            extracted = extractor.extract(url, html)

            title = extracted.title
            try:
                title = await page.title() or title
            except Exception as e:
                logger.debug(f"Could not read title for {url}: {e}")

            screenshot_ref = None
            if self._config.screenshot_enabled:
                screenshot_ref = await self._capture_screenshot(page, url)

            logger.info(f"Crawl complete: {url} (status={status_code}, time={load_time_ms}ms)")

            return PageResult(
                url=url,
                depth=entry.depth,
                parent_url=entry.parent_url,
                title=title,
                status_code=status_code,
                load_time_ms=load_time_ms,
                meta=extracted.meta,
                headings=extracted.headings,
                links=extracted.links,
                resources=extracted.resources,
                headers=headers,
                screenshot_ref=screenshot_ref,
            )

        except Exception as e:
            logger.error(f"Error crawling {url}: {e}")
            return PageResult.failed(entry, str(e))

        finally:
            if context is not None:
                try:
                    await context.close()
                except Exception as e:
                    logger.warning(f"Error while closing context for {url}: {e}")

    async def _capture_screenshot(self, page, url: str) -> Optional[str]:
        """Capture a JPEG of the viewport and return a short data-URI reference."""
        try:
            image = await page.screenshot(
                type="jpeg",
                quality=SCREENSHOT_JPEG_QUALITY,
                full_page=False,
            )
        except Exception as e:
            logger.warning(f"Screenshot failed for {url}: {e}")
            return None

        encoded = base64.b64encode(image).decode("ascii")
        return f"data:image/jpeg;base64,{encoded[:SCREENSHOT_REF_PREFIX_LENGTH]}..."
