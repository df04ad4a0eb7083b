"""Site crawler with breadth-first search over a single domain."""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from healthcrawler.browser_crawler import BrowserSession
from healthcrawler.config import CrawlConfig
from healthcrawler.extractor import PageExtractor
from healthcrawler.frontier import CrawlState, FrontierStatus
from healthcrawler.models import CrawlJob, CrawlReport, FrontierEntry, utc_now
from healthcrawler.report import build_report
from healthcrawler.robots import RobotsPolicy, load_robots_policy
from healthcrawler.url_utils import DomainScope, normalize_url

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class SiteCrawler:
    """Crawls one site breadth-first with a real browser.

    Processes pages level by level:
    - depth 0: the seed URL
    - depth 1: pages linked from the seed
    - depth 2: pages linked from depth 1
    - etc.

    Pages are fetched one at a time; the frontier is drained strictly in
    FIFO order, so every depth-N page is considered before any depth-N+1
    page. The crawl stops when the frontier is empty, the page budget is
    spent, or the cancel event is set.
    """

    def __init__(
        self,
        start_url: str,
        config: Optional[CrawlConfig] = None,
        on_progress: Optional[ProgressCallback] = None,
        session_factory: Optional[Callable[[CrawlConfig], Any]] = None,
        robots_loader: Optional[Callable[..., Any]] = None,
    ):
        """Initialize the site crawler.

        Args:
            start_url: Seed URL; a missing scheme defaults to https
            config: Crawl configuration (defaults to CrawlConfig())
            on_progress: Optional callback for progress updates
                (pages_crawled, max_pages, url)
            session_factory: Builds the async browser session context manager
                (defaults to BrowserSession)
            robots_loader: Coroutine function returning a RobotsPolicy
                (defaults to load_robots_policy)

        Raises:
            InvalidUrlError: If the seed URL cannot be normalized
        """
        self.config = config or CrawlConfig()
        self.job = CrawlJob(seed_url=normalize_url(start_url), config=self.config)
        self.scope = DomainScope(self.job.seed_url)
        self.on_progress = on_progress
        self._session_factory = session_factory or BrowserSession
        self._robots_loader = robots_loader or load_robots_policy

    @property
    def crawl_id(self) -> str:
        return self.job.crawl_id

    async def crawl(self, cancel_event: Optional[asyncio.Event] = None) -> CrawlReport:
        """Run the crawl to completion.

        Args:
            cancel_event: Optional event; once set, the crawl stops before
                the next page and reports what it has so far

        Returns:
            CrawlReport for the crawl

        Raises:
            BrowserLaunchError: If the browser cannot be started
        """
        config = self.config
        seed_url = self.job.seed_url
        self.job.start_time = utc_now()

        logger.info(f"Starting crawl {self.crawl_id}: {seed_url}")
        logger.info(f"Config: maxDepth={config.max_depth}, maxPages={config.max_pages}")

        state = CrawlState(max_depth=config.max_depth, max_pages=config.max_pages)
        extractor = PageExtractor(self.scope, max_resources=config.max_resources)
        policy = await self._load_policy()

        async with self._session_factory(config) as session:
            state.start(FrontierEntry(url=seed_url, depth=0, parent_url=None))
            await self._execute_crawl_loop(state, session, extractor, policy, cancel_event)

        report = build_report(self.job, state, self.scope)
        logger.info(
            f"Crawl completed: {report.total_pages} pages in "
            f"{report.duration_ms / 1000:.2f}s ({report.stop_reason})"
        )
        return report

    async def _load_policy(self) -> RobotsPolicy:
        if not self.config.respect_robots_txt:
            return RobotsPolicy.allow_all()
        return await self._robots_loader(
            self.job.seed_url,
            self.config.user_agent,
            timeout=self.config.robots_timeout,
        )

    async def _execute_crawl_loop(
        self,
        state: CrawlState,
        session,
        extractor: PageExtractor,
        policy: RobotsPolicy,
        cancel_event: Optional[asyncio.Event],
    ) -> None:
        """Drain the frontier until a terminal status is reached."""
        current_depth = 0
        user_agent = self.config.user_agent

        def is_allowed(url: str) -> bool:
            return policy.is_allowed(url, user_agent)

        link_filter = is_allowed if self.config.respect_robots_txt else None

        while state.status is FrontierStatus.RUNNING:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Crawl {self.crawl_id} cancelled")
                state.cancel()
                break

            entry = state.next_entry()
            if entry is None:
                break

            if link_filter is not None and not link_filter(entry.url):
                logger.info(f"Blocked by robots.txt: {entry.url}")
                continue

            if entry.depth > current_depth:
                logger.info(f"--- Moving to depth {entry.depth} ---")
                current_depth = entry.depth

            logger.info(
                f"Crawling [{entry.depth}] ({state.pages_crawled + 1}/{state.max_pages}): {entry.url}"
            )
            result = await session.fetch(entry, extractor)
            state.record(result)

            if result.succeeded:
                queued = state.enqueue_links(result, is_allowed=link_filter)
                if queued:
                    logger.info(f"  Queued {queued} new links for depth {entry.depth + 1}")

            if self.on_progress:
                self.on_progress(state.pages_crawled, state.max_pages, entry.url)


async def crawl_website(
    url: str,
    options: Optional[Dict[str, Any]] = None,
    cancel_event: Optional[asyncio.Event] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> CrawlReport:
    """Crawl a website and return its report.

    Entry point for the API layer. ``options`` accepts the API field names
    (``maxDepth``, ``maxPages``, ``screenshotEnabled``, ``respectRobotsTxt``,
    ``timeoutMs``).

    Args:
        url: Seed URL
        options: Optional crawl options
        cancel_event: Optional event that stops the crawl when set
        on_progress: Optional progress callback

    Returns:
        CrawlReport
    """
    config = CrawlConfig.from_options(options)
    crawler = SiteCrawler(url, config=config, on_progress=on_progress)
    return await crawler.crawl(cancel_event=cancel_event)
