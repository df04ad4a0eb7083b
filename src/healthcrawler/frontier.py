"""Crawl frontier and the explicit crawl state threaded through the loop."""

import logging
from collections import deque
from enum import Enum
from typing import Callable, Deque, Dict, Iterator, Optional, Set

from healthcrawler.models import FrontierEntry, PageResult

logger = logging.getLogger(__name__)


class FrontierStatus(Enum):
    """Lifecycle of a crawl's frontier."""

    IDLE = "idle"
    RUNNING = "running"
    EXHAUSTED = "exhausted"
    PAGE_BUDGET_REACHED = "page_budget_reached"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self not in (FrontierStatus.IDLE, FrontierStatus.RUNNING)


class CrawlFrontier:
    """FIFO queue of discovered URLs.

    Draining it strictly in order gives breadth-first traversal: every
    depth-N entry is popped before any depth-(N+1) entry. A URL is queued at
    most once for the life of the frontier.
    """

    def __init__(self):
        self._queue: Deque[FrontierEntry] = deque()
        self._seen: Set[str] = set()

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)

    def __iter__(self) -> Iterator[FrontierEntry]:
        return iter(self._queue)

    def is_queued(self, url: str) -> bool:
        """Check whether a URL has ever been enqueued."""
        return url in self._seen

    def enqueue(self, entry: FrontierEntry) -> bool:
        """Append an entry to the tail of the queue.

        Args:
            entry: Entry to queue

        Returns:
            True if queued, False if the URL was queued before
        """
        if entry.url in self._seen:
            return False
        self._seen.add(entry.url)
        self._queue.append(entry)
        return True

    def dequeue(self) -> FrontierEntry:
        """Pop the entry at the head of the queue.

        Raises:
            IndexError: If the frontier is empty
        """
        return self._queue.popleft()


class CrawlState:
    """Mutable state of one crawl job, owned by the crawl loop.

    Holds the frontier, the visited set and the URL-keyed results map. A URL
    becomes visited only when its PageResult is recorded, and only once.
    """

    def __init__(self, max_depth: int, max_pages: int):
        self.max_depth = max_depth
        self.max_pages = max_pages
        self.frontier = CrawlFrontier()
        self.visited: Set[str] = set()
        self.results: Dict[str, PageResult] = {}
        self.status = FrontierStatus.IDLE

    @property
    def pages_crawled(self) -> int:
        return len(self.visited)

    @property
    def budget_remaining(self) -> bool:
        return len(self.visited) < self.max_pages

    @property
    def frontier_full(self) -> bool:
        """True once every remaining page slot is already spoken for by a queued entry."""
        return len(self.visited) + len(self.frontier) >= self.max_pages

    def start(self, seed: FrontierEntry) -> None:
        """Queue the seed entry and move from IDLE to RUNNING."""
        if self.status is not FrontierStatus.IDLE:
            raise RuntimeError(f"Crawl already started (status={self.status.value})")
        self.frontier.enqueue(seed)
        self.status = FrontierStatus.RUNNING

    def next_entry(self) -> Optional[FrontierEntry]:
        """Pop the next entry that should be crawled.

        Skips entries already visited and entries deeper than max_depth.
        Sets the terminal status and returns None once the page budget is
        spent or the frontier runs dry.
        """
        while True:
            if not self.budget_remaining:
                self.status = FrontierStatus.PAGE_BUDGET_REACHED
                return None
            if not self.frontier:
                self.status = FrontierStatus.EXHAUSTED
                return None

            entry = self.frontier.dequeue()
            if entry.url in self.visited:
                continue
            if entry.depth > self.max_depth:
                logger.debug(f"Discarding {entry.url} (depth {entry.depth} > {self.max_depth})")
                continue
            return entry

    def record(self, result: PageResult) -> None:
        """Store a page result and mark its URL visited.

        Raises:
            ValueError: If the URL already has a result
        """
        if result.url in self.visited:
            raise ValueError(f"Duplicate result for {result.url}")
        self.visited.add(result.url)
        self.results[result.url] = result

    def should_enqueue(self, url: str, depth: int) -> bool:
        """Check whether a discovered link at ``depth`` belongs in the frontier."""
        return (
            depth <= self.max_depth
            and self.budget_remaining
            and not self.frontier_full
            and url not in self.visited
            and not self.frontier.is_queued(url)
        )

    def enqueue_links(
        self,
        parent: PageResult,
        is_allowed: Optional[Callable[[str], bool]] = None,
    ) -> int:
        """Queue a page's internal links one level deeper.

        The frontier never holds more entries than there are pages left in
        the budget, so links rejected by ``is_allowed`` are dropped here
        rather than taking up a slot.

        Args:
            parent: Successfully crawled page
            is_allowed: Optional predicate, e.g. the robots.txt policy

        Returns:
            Number of links newly queued
        """
        child_depth = parent.depth + 1
        queued = 0
        for link in parent.links.internal:
            if self.frontier_full:
                break
            if not self.should_enqueue(link, child_depth):
                continue
            if is_allowed is not None and not is_allowed(link):
                logger.debug(f"Not queueing {link}: disallowed")
                continue
            if self.frontier.enqueue(FrontierEntry(link, child_depth, parent.url)):
                queued += 1
        return queued

    def cancel(self) -> None:
        self.status = FrontierStatus.CANCELLED
