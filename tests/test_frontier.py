"""Tests for the crawl frontier and crawl state."""

import pytest

from healthcrawler.frontier import CrawlFrontier, CrawlState, FrontierStatus
from healthcrawler.models import FrontierEntry, PageLinks, PageResult


def page(url, depth=0, internal=None, error=None):
    return PageResult(
        url=url,
        depth=depth,
        links=PageLinks(internal=list(internal or [])),
        error=error,
    )


class TestCrawlFrontier:
    """Test cases for CrawlFrontier."""

    def test_fifo_order(self):
        frontier = CrawlFrontier()
        for i in range(3):
            frontier.enqueue(FrontierEntry(f"https://example.com/{i}", 1))

        assert [frontier.dequeue().url for _ in range(3)] == [
            "https://example.com/0",
            "https://example.com/1",
            "https://example.com/2",
        ]

    def test_enqueue_rejects_duplicates(self):
        frontier = CrawlFrontier()
        assert frontier.enqueue(FrontierEntry("https://example.com/a", 1))
        assert not frontier.enqueue(FrontierEntry("https://example.com/a", 2))
        assert len(frontier) == 1

    def test_url_stays_queued_after_dequeue(self):
        frontier = CrawlFrontier()
        frontier.enqueue(FrontierEntry("https://example.com/a", 1))
        frontier.dequeue()

        assert not frontier
        assert frontier.is_queued("https://example.com/a")
        assert not frontier.enqueue(FrontierEntry("https://example.com/a", 1))

    def test_dequeue_empty_raises(self):
        with pytest.raises(IndexError):
            CrawlFrontier().dequeue()


class TestCrawlState:
    """Test cases for CrawlState."""

    def test_starts_idle_then_running(self):
        state = CrawlState(max_depth=2, max_pages=10)
        assert state.status is FrontierStatus.IDLE

        state.start(FrontierEntry("https://example.com", 0))
        assert state.status is FrontierStatus.RUNNING

    def test_cannot_start_twice(self):
        state = CrawlState(max_depth=2, max_pages=10)
        state.start(FrontierEntry("https://example.com", 0))
        with pytest.raises(RuntimeError):
            state.start(FrontierEntry("https://example.com", 0))

    def test_exhausted_when_frontier_empty(self):
        state = CrawlState(max_depth=2, max_pages=10)
        state.start(FrontierEntry("https://example.com", 0))

        entry = state.next_entry()
        state.record(page(entry.url))

        assert state.next_entry() is None
        assert state.status is FrontierStatus.EXHAUSTED

    def test_page_budget_reached(self):
        state = CrawlState(max_depth=2, max_pages=1)
        state.start(FrontierEntry("https://example.com", 0))
        state.frontier.enqueue(FrontierEntry("https://example.com/a", 1))

        state.record(page(state.next_entry().url))

        assert state.next_entry() is None
        assert state.status is FrontierStatus.PAGE_BUDGET_REACHED
        assert len(state.frontier) == 1

    def test_entries_beyond_max_depth_are_discarded(self):
        state = CrawlState(max_depth=1, max_pages=10)
        state.start(FrontierEntry("https://example.com/deep", 2))
        state.frontier.enqueue(FrontierEntry("https://example.com/ok", 1))

        entry = state.next_entry()
        assert entry.url == "https://example.com/ok"
        assert state.status is FrontierStatus.RUNNING

    def test_visited_entries_are_skipped(self):
        state = CrawlState(max_depth=2, max_pages=10)
        state.start(FrontierEntry("https://example.com", 0))
        state.record(page("https://example.com/a", depth=1))
        state.frontier.enqueue(FrontierEntry("https://example.com/a", 1))

        assert state.next_entry().url == "https://example.com"
        assert state.next_entry() is None

    def test_record_marks_visited_once(self):
        state = CrawlState(max_depth=2, max_pages=10)
        result = page("https://example.com")
        state.record(result)

        assert state.visited == {"https://example.com"}
        assert state.results["https://example.com"] is result
        with pytest.raises(ValueError):
            state.record(page("https://example.com"))

    def test_error_results_count_toward_budget(self):
        state = CrawlState(max_depth=2, max_pages=1)
        state.record(page("https://example.com", error="Timeout"))
        assert not state.budget_remaining

    def test_enqueue_links_one_level_deeper(self):
        state = CrawlState(max_depth=2, max_pages=10)
        parent = page(
            "https://example.com",
            internal=["https://example.com/a", "https://example.com/b"],
        )
        state.record(parent)

        assert state.enqueue_links(parent) == 2
        entries = list(state.frontier)
        assert [e.url for e in entries] == ["https://example.com/a", "https://example.com/b"]
        assert all(e.depth == 1 for e in entries)
        assert all(e.parent_url == "https://example.com" for e in entries)

    def test_enqueue_links_respects_max_depth(self):
        state = CrawlState(max_depth=0, max_pages=10)
        parent = page("https://example.com", internal=["https://example.com/a"])
        state.record(parent)

        assert state.enqueue_links(parent) == 0
        assert not state.frontier

    def test_enqueue_links_skips_visited_and_queued(self):
        state = CrawlState(max_depth=3, max_pages=10)
        state.start(FrontierEntry("https://example.com", 0))
        state.frontier.enqueue(FrontierEntry("https://example.com/queued", 1))
        parent = page(
            "https://example.com",
            internal=["https://example.com", "https://example.com/queued", "https://example.com/new"],
        )
        state.next_entry()
        state.record(parent)

        assert state.enqueue_links(parent) == 1
        assert [e.url for e in state.frontier] == [
            "https://example.com/queued",
            "https://example.com/new",
        ]

    def test_enqueue_links_stops_when_budget_spent(self):
        state = CrawlState(max_depth=3, max_pages=1)
        parent = page("https://example.com", internal=["https://example.com/a"])
        state.record(parent)

        assert state.enqueue_links(parent) == 0

    def test_frontier_never_outgrows_remaining_budget(self):
        state = CrawlState(max_depth=3, max_pages=5)
        parent = page(
            "https://example.com",
            internal=[f"https://example.com/p{i}" for i in range(1000)],
        )
        state.record(parent)

        assert state.enqueue_links(parent) == 4
        assert len(state.frontier) == 4
        assert state.frontier_full
        assert not state.should_enqueue("https://example.com/extra", 1)

    def test_disallowed_links_do_not_take_frontier_slots(self):
        state = CrawlState(max_depth=3, max_pages=3)
        parent = page(
            "https://example.com",
            internal=[
                "https://example.com/private/1",
                "https://example.com/a",
                "https://example.com/private/2",
                "https://example.com/b",
                "https://example.com/c",
            ],
        )
        state.record(parent)

        queued = state.enqueue_links(parent, is_allowed=lambda url: "/private/" not in url)

        assert queued == 2
        assert [e.url for e in state.frontier] == [
            "https://example.com/a",
            "https://example.com/b",
        ]

    def test_cancel(self):
        state = CrawlState(max_depth=3, max_pages=1)
        state.cancel()
        assert state.status is FrontierStatus.CANCELLED
        assert state.status.is_terminal
