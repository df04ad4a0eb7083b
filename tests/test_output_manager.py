"""Tests for the file-based report store."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from healthcrawler.config import CrawlConfig
from healthcrawler.models import CrawlReport, PageResult, SitemapEntry
from healthcrawler.output_manager import ReportStore

SEED = "https://example.com"


def make_report(crawl_id="crawl_1_abc", website=SEED, crawled_at=None):
    return CrawlReport(
        crawl_id=crawl_id,
        website=website,
        total_pages=1,
        crawled_at=crawled_at or datetime.now(timezone.utc),
        duration_ms=1234,
        config=CrawlConfig().snapshot(),
        sitemap={"/": SitemapEntry(url=SEED, depth=0, status_code=200, load_time_ms=50)},
        pages={SEED: PageResult(url=SEED, depth=0, status_code=200, load_time_ms=50)},
    )


@pytest.fixture
def store(tmp_path):
    return ReportStore(tmp_path / "crawls")


class TestReportStore:
    """Test cases for ReportStore."""

    def test_creates_directory(self, tmp_path):
        ReportStore(tmp_path / "nested" / "crawls")
        assert (tmp_path / "nested" / "crawls").is_dir()

    def test_save_and_get(self, store):
        path = store.save(make_report())

        assert path.name == "crawl_1_abc.json"
        loaded = store.get("crawl_1_abc")
        assert loaded["crawlId"] == "crawl_1_abc"
        assert loaded["sitemap"]["/"]["statusCode"] == 200
        assert not (store.base_output_dir / "pages").exists()

    def test_save_with_pages(self, store):
        store.save(make_report(), include_pages=True)

        pages_file = store.base_output_dir / "pages" / "crawl_1_abc.json"
        pages = json.loads(pages_file.read_text())
        assert pages[SEED]["loadTime"] == 50

    def test_get_missing(self, store):
        assert store.get("crawl_missing") is None

    def test_get_rejects_path_traversal(self, store):
        assert store.get("../secrets") is None

    def test_save_rejects_invalid_id(self, store):
        with pytest.raises(ValueError):
            store.save(make_report(crawl_id="../evil"))

    def test_get_unreadable_file(self, store):
        (store.base_output_dir / "crawl_bad.json").write_text("{not json")
        assert store.get("crawl_bad") is None

    def test_recent_newest_first(self, store):
        now = datetime.now(timezone.utc)
        store.save(make_report("crawl_old", crawled_at=now - timedelta(days=2)))
        store.save(make_report("crawl_new", crawled_at=now))
        store.save(make_report("crawl_mid", crawled_at=now - timedelta(days=1)))
        store.save(make_report("crawl_other", website="https://other.com"))
        (store.base_output_dir / "crawl_broken.json").write_text("{")

        reports = store.recent(SEED)

        assert [r["crawlId"] for r in reports] == ["crawl_new", "crawl_mid", "crawl_old"]
        assert len(store.recent(SEED, limit=1)) == 1

    def test_cleanup(self, store):
        now = datetime.now(timezone.utc)
        store.save(make_report("crawl_old", crawled_at=now - timedelta(days=40)), include_pages=True)
        store.save(make_report("crawl_new", crawled_at=now))

        removed = store.cleanup(days_old=30)

        assert removed == 1
        assert store.get("crawl_old") is None
        assert store.get("crawl_new") is not None
        assert not (store.base_output_dir / "pages" / "crawl_old.json").exists()

    def test_cleanup_keeps_undated_reports(self, store):
        (store.base_output_dir / "crawl_undated.json").write_text(json.dumps({"crawlId": "crawl_undated"}))
        (store.base_output_dir / "crawl_garbled.json").write_text(
            json.dumps({"crawlId": "crawl_garbled", "crawledAt": "yesterday-ish"})
        )

        assert store.cleanup(days_old=0) == 0
        assert store.get("crawl_undated") is not None
        assert store.get("crawl_garbled") is not None

    def test_stats(self, store):
        now = datetime.now(timezone.utc)
        store.save(make_report("crawl_old", crawled_at=now - timedelta(days=20)))
        store.save(make_report("crawl_new", crawled_at=now))
        (store.base_output_dir / "crawl_undated.json").write_text("{}")

        stats = store.stats()

        assert stats["storage"] == "file"
        assert stats["storageDir"] == str(store.base_output_dir)
        assert stats["totalCrawls"] == 3
        assert stats["recentCrawls"] == 1
        assert stats["oldestCrawl"] == (now - timedelta(days=20)).isoformat()
        assert stats["newestCrawl"] == now.isoformat()

    def test_stats_empty_store(self, store):
        stats = store.stats()

        assert stats["totalCrawls"] == 0
        assert stats["recentCrawls"] == 0
        assert stats["oldestCrawl"] is None
        assert stats["newestCrawl"] is None
