"""Tests for the command-line interface."""

import json
from datetime import datetime, timezone
from unittest.mock import patch

from healthcrawler.cli import build_parser, main
from healthcrawler.config import CrawlConfig
from healthcrawler.models import CrawlReport, SitemapEntry
from healthcrawler.output_manager import ReportStore

SEED = "https://example.com"


def make_report(crawl_id="crawl_1_abc"):
    return CrawlReport(
        crawl_id=crawl_id,
        website=SEED,
        total_pages=1,
        crawled_at=datetime.now(timezone.utc),
        duration_ms=500,
        config=CrawlConfig().snapshot(),
        sitemap={"/": SitemapEntry(url=SEED, depth=0, status_code=200, load_time_ms=80)},
    )


class TestParser:
    """Test cases for argument parsing."""

    def test_crawl_defaults(self):
        args = build_parser().parse_args(["crawl", "example.com"])

        assert args.url == "example.com"
        assert args.max_depth == 5
        assert args.max_pages == 100
        assert args.timeout == 30000
        assert args.ignore_robots is False
        assert args.output == "text"

    def test_log_level_is_case_insensitive(self):
        args = build_parser().parse_args(["--log-level", "debug", "history", SEED])
        assert args.log_level == "DEBUG"


class TestCommands:
    """Test cases for the CLI commands."""

    def test_crawl_saves_report(self, tmp_path, capsys):
        with patch("healthcrawler.cli._run_crawl") as mock_run, \
                patch("healthcrawler.cli.asyncio.run", return_value=make_report()) as mock_asyncio:
            code = main([
                "--output-dir", str(tmp_path), "crawl", "example.com",
                "--max-pages", "3", "--ignore-robots", "--no-screenshots", "-o", "json",
            ])

        assert code == 0
        mock_asyncio.assert_called_once()
        crawler = mock_run.call_args.args[0]
        assert crawler.config.max_pages == 3
        assert crawler.config.respect_robots_txt is False
        assert crawler.config.screenshot_enabled is False
        assert ReportStore(tmp_path).get("crawl_1_abc") is not None

        out = capsys.readouterr().out
        assert '"crawlId": "crawl_1_abc"' in out

    def test_crawl_invalid_url_fails(self, tmp_path, capsys):
        code = main(["--output-dir", str(tmp_path), "crawl", "ftp://example.com"])

        assert code == 1
        assert "Crawl failed" in capsys.readouterr().err

    def test_crawl_invalid_config_fails(self, tmp_path):
        code = main(["--output-dir", str(tmp_path), "crawl", SEED, "--max-pages", "0"])
        assert code == 1

    def test_crawl_text_output_without_saving(self, tmp_path, capsys):
        with patch("healthcrawler.cli._run_crawl"), \
                patch("healthcrawler.cli.asyncio.run", return_value=make_report()):
            code = main(["--output-dir", str(tmp_path), "crawl", SEED, "--no-save"])

        assert code == 0
        out = capsys.readouterr().out
        assert f"Crawl Report for: {SEED}" in out
        assert list(tmp_path.glob("*.json")) == []

    def test_show(self, tmp_path, capsys):
        ReportStore(tmp_path).save(make_report())

        assert main(["--output-dir", str(tmp_path), "show", "crawl_1_abc"]) == 0
        assert json.loads(capsys.readouterr().out)["website"] == SEED

    def test_show_missing(self, tmp_path):
        assert main(["--output-dir", str(tmp_path), "show", "crawl_nope"]) == 1

    def test_history(self, tmp_path, capsys):
        ReportStore(tmp_path).save(make_report("crawl_1_abc"))
        ReportStore(tmp_path).save(make_report("crawl_2_def"))

        assert main(["--output-dir", str(tmp_path), "history", SEED]) == 0
        out = capsys.readouterr().out
        assert "crawl_1_abc" in out
        assert "crawl_2_def" in out

    def test_history_tolerates_missing_average(self, tmp_path, capsys):
        store = ReportStore(tmp_path)
        store.save(make_report())
        path = tmp_path / "crawl_1_abc.json"
        data = json.loads(path.read_text())
        data["statistics"]["avgLoadTime"] = None
        path.write_text(json.dumps(data))

        assert main(["--output-dir", str(tmp_path), "history", SEED]) == 0
        assert "avgLoad=0ms" in capsys.readouterr().out

    def test_stats(self, tmp_path, capsys):
        ReportStore(tmp_path).save(make_report())

        assert main(["--output-dir", str(tmp_path), "stats"]) == 0
        out = capsys.readouterr().out
        assert "Total: 1" in out
        assert "Last 7 days: 1" in out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()
