"""File-based storage for crawl reports."""

import json
import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from healthcrawler.models import CrawlReport

logger = logging.getLogger(__name__)

_CRAWL_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class DateTimeEncoder(json.JSONEncoder):
    """JSON encoder that handles datetime objects."""

    def default(self, obj):
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


_UNDATED = datetime.min.replace(tzinfo=timezone.utc)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ``crawledAt`` value; None when missing or malformed."""
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ReportStore:
    """Stores finished crawl reports as JSON files keyed by crawl id.

    Example structure:
        data/crawls/
        ├── crawl_1732371022000_k3j9x0a1b.json
        ├── crawl_1732371845000_p0q8r7s6t.json
        └── pages/
            └── crawl_1732371022000_k3j9x0a1b.json
    """

    def __init__(self, base_output_dir: Union[str, Path] = "data/crawls"):
        """Initialize the store.

        Args:
            base_output_dir: Directory holding one JSON file per crawl
        """
        self.base_output_dir = Path(base_output_dir)
        self.base_output_dir.mkdir(parents=True, exist_ok=True)

    def _report_path(self, crawl_id: str) -> Path:
        if not _CRAWL_ID_PATTERN.match(crawl_id or ""):
            raise ValueError(f"Invalid crawl id: {crawl_id!r}")
        return self.base_output_dir / f"{crawl_id}.json"

    def save(self, report: CrawlReport, include_pages: bool = False) -> Path:
        """Persist a report.

        Args:
            report: Finished crawl report
            include_pages: Also write full per-page results under ``pages/``

        Returns:
            Path of the saved report file
        """
        path = self._report_path(report.crawl_id)
        self._save_json(path, report.to_dict())

        if include_pages:
            pages_dir = self.base_output_dir / "pages"
            pages_dir.mkdir(exist_ok=True)
            self._save_json(
                pages_dir / f"{report.crawl_id}.json",
                {url: page.to_dict() for url, page in report.pages.items()},
            )

        logger.info(f"Saved crawl {report.crawl_id} to {path}")
        return path

    def get(self, crawl_id: str) -> Optional[dict]:
        """Load a report by crawl id.

        Returns:
            Report dictionary, or None if it does not exist or is unreadable
        """
        try:
            path = self._report_path(crawl_id)
        except ValueError:
            return None

        if not path.exists():
            return None

        try:
            return self._load_json(path)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to read crawl {crawl_id}: {e}")
            return None

    def recent(self, website: str, limit: int = 10) -> List[dict]:
        """Return the most recent reports for a website, newest first.

        Args:
            website: Seed URL as stored in the report's ``website`` field
            limit: Maximum number of reports to return
        """
        reports = [
            report for report in self._iter_reports()
            if report.get("website") == website
        ]
        reports.sort(key=lambda r: _parse_timestamp(r.get("crawledAt")) or _UNDATED, reverse=True)
        return reports[:limit]

    def cleanup(self, days_old: int = 30) -> int:
        """Delete reports crawled more than ``days_old`` days ago.

        Reports without a readable ``crawledAt`` are kept.

        Returns:
            Number of reports removed
        """
        cutoff = datetime.now(timezone.utc) - timedelta(days=days_old)
        removed = 0

        for path in sorted(self.base_output_dir.glob("*.json")):
            try:
                report = self._load_json(path)
            except (json.JSONDecodeError, OSError):
                continue
            crawled_at = _parse_timestamp(report.get("crawledAt"))
            if crawled_at is None:
                logger.warning(f"Keeping {path.name}: no valid crawledAt")
                continue
            if crawled_at < cutoff:
                path.unlink()
                pages_file = self.base_output_dir / "pages" / path.name
                if pages_file.exists():
                    pages_file.unlink()
                removed += 1

        if removed:
            logger.info(f"Removed {removed} crawl reports older than {days_old} days")
        return removed

    def stats(self, recent_days: int = 7) -> Dict[str, Any]:
        """Summarize the stored reports.

        Args:
            recent_days: Window used for the ``recentCrawls`` count

        Returns:
            Dictionary with storage type, directory, total and recent crawl
            counts, and the oldest and newest ``crawledAt`` values
        """
        cutoff = datetime.now(timezone.utc) - timedelta(days=recent_days)
        timestamps = []
        total = 0

        for report in self._iter_reports():
            total += 1
            crawled_at = _parse_timestamp(report.get("crawledAt"))
            if crawled_at is not None:
                timestamps.append(crawled_at)

        return {
            "storage": "file",
            "storageDir": str(self.base_output_dir),
            "totalCrawls": total,
            "recentCrawls": sum(1 for ts in timestamps if ts >= cutoff),
            "oldestCrawl": min(timestamps).isoformat() if timestamps else None,
            "newestCrawl": max(timestamps).isoformat() if timestamps else None,
        }

    def _iter_reports(self):
        for path in sorted(self.base_output_dir.glob("*.json")):
            try:
                yield self._load_json(path)
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Skipping unreadable report {path.name}: {e}")

    def _save_json(self, filepath: Path, data: dict) -> None:
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, cls=DateTimeEncoder)

    def _load_json(self, filepath: Path) -> dict:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
