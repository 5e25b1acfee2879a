"""Tests for the SQLite scrape log."""

import pytest

from shopscraper.tracking import ScrapeLogTracker


@pytest.fixture
def tracker(tmp_path):
    return ScrapeLogTracker(tmp_path / "nested" / "scrape_log.db")


class TestScrapeLogTracker:
    def test_creates_database(self, tmp_path):
        ScrapeLogTracker(tmp_path / "nested" / "log.db")
        assert (tmp_path / "nested" / "log.db").exists()

    def test_start_opens_in_progress_entry(self, tracker):
        entry_id = tracker.start("flipkart", "product", "https://www.flipkart.com/x/p/itm1")
        entry = tracker.get(entry_id)

        assert entry.status == "in_progress"
        assert entry.platform == "flipkart"
        assert entry.finished_at is None

    def test_finish_records_counts(self, tracker):
        entry_id = tracker.start("myntra", "category", "https://www.myntra.com/shoes", pages_requested=3)
        tracker.finish(entry_id, "partial", records=40, pages_succeeded=2, pages_failed=1)
        entry = tracker.get(entry_id)

        assert entry.status == "partial"
        assert entry.records == 40
        assert entry.pages_requested == 3
        assert entry.pages_failed == 1
        assert entry.finished_at is not None

    def test_failure_keeps_error(self, tracker):
        entry_id = tracker.start("amazon", "product", "https://www.amazon.in/dp/B0ABCDEFGH")
        tracker.finish(entry_id, "failed", error_kind="acquisition", error="all strategies failed")

        entry = tracker.get(entry_id)
        assert entry.error_kind == "acquisition"
        assert entry.error == "all strategies failed"

    def test_rejects_unknown_values(self, tracker):
        with pytest.raises(ValueError):
            tracker.start("flipkart", "search", "https://www.flipkart.com/search?q=x")
        entry_id = tracker.start("flipkart", "product", "https://www.flipkart.com/x/p/itm1")
        with pytest.raises(ValueError):
            tracker.finish(entry_id, "done")

    def test_stats_and_recent(self, tracker):
        for platform in ("flipkart", "flipkart", "ajio"):
            entry_id = tracker.start(platform, "product", f"https://{platform}/p/1")
            tracker.finish(entry_id, "success", records=1)

        stats = tracker.get_stats()
        assert stats["total_operations"] == 3
        assert stats["total_records"] == 3
        assert stats["by_platform"] == {"flipkart": 2, "ajio": 1}
        assert stats["by_status"] == {"success": 3}
        assert [e.platform for e in tracker.recent(limit=2)] == ["ajio", "flipkart"]
        assert len(tracker.recent(platform="flipkart")) == 2

    def test_clear(self, tracker):
        tracker.start("flipkart", "product", "u1")
        tracker.start("ajio", "product", "u2")

        assert tracker.clear(platform="ajio") == 1
        assert tracker.clear() == 1
        assert tracker.get_stats()["total_operations"] == 0

    def test_get_missing(self, tracker):
        assert tracker.get(999) is None
