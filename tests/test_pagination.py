"""Tests for the pagination orchestrator."""

import pytest

from shopscraper.errors import AcquisitionError, FieldExtractionError
from shopscraper.models import ProductRecord
from shopscraper.pagination import PaginationOrchestrator, build_page_url, unique_pages

LISTING = "https://www.example.in/search?q=shoes"


def records_for(page: int, count: int = 2) -> list[ProductRecord]:
    return [ProductRecord(data={"title": f"Item {page}-{i}"}, source="test") for i in range(count)]


class FakeFetcher:
    def __init__(self, failures=None):
        self.failures = failures or {}
        self.calls = []

    async def __call__(self, page_url, page_number):
        self.calls.append((page_url, page_number))
        if page_number in self.failures:
            raise self.failures[page_number]
        return records_for(page_number)


class TestPageUrls:
    def test_unique_pages_sorted(self):
        assert unique_pages([3, 1, 3, 2]) == [1, 2, 3]

    def test_adds_param(self):
        assert build_page_url(LISTING, 2) == "https://www.example.in/search?q=shoes&page=2"

    def test_replaces_existing_param(self):
        url = "https://www.example.in/search?page=5&q=shoes"
        assert build_page_url(url, 3) == "https://www.example.in/search?q=shoes&page=3"

    def test_custom_param(self):
        assert build_page_url("https://www.myntra.com/shoes", 4, "p") == "https://www.myntra.com/shoes?p=4"


class TestRunPages:
    async def test_duplicates_and_order(self, no_sleep):
        fetcher = FakeFetcher()
        orchestrator = PaginationOrchestrator(fetcher, delay_seconds=2, sleep=no_sleep)

        result = await orchestrator.run_pages(LISTING, [3, 1, 3, 2])

        assert result.requested_pages == [3, 1, 3, 2]
        assert result.unique_pages == [1, 2, 3]
        assert [n for _, n in fetcher.calls] == [1, 2, 3]
        assert [o.page_number for o in result.outcomes] == [1, 2, 3]
        assert result.success_count == 3
        assert len(result.all_records) == 6

    async def test_delay_only_between_pages(self, no_sleep):
        orchestrator = PaginationOrchestrator(FakeFetcher(), delay_seconds=2, sleep=no_sleep)

        await orchestrator.run_pages(LISTING, [1, 2, 3])
        assert no_sleep.calls == [2, 2]

    async def test_single_page_never_sleeps(self, no_sleep):
        orchestrator = PaginationOrchestrator(FakeFetcher(), delay_seconds=2, sleep=no_sleep)

        await orchestrator.run_pages(LISTING, [4])
        assert no_sleep.calls == []

    async def test_failed_page_does_not_stop_the_run(self, no_sleep, diagnostics):
        fetcher = FakeFetcher(
            failures={2: AcquisitionError("https://x/2", ["direct_fetch"], "direct_fetch: 503")}
        )
        orchestrator = PaginationOrchestrator(fetcher, sleep=no_sleep, diagnostics=diagnostics)

        result = await orchestrator.run_pages(LISTING, [1, 2, 3])

        assert result.success_count == 2
        assert result.failure_count == 1
        assert result.partial
        failed = result.outcomes[1]
        assert failed.page_number == 2
        assert failed.records == []
        assert failed.error_kind == "acquisition"
        assert "direct_fetch: 503" in failed.error
        assert [r["title"] for r in result.all_records] == [
            "Item 1-0",
            "Item 1-1",
            "Item 3-0",
            "Item 3-1",
        ]
        assert len(diagnostics.find("pagination.page_failed")) == 1

    async def test_unexpected_error_becomes_internal(self, no_sleep):
        fetcher = FakeFetcher(failures={1: RuntimeError("boom")})
        result = await PaginationOrchestrator(fetcher, sleep=no_sleep).run_pages(LISTING, [1])

        assert result.failure_count == 1
        assert result.outcomes[0].error_kind == "internal"
        assert "RuntimeError" in result.outcomes[0].error

    async def test_outcomes_filled_in_place(self, no_sleep):
        outcomes = []
        fetcher = FakeFetcher(failures={2: FieldExtractionError("title")})
        await PaginationOrchestrator(fetcher, sleep=no_sleep).run_pages(LISTING, [2, 1], outcomes)

        assert [o.page_number for o in outcomes] == [1, 2]
        assert outcomes[1].error_kind == "extraction"

    async def test_page_urls_use_param(self, no_sleep):
        fetcher = FakeFetcher()
        orchestrator = PaginationOrchestrator(fetcher, param="p", sleep=no_sleep)

        outcome = await orchestrator.run_page("https://www.myntra.com/shoes", 2)

        assert fetcher.calls == [("https://www.myntra.com/shoes?p=2", 2)]
        assert outcome.url == "https://www.myntra.com/shoes?p=2"
        assert outcome.ok

    @pytest.mark.parametrize("pages", [[1], [2, 2, 2]])
    async def test_counts_match_unique_pages(self, no_sleep, pages):
        result = await PaginationOrchestrator(FakeFetcher(), sleep=no_sleep).run_pages(LISTING, pages)
        assert result.success_count + result.failure_count == len(set(pages))
