"""
Pagination orchestrator.

Pages run strictly one after another with a fixed delay between them. A
failing page becomes an error outcome and the loop carries on.
"""

import asyncio
from typing import Awaitable, Callable, Iterable, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from shopscraper.diagnostics import Diagnostics, NullDiagnostics
from shopscraper.errors import ScraperError
from shopscraper.models import BatchResult, PageOutcome, ProductRecord

FetchPage = Callable[[str, int], Awaitable[list[ProductRecord]]]


def unique_pages(pages: Iterable[int]) -> list[int]:
    """Sorted, de-duplicated page numbers."""
    return sorted(set(pages))


def build_page_url(url: str, page: int, param: str = "page") -> str:
    """Set (or replace) the page query parameter, keeping the rest of the query."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != param]
    query.append((param, str(page)))
    return urlunsplit(parts._replace(query=urlencode(query)))


class PaginationOrchestrator:
    """Drives one fetch-and-extract callable across a set of pages."""

    def __init__(
        self,
        fetch_page: FetchPage,
        delay_seconds: float = 2.0,
        param: str = "page",
        diagnostics: Optional[Diagnostics] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.fetch_page = fetch_page
        self.delay_seconds = delay_seconds
        self.param = param
        self.diagnostics = diagnostics or NullDiagnostics()
        self.sleep = sleep

    async def run_page(self, url: str, page_number: int) -> PageOutcome:
        """Fetch one page; any scraper failure is returned as data."""
        page_url = build_page_url(url, page_number, self.param)
        try:
            records = await self.fetch_page(page_url, page_number)
        except ScraperError as e:
            return self._failed(page_number, page_url, e.message, e.kind)
        except Exception as e:
            return self._failed(page_number, page_url, f"{type(e).__name__}: {e}", "internal")

        self.diagnostics.event(
            "pagination.page_done",
            f"✓ Page {page_number}: {len(records)} product(s)",
            page=page_number,
            count=len(records),
        )
        return PageOutcome.success(page_number, records, url=page_url)

    def _failed(self, page_number: int, page_url: str, message: str, kind: str) -> PageOutcome:
        self.diagnostics.event(
            "pagination.page_failed",
            f"✗ Page {page_number}: {message}",
            level="error",
            page=page_number,
            kind=kind,
        )
        return PageOutcome.failure(page_number, message, kind=kind, url=page_url)

    async def run_pages(
        self,
        url: str,
        pages: Iterable[int],
        outcomes: Optional[list[PageOutcome]] = None,
    ) -> BatchResult:
        """
        Scrape every requested page in ascending order.

        Args:
            url: Listing URL (its own page parameter, if any, is replaced)
            pages: Requested page numbers, duplicates allowed
            outcomes: Optional list filled in place as pages complete

        Returns:
            BatchResult with one outcome per unique page
        """
        requested = list(pages)
        ordered = unique_pages(requested)
        outcomes = outcomes if outcomes is not None else []

        self.diagnostics.event(
            "pagination.start",
            f"Scraping {len(ordered)} page(s): {ordered}",
            pages=ordered,
        )

        for index, page_number in enumerate(ordered):
            if index > 0 and self.delay_seconds > 0:
                await self.sleep(self.delay_seconds)
            outcomes.append(await self.run_page(url, page_number))

        result = BatchResult.from_outcomes(requested, outcomes)
        self.diagnostics.event(
            "pagination.done",
            f"Pages: {result.success_count} ok, {result.failure_count} failed, "
            f"{len(result.all_records)} product(s)",
            success=result.success_count,
            failed=result.failure_count,
            records=len(result.all_records),
        )
        return result
