"""
Top-level scrape operations.

Each call validates its input, opens its own browser session, runs under an
overall deadline and returns structured data. Nothing raises past this
module; failures come back as ``ErrorResult`` (or error-bearing outcomes).
"""

import asyncio
import sqlite3
from pathlib import Path
from typing import Callable, Optional, Sequence, Union
from urllib.parse import urlsplit

import aiofiles

from config.settings import PipelineConfig, config
from shopscraper.acquisition.acquirer import PageAcquirer
from shopscraper.acquisition.browser import BrowserSession
from shopscraper.acquisition.strategies import AcquisitionStrategy, default_strategies
from shopscraper.diagnostics import Diagnostics, NullDiagnostics
from shopscraper.errors import (
    AcquisitionError,
    InvalidRequestError,
    InvalidURLError,
    ScraperError,
)
from shopscraper.extractors.document import Document
from shopscraper.extractors.engine import extract, extract_listing
from shopscraper.models import BatchResult, ErrorResult, PageOutcome, ProductRecord
from shopscraper.pagination import PaginationOrchestrator, build_page_url, unique_pages
from shopscraper.sites import SiteConfig, site_for_url
from shopscraper.tracking.tracker import ScrapeLogTracker

FIXTURE_NOTE = "extracted from local fixture after acquisition failure"
TIMEOUT_MESSAGE = "operation timed out"


class ScrapePipeline:
    """
    Entry point for single-product and listing scrapes.

    Orchestrates:
    - Validate: URL and page numbers, before anything is launched
    - Acquire: escalating strategies inside a per-call browser session
    - Extract: site schema applied to the acquired document(s)
    """

    def __init__(
        self,
        pipeline_config: Optional[PipelineConfig] = None,
        diagnostics: Optional[Diagnostics] = None,
        tracker: Optional[ScrapeLogTracker] = None,
        session_factory: Callable[..., BrowserSession] = BrowserSession,
        strategies: Optional[Callable[[], Sequence[AcquisitionStrategy]]] = None,
        sleep: Callable = asyncio.sleep,
    ):
        self.config = pipeline_config or config
        self.diagnostics = diagnostics or NullDiagnostics()
        self.tracker = tracker
        self.session_factory = session_factory
        self.strategies = strategies or (lambda: default_strategies(self.config.scraper))
        self.sleep = sleep

    # Validation

    def _validate_url(self, url: Optional[str], kind: str) -> SiteConfig:
        if not url or not isinstance(url, str) or not url.strip():
            raise InvalidURLError("URL is required")
        url = url.strip()

        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise InvalidURLError(f"Malformed URL: {url}")

        site = site_for_url(url)
        if site is None:
            raise InvalidURLError(f"Unsupported site: {parts.hostname}")

        if kind == "product" and not site.is_product_url(url):
            raise InvalidURLError(f"Not a {site.label} product URL: {url}")
        if kind == "listing" and not site.is_listing_url(url):
            raise InvalidURLError(f"Not a {site.label} listing URL: {url}")
        return site

    def _validate_pages(self, pages: Sequence[int]) -> list[int]:
        pages = list(pages or [])
        if not pages:
            raise InvalidRequestError("At least one page number is required")
        for page in pages:
            if isinstance(page, bool) or not isinstance(page, int) or page < 1:
                raise InvalidRequestError(f"Invalid page number: {page!r}")
        return pages

    def _timeout(self, timeout: Optional[float]) -> float:
        return timeout if timeout is not None else self.config.scraper.operation_timeout_s

    # Tracking

    def _track_start(self, site: SiteConfig, type: str, url: str, pages: int = 0) -> Optional[int]:
        if not self.tracker:
            return None
        try:
            return self.tracker.start(site.name, type, url, pages_requested=pages)
        except sqlite3.Error as e:
            self._tracking_failed(e)
            return None

    def _track_finish(self, entry_id: Optional[int], result) -> None:
        if entry_id is None:
            return
        try:
            self._finish_entry(entry_id, result)
        except sqlite3.Error as e:
            self._tracking_failed(e)

    def _tracking_failed(self, exc: sqlite3.Error) -> None:
        self.diagnostics.event(
            "tracking.error",
            f"Scrape log unavailable: {exc}",
            level="warning",
            error=str(exc),
        )

    def _finish_entry(self, entry_id: int, result) -> None:
        if isinstance(result, ErrorResult):
            self.tracker.finish(entry_id, "failed", error_kind=result.kind, error=result.message)
        elif isinstance(result, BatchResult):
            if result.failure_count == 0:
                status = "success"
            elif result.success_count > 0:
                status = "partial"
            else:
                status = "failed"
            self.tracker.finish(
                entry_id,
                status,
                records=len(result.all_records),
                pages_succeeded=result.success_count,
                pages_failed=result.failure_count,
            )
        elif isinstance(result, PageOutcome):
            self.tracker.finish(
                entry_id,
                "success" if result.ok else "failed",
                records=len(result.records),
                pages_succeeded=int(result.ok),
                pages_failed=int(not result.ok),
                error_kind=result.error_kind,
                error=result.error,
            )
        else:
            self.tracker.finish(entry_id, "success", records=1)

    def _error(self, exc: BaseException) -> ErrorResult:
        error = ErrorResult.from_exception(exc)
        self.diagnostics.event(
            "pipeline.error",
            f"✗ {error.kind}: {error.message}",
            level="error",
            kind=error.kind,
        )
        return error

    def _timeout_error(self, seconds: float) -> ErrorResult:
        self.diagnostics.event(
            "pipeline.timeout",
            f"✗ Operation timed out after {seconds}s",
            level="error",
        )
        return ErrorResult(kind="timeout", message=f"Operation timed out after {seconds}s")

    # Operations

    async def scrape_single(
        self, url: str, timeout: Optional[float] = None
    ) -> Union[ProductRecord, ErrorResult]:
        """
        Scrape one product page.

        Args:
            url: Product page URL of a supported site
            timeout: Overall deadline in seconds (default from config)

        Returns:
            ProductRecord with ``url`` attached, or ErrorResult
        """
        try:
            site = self._validate_url(url, "product")
        except InvalidRequestError as e:
            return self._error(e)

        url = url.strip()
        seconds = self._timeout(timeout)
        entry_id = self._track_start(site, "product", url)
        self.diagnostics.event("pipeline.start", f"Scraping {site.label} product: {url}", url=url)

        try:
            result = await asyncio.wait_for(self._scrape_single(site, url), timeout=seconds)
        except asyncio.TimeoutError:
            result = self._timeout_error(seconds)
        except AcquisitionError as e:
            result = await self._fixture_fallback(site, url, e)
        except Exception as e:
            result = self._error(e)

        self._track_finish(entry_id, result)
        return result

    async def _scrape_single(self, site: SiteConfig, url: str) -> ProductRecord:
        async with self.session_factory(self.config.scraper, self.diagnostics) as session:
            acquirer = PageAcquirer(site, session, self.diagnostics, self.config.scraper)
            document = await acquirer.acquire(url, self.strategies())
            record = extract(document, site.product_schema, site.name, self.diagnostics)
        return record.with_url(url)

    async def _fixture_fallback(
        self, site: SiteConfig, url: str, error: AcquisitionError
    ) -> Union[ProductRecord, ErrorResult]:
        """Parse <fixture_dir>/<site>.html when live acquisition failed."""
        fixture_dir = self.config.storage.fixture_dir
        if fixture_dir is None:
            return self._error(error)

        fixture = Path(fixture_dir) / f"{site.name}.html"
        if not fixture.exists():
            self.diagnostics.event(
                "pipeline.fixture_missing",
                f"No fixture at {fixture}",
                level="warning",
                path=str(fixture),
            )
            return self._error(error)

        self.diagnostics.event(
            "pipeline.fixture_fallback",
            f"Acquisition failed, extracting from {fixture}",
            level="warning",
            path=str(fixture),
        )
        async with aiofiles.open(fixture, "r", encoding="utf-8") as f:
            html = await f.read()

        document = Document.from_html(html, url=url, islands=site.embedded_json)
        try:
            record = extract(document, site.product_schema, site.name, self.diagnostics)
        except ScraperError as e:
            return self._error(e)
        return record.with_url(url).with_note(FIXTURE_NOTE)

    def _listing_fetcher(self, site: SiteConfig, session: BrowserSession):
        acquirer = PageAcquirer(site, session, self.diagnostics, self.config.scraper)

        async def fetch_page(page_url: str, page_number: int) -> list[ProductRecord]:
            document = await acquirer.acquire(page_url, self.strategies())
            records = extract_listing(
                document, site.listing_schema, site.listing_layout, site.name, self.diagnostics
            )
            return [record.with_url(page_url) for record in records]

        return fetch_page

    def _orchestrator(self, site: SiteConfig, session: BrowserSession) -> PaginationOrchestrator:
        return PaginationOrchestrator(
            self._listing_fetcher(site, session),
            delay_seconds=self.config.scraper.page_delay_seconds,
            param=site.page_param,
            diagnostics=self.diagnostics,
            sleep=self.sleep,
        )

    async def scrape_listing_page(
        self, url: str, page_number: int = 1, timeout: Optional[float] = None
    ) -> Union[PageOutcome, ErrorResult]:
        """
        Scrape one page of a listing.

        Acquisition and extraction failures come back inside the PageOutcome;
        only invalid input yields an ErrorResult.
        """
        try:
            site = self._validate_url(url, "listing")
            self._validate_pages([page_number])
        except InvalidRequestError as e:
            return self._error(e)

        url = url.strip()
        seconds = self._timeout(timeout)
        entry_id = self._track_start(site, "category", url, pages=1)

        async def run() -> PageOutcome:
            async with self.session_factory(self.config.scraper, self.diagnostics) as session:
                return await self._orchestrator(site, session).run_page(url, page_number)

        try:
            result = await asyncio.wait_for(run(), timeout=seconds)
        except asyncio.TimeoutError:
            self._timeout_error(seconds)
            result = PageOutcome.failure(
                page_number,
                TIMEOUT_MESSAGE,
                kind="timeout",
                url=build_page_url(url, page_number, site.page_param),
            )
        except Exception as e:
            result = self._error(e)

        self._track_finish(entry_id, result)
        return result

    async def scrape_listing_pages(
        self, url: str, page_numbers: Sequence[int], timeout: Optional[float] = None
    ) -> Union[BatchResult, ErrorResult]:
        """
        Scrape several listing pages, one after another.

        Args:
            url: Listing URL of a supported site
            page_numbers: Requested pages (duplicates and any order allowed)
            timeout: Overall deadline in seconds for the whole run

        Returns:
            BatchResult (possibly partial), or ErrorResult for invalid input
        """
        try:
            site = self._validate_url(url, "listing")
            requested = self._validate_pages(page_numbers)
        except InvalidRequestError as e:
            return self._error(e)

        url = url.strip()
        seconds = self._timeout(timeout)
        entry_id = self._track_start(site, "category", url, pages=len(unique_pages(requested)))
        outcomes: list[PageOutcome] = []

        async def run() -> BatchResult:
            async with self.session_factory(self.config.scraper, self.diagnostics) as session:
                return await self._orchestrator(site, session).run_pages(url, requested, outcomes)

        try:
            result = await asyncio.wait_for(run(), timeout=seconds)
        except asyncio.TimeoutError:
            self._timeout_error(seconds)
            finished = {o.page_number for o in outcomes}
            for page in unique_pages(requested):
                if page not in finished:
                    outcomes.append(
                        PageOutcome.failure(
                            page,
                            TIMEOUT_MESSAGE,
                            kind="timeout",
                            url=build_page_url(url, page, site.page_param),
                        )
                    )
            result = BatchResult.from_outcomes(requested, outcomes)
        except Exception as e:
            result = self._error(e)

        self._track_finish(entry_id, result)
        return result
