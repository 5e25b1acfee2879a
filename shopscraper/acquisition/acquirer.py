"""
Page acquisition engine: try each strategy in turn until one returns a body
that passes validation.
"""

import asyncio
from typing import TYPE_CHECKING, Optional, Sequence

import httpx
from playwright.async_api import Error as PlaywrightError

from config.settings import ScraperConfig, config
from shopscraper.acquisition.strategies import (
    AcquisitionStrategy,
    PageValidator,
    default_strategies,
)
from shopscraper.diagnostics import Diagnostics, NullDiagnostics
from shopscraper.errors import AcquisitionError, ScraperError
from shopscraper.extractors.document import Document

if TYPE_CHECKING:
    from shopscraper.acquisition.browser import BrowserSession
    from shopscraper.sites.base import SiteConfig

# Failures that escalate to the next strategy
ESCALATING_ERRORS = (
    asyncio.TimeoutError,
    httpx.HTTPError,
    PlaywrightError,
    ScraperError,
    OSError,
)


class PageAcquirer:
    """Obtains a validated Document for a URL; holds no state between calls."""

    def __init__(
        self,
        site: "SiteConfig",
        session: "BrowserSession",
        diagnostics: Optional[Diagnostics] = None,
        scraper_config: Optional[ScraperConfig] = None,
        validator: Optional[PageValidator] = None,
    ):
        self.site = site
        self.session = session
        self.diagnostics = diagnostics or NullDiagnostics()
        self.scraper_config = scraper_config or config.scraper
        self.validator = validator or PageValidator.for_site(site, self.scraper_config)

    async def acquire(
        self,
        url: str,
        strategies: Optional[Sequence[AcquisitionStrategy]] = None,
    ) -> Document:
        """
        Run the escalation ladder for ``url``.

        Returns:
            Document parsed from the first body that passes validation

        Raises:
            AcquisitionError: Every strategy failed
        """
        strategies = list(strategies) if strategies is not None else default_strategies(self.scraper_config)
        tried = []
        last_error = None

        for strategy in strategies:
            tried.append(strategy.name)
            self.diagnostics.event(
                "acquire.attempt",
                f"[{strategy.name}] {url}",
                level="debug",
                strategy=strategy.name,
                url=url,
            )
            try:
                html = await asyncio.wait_for(
                    strategy.fetch(url, self.site, self.session, self.diagnostics),
                    timeout=strategy.timeout_s,
                )
                self.validator.check(html)
            except ESCALATING_ERRORS as e:
                if isinstance(e, asyncio.TimeoutError):
                    last_error = f"{strategy.name}: timed out after {strategy.timeout_s}s"
                else:
                    last_error = f"{strategy.name}: {e}"
                self.diagnostics.event(
                    "acquire.strategy_failed",
                    f"  {last_error}",
                    level="warning",
                    strategy=strategy.name,
                    url=url,
                    error=str(e),
                )
                continue

            self.diagnostics.event(
                "acquire.success",
                f"Acquired {url} via {strategy.name} ({len(html)} chars)",
                level="info",
                strategy=strategy.name,
                url=url,
                length=len(html),
            )
            return Document.from_html(html, url=url, islands=self.site.embedded_json)

        self.diagnostics.event(
            "acquire.exhausted",
            f"All strategies failed for {url}",
            level="error",
            url=url,
            tried=tried,
        )
        raise AcquisitionError(url, tried, last_error)
