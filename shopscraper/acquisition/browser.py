"""
Browser session lifecycle.

One BrowserSession per top-level scrape call. Playwright, the browser and
the default context start lazily on the first page request and are torn
down by ``close()``, which every exit path reaches through ``async with``.
"""

import asyncio
import random
from typing import Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    async_playwright,
)
from playwright_stealth import stealth_async

from config.settings import ScraperConfig, config
from shopscraper.diagnostics import Diagnostics, NullDiagnostics
from shopscraper.errors import BrowserSessionError

ENGINES = ("chromium", "firefox", "webkit")


class BrowserSession:
    """Lazily launched Playwright browser, released on every exit path."""

    def __init__(
        self,
        scraper_config: Optional[ScraperConfig] = None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self.config = scraper_config or config.scraper
        self.diagnostics = diagnostics or NullDiagnostics()
        self.browser_type = (
            self.config.browser_type if self.config.browser_type in ENGINES else "chromium"
        )
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.extra_contexts: list[BrowserContext] = []
        self.closed = False
        self._lock = asyncio.Lock()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def launched(self) -> bool:
        return self.browser is not None

    async def start(self) -> None:
        """Launch the browser and default context (no-op when running)."""
        async with self._lock:
            if self.closed:
                raise BrowserSessionError("Browser session already closed")
            if self.context is not None:
                return

            self.diagnostics.event(
                "browser.launch",
                f"Starting {self.browser_type} browser...",
                browser=self.browser_type,
            )
            try:
                self.playwright = await async_playwright().start()
                launcher = getattr(self.playwright, self.browser_type)
                self.browser = await launcher.launch(headless=self.config.headless)
                self.context = await self.browser.new_context(
                    viewport={
                        "width": self.config.viewport_width,
                        "height": self.config.viewport_height,
                    },
                    user_agent=random.choice(self.config.user_agents),
                    locale=self.config.locale,
                    timezone_id=self.config.timezone_id,
                )
            except PlaywrightError as e:
                await self._shutdown()
                raise BrowserSessionError(f"Failed to launch {self.browser_type}: {e}") from e
            except BaseException:
                # Cancelled mid-launch: leave nothing half started
                await self._shutdown()
                raise

            self.diagnostics.event("browser.ready", "Browser started", level="debug")

    async def new_page(self, stealth: bool = False) -> Page:
        """Open a page in the default context, launching on first use."""
        await self.start()
        page = await self.context.new_page()
        page.set_default_timeout(self.config.timeout_ms)
        if stealth:
            await stealth_async(page)
        return page

    async def new_context(
        self,
        user_agent: str,
        viewport: Optional[dict] = None,
        extra_http_headers: Optional[dict] = None,
    ) -> BrowserContext:
        """Open an additional context with its own identity; closed with the session."""
        await self.start()
        context = await self.browser.new_context(
            viewport=viewport
            or {"width": self.config.viewport_width, "height": self.config.viewport_height},
            user_agent=user_agent,
            locale=self.config.locale,
            timezone_id=self.config.timezone_id,
            extra_http_headers=extra_http_headers or {},
        )
        self.extra_contexts.append(context)
        return context

    async def release_context(self, context: BrowserContext) -> None:
        """Close an additional context before the session ends."""
        if context in self.extra_contexts:
            self.extra_contexts.remove(context)
        await self._close_quietly(context, "context")

    async def close(self) -> None:
        """Release everything. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        was_launched = self.launched
        await self._shutdown()
        if was_launched:
            self.diagnostics.event("browser.closed", "Browser closed", level="debug")

    async def _close_quietly(self, closable, what: str) -> None:
        try:
            await closable.close()
        except PlaywrightError as e:
            self.diagnostics.event(
                "browser.close_error", f"Error closing {what}: {e}", level="warning"
            )

    async def _shutdown(self) -> None:
        # Each step runs even if an earlier one fails or we are being cancelled
        try:
            for context in self.extra_contexts:
                await self._close_quietly(context, "context")
            if self.context:
                await self._close_quietly(self.context, "context")
            if self.browser:
                await self._close_quietly(self.browser, "browser")
        finally:
            if self.playwright:
                await self.playwright.stop()
            self.extra_contexts = []
            self.context = None
            self.browser = None
            self.playwright = None
