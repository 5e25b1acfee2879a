"""
Acquisition strategies, cheapest first.

Each strategy turns a URL into raw HTML or raises. The acquirer wraps every
call in the strategy's own timeout and validates the body; any failure moves
on to the next, more expensive strategy.
"""

import asyncio
import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Optional

import httpx
from playwright.async_api import Page
from playwright_stealth import stealth_async

from config.settings import ScraperConfig, config
from shopscraper.diagnostics import Diagnostics
from shopscraper.errors import BlockedPageError

if TYPE_CHECKING:
    from shopscraper.acquisition.browser import BrowserSession
    from shopscraper.sites.base import SiteConfig

Sleep = Callable[[float], Awaitable[None]]

DEFAULT_BLOCK_SIGNATURES = (
    "access denied",
    "captcha",
    "are you a robot",
    "verify you are human",
    "request blocked",
    "you have been blocked",
    "pardon our interruption",
    "checking your browser",
)

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-IN,en-GB;q=0.9,en-US;q=0.8,en;q=0.7",
    "Cache-Control": "no-cache",
    "Upgrade-Insecure-Requests": "1",
}


class PageValidator:
    """Rejects bodies that are too short or look like a block/challenge page."""

    def __init__(
        self,
        min_length: int = 1000,
        block_signatures: Iterable[str] = DEFAULT_BLOCK_SIGNATURES,
    ):
        self.min_length = min_length
        self.block_signatures = tuple(s.lower() for s in block_signatures if s)

    @classmethod
    def for_site(cls, site: "SiteConfig", scraper_config: Optional[ScraperConfig] = None) -> "PageValidator":
        scraper_config = scraper_config or config.scraper
        signatures = list(DEFAULT_BLOCK_SIGNATURES)
        signatures += [s for s in site.block_signatures if s.lower() not in signatures]
        min_length = (
            site.min_content_length
            if site.min_content_length is not None
            else scraper_config.min_content_length
        )
        return cls(min_length=min_length, block_signatures=signatures)

    def check(self, html: Optional[str]) -> None:
        """Raise BlockedPageError unless the body looks like real content."""
        body = html or ""
        if len(body) <= self.min_length:
            raise BlockedPageError(
                f"Response too short ({len(body)} chars, need more than {self.min_length})",
                length=len(body),
            )
        lowered = body.lower()
        for signature in self.block_signatures:
            if signature in lowered:
                raise BlockedPageError(f"Block page detected ('{signature}')", length=len(body))

    def is_valid(self, html: Optional[str]) -> bool:
        try:
            self.check(html)
        except BlockedPageError:
            return False
        return True


class AcquisitionStrategy(ABC):
    """One way of getting a page's HTML."""

    name = "strategy"

    def __init__(self, timeout_s: float, sleep: Sleep = asyncio.sleep):
        self.timeout_s = timeout_s
        self.sleep = sleep

    @abstractmethod
    async def fetch(
        self,
        url: str,
        site: "SiteConfig",
        session: "BrowserSession",
        diagnostics: Diagnostics,
    ) -> str:
        """Return the raw HTML for ``url`` or raise."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(timeout_s={self.timeout_s})"


class DirectFetchStrategy(AcquisitionStrategy):
    """Plain HTTP GET with browser-like headers."""

    name = "direct_fetch"

    def __init__(
        self,
        timeout_s: float,
        user_agents: Iterable[str] = (),
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        super().__init__(timeout_s, sleep)
        self.user_agents = list(user_agents)
        self.transport = transport

    async def fetch(self, url, site, session, diagnostics) -> str:
        headers = dict(BROWSER_HEADERS)
        if self.user_agents:
            headers["User-Agent"] = random.choice(self.user_agents)
        headers["Referer"] = site.origin + "/"

        async with httpx.AsyncClient(
            follow_redirects=True,
            headers=headers,
            timeout=self.timeout_s,
            transport=self.transport,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text


class BrowserFetchStrategy(AcquisitionStrategy):
    """Rendered fetch in the session's default context."""

    name = "browser_fetch"
    stealth = False

    def __init__(
        self,
        timeout_s: float,
        wait_until: str = "domcontentloaded",
        settle_delay_s: float = 2.0,
        scroll_steps: int = 3,
        sleep: Sleep = asyncio.sleep,
    ):
        super().__init__(timeout_s, sleep)
        self.wait_until = wait_until
        self.settle_delay_s = settle_delay_s
        self.scroll_steps = scroll_steps

    @property
    def timeout_ms(self) -> int:
        return int(self.timeout_s * 1000)

    async def _open_page(self, session: "BrowserSession") -> Page:
        return await session.new_page(stealth=self.stealth)

    async def _before_target(self, page: Page, site: "SiteConfig", diagnostics: Diagnostics) -> None:
        return None

    async def _scroll(self, page: Page) -> None:
        """Scroll a few viewports to trigger lazy-loaded content."""
        for _ in range(self.scroll_steps):
            await page.evaluate("window.scrollBy(0, window.innerHeight)")
            await self.sleep(0.5)

    async def _navigate(self, page: Page, url: str) -> str:
        response = await page.goto(url, wait_until=self.wait_until, timeout=self.timeout_ms)
        if response is not None and response.status >= 400:
            raise BlockedPageError(f"HTTP {response.status}")
        await self.sleep(self.settle_delay_s)
        await self._scroll(page)
        return await page.content()

    async def fetch(self, url, site, session, diagnostics) -> str:
        page = await self._open_page(session)
        try:
            await self._before_target(page, site, diagnostics)
            return await self._navigate(page, url)
        finally:
            await page.close()


class StealthBrowserStrategy(BrowserFetchStrategy):
    """Stealth-patched page with a warm-up visit to the home page first."""

    name = "stealth_browser"
    stealth = True

    def __init__(self, timeout_s: float, warmup_delay_s: float = 2.0, **kwargs):
        super().__init__(timeout_s, **kwargs)
        self.warmup_delay_s = warmup_delay_s

    async def _before_target(self, page, site, diagnostics) -> None:
        warmup_url = site.warmup_url or site.origin
        diagnostics.event(
            "acquire.warmup",
            f"  Warm-up visit to {warmup_url}",
            level="debug",
            url=warmup_url,
        )
        await page.goto(warmup_url, wait_until="domcontentloaded", timeout=self.timeout_ms)
        await self.sleep(self.warmup_delay_s)

        # Minimal interaction before the real navigation
        await page.mouse.move(random.randint(80, 200), random.randint(80, 200))
        await page.mouse.move(random.randint(300, 600), random.randint(200, 400), steps=5)
        await self.sleep(random.uniform(0.5, 1.0))


class AlternateIdentityStrategy(StealthBrowserStrategy):
    """Last resort: a fresh context with a different user agent and viewport."""

    name = "alternate_identity"

    def __init__(
        self,
        timeout_s: float,
        user_agent: str,
        viewport: tuple = (1366, 768),
        **kwargs,
    ):
        super().__init__(timeout_s, **kwargs)
        self.user_agent = user_agent
        self.viewport = viewport

    async def fetch(self, url, site, session, diagnostics) -> str:
        width, height = self.viewport
        context = await session.new_context(
            user_agent=self.user_agent,
            viewport={"width": width, "height": height},
            extra_http_headers={
                "Accept-Language": "en-US,en;q=0.9",
                "DNT": "1",
            },
        )
        try:
            page = await context.new_page()
            await stealth_async(page)
            await self._before_target(page, site, diagnostics)
            return await self._navigate(page, url)
        finally:
            # Closing the context also closes its page
            await session.release_context(context)


def default_strategies(
    scraper_config: Optional[ScraperConfig] = None,
    sleep: Sleep = asyncio.sleep,
) -> list[AcquisitionStrategy]:
    """The standard escalation ladder: direct, browser, stealth, alternate identity."""
    cfg = scraper_config or config.scraper
    browser_timeout_s = cfg.timeout_ms / 1000
    common = dict(
        settle_delay_s=cfg.settle_delay_s,
        scroll_steps=cfg.scroll_steps,
        sleep=sleep,
    )
    return [
        DirectFetchStrategy(cfg.http_timeout_s, user_agents=cfg.user_agents, sleep=sleep),
        BrowserFetchStrategy(browser_timeout_s, **common),
        StealthBrowserStrategy(
            browser_timeout_s * 2, warmup_delay_s=cfg.warmup_delay_s, **common
        ),
        AlternateIdentityStrategy(
            browser_timeout_s * 2,
            user_agent=cfg.alternate_user_agent,
            viewport=cfg.alternate_viewport,
            warmup_delay_s=cfg.warmup_delay_s,
            **common,
        ),
    ]
