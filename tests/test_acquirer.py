"""Tests for page validation and the escalating acquisition engine."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from conftest import FakeStrategy, page_html

from config.settings import ScraperConfig
from shopscraper.acquisition.acquirer import PageAcquirer
from shopscraper.acquisition.strategies import (
    AlternateIdentityStrategy,
    BrowserFetchStrategy,
    DirectFetchStrategy,
    PageValidator,
    StealthBrowserStrategy,
    default_strategies,
)
from shopscraper.errors import AcquisitionError, BlockedPageError
from shopscraper.sites import get_site

URL = "https://www.flipkart.com/acme-tee/p/itm123?pid=TSH123"
GOOD = page_html("<h1>Acme Tee</h1>")


@pytest.fixture
def flipkart():
    return get_site("flipkart")


@pytest.fixture
def acquirer(flipkart, diagnostics):
    return PageAcquirer(flipkart, session=None, diagnostics=diagnostics, scraper_config=ScraperConfig())


class TestPageValidator:
    def test_short_body_rejected(self):
        with pytest.raises(BlockedPageError) as exc_info:
            PageValidator(min_length=1000).check("<html>tiny</html>")
        assert exc_info.value.kind == "blocked"

    def test_block_signature_rejected(self):
        html = page_html("<h1>Access Denied</h1>")
        assert not PageValidator().is_valid(html)

    def test_real_page_accepted(self):
        assert PageValidator().is_valid(GOOD)

    def test_site_signatures_merged(self):
        amazon = get_site("amazon")
        validator = PageValidator.for_site(amazon, ScraperConfig())
        assert "access denied" in validator.block_signatures
        assert len(validator.block_signatures) > len(PageValidator().block_signatures)

    def test_site_minimum_length(self, flipkart):
        validator = PageValidator.for_site(flipkart, ScraperConfig(min_content_length=50))
        assert validator.min_length == 50


class TestAcquire:
    async def test_first_valid_body_wins(self, acquirer):
        first = FakeStrategy("first", GOOD)
        second = FakeStrategy("second", GOOD)

        document = await acquirer.acquire(URL, [first, second])

        assert document.select_one("h1").get_text() == "Acme Tee"
        assert document.url == URL
        assert first.calls == [URL]
        assert second.calls == []

    async def test_escalates_through_failures(self, acquirer, diagnostics):
        transport = FakeStrategy("transport", httpx.ConnectError("connection refused"))
        short = FakeStrategy("short", "<html>blocked</html>")
        captcha = FakeStrategy("captcha", page_html("<p>Please solve this CAPTCHA</p>"))
        rendered = FakeStrategy("rendered", GOOD)

        document = await acquirer.acquire(URL, [transport, short, captcha, rendered])

        assert document.select_one("h1") is not None
        assert len(diagnostics.find("acquire.strategy_failed")) == 3
        success = diagnostics.find("acquire.success")
        assert success[0].fields["strategy"] == "rendered"

    async def test_exhausted_reports_every_strategy(self, acquirer, diagnostics):
        strategies = [
            FakeStrategy("direct", httpx.ConnectError("refused")),
            FakeStrategy("browser", page_html("<h1>Access Denied</h1>")),
        ]

        with pytest.raises(AcquisitionError) as exc_info:
            await acquirer.acquire(URL, strategies)

        error = exc_info.value
        assert error.url == URL
        assert error.tried_strategies == ["direct", "browser"]
        assert error.last_error.startswith("browser:")
        assert "access denied" in error.last_error
        assert diagnostics.find("acquire.exhausted")

    async def test_strategy_timeout_escalates(self, acquirer):
        slow = FakeStrategy("slow", GOOD, timeout_s=0.01, hang=True)
        fast = FakeStrategy("fast", GOOD)

        await acquirer.acquire(URL, [slow, fast])
        assert fast.calls == [URL]

    async def test_timeout_recorded_as_last_error(self, acquirer):
        slow = FakeStrategy("slow", GOOD, timeout_s=0.01, hang=True)

        with pytest.raises(AcquisitionError) as exc_info:
            await acquirer.acquire(URL, [slow])
        assert exc_info.value.last_error == "slow: timed out after 0.01s"

    async def test_embedded_json_parsed_for_site(self, diagnostics):
        myntra = get_site("myntra")
        acquirer = PageAcquirer(myntra, session=None, diagnostics=diagnostics, scraper_config=ScraperConfig())
        html = page_html('<script>window.__myx = {"pdpData": {"name": "Roadster Tee"}};</script>')

        document = await acquirer.acquire("https://www.myntra.com/tshirts/roadster/123/buy", [FakeStrategy("x", html)])

        assert document.data_source == "myx"
        assert document.data["pdpData"]["name"] == "Roadster Tee"


class TestDirectFetch:
    async def test_sends_browser_headers(self, flipkart, diagnostics):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["referer"] = request.headers.get("Referer")
            seen["ua"] = request.headers.get("User-Agent")
            return httpx.Response(200, text=GOOD)

        strategy = DirectFetchStrategy(5, user_agents=["TestAgent/1.0"], transport=httpx.MockTransport(handler))
        html = await strategy.fetch(URL, flipkart, None, diagnostics)

        assert html == GOOD
        assert seen == {"referer": "https://www.flipkart.com/", "ua": "TestAgent/1.0"}

    async def test_http_error_raises(self, flipkart, diagnostics):
        transport = httpx.MockTransport(lambda request: httpx.Response(403, text="Forbidden"))
        strategy = DirectFetchStrategy(5, transport=transport)

        with pytest.raises(httpx.HTTPStatusError):
            await strategy.fetch(URL, flipkart, None, diagnostics)


class TestDefaultStrategies:
    def test_ladder_order_and_timeouts(self, no_sleep):
        cfg = ScraperConfig(timeout_ms=10000, http_timeout_s=7)
        ladder = default_strategies(cfg, sleep=no_sleep)

        assert [type(s) for s in ladder] == [
            DirectFetchStrategy,
            BrowserFetchStrategy,
            StealthBrowserStrategy,
            AlternateIdentityStrategy,
        ]
        assert [s.name for s in ladder] == [
            "direct_fetch",
            "browser_fetch",
            "stealth_browser",
            "alternate_identity",
        ]
        assert [s.timeout_s for s in ladder] == [7, 10.0, 20.0, 20.0]
        assert ladder[3].user_agent == cfg.alternate_user_agent


def fake_page(status: int = 200, html: str = GOOD):
    page = MagicMock()
    page.goto = AsyncMock(return_value=MagicMock(status=status))
    page.content = AsyncMock(return_value=html)
    page.evaluate = AsyncMock()
    page.mouse.move = AsyncMock()
    page.close = AsyncMock()
    return page


def fake_browser_session(page):
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    session = MagicMock()
    session.new_page = AsyncMock(return_value=page)
    session.new_context = AsyncMock(return_value=context)
    session.release_context = AsyncMock()
    return session, context


@pytest.fixture
def no_stealth():
    with patch("shopscraper.acquisition.strategies.stealth_async", new_callable=AsyncMock) as stealth:
        yield stealth


class TestBrowserStrategies:
    async def test_browser_fetch_renders_and_closes(self, flipkart, no_sleep, diagnostics):
        page = fake_page()
        session, _ = fake_browser_session(page)
        strategy = BrowserFetchStrategy(10, settle_delay_s=1.5, scroll_steps=2, sleep=no_sleep)

        html = await strategy.fetch(URL, flipkart, session, diagnostics)

        assert html == GOOD
        session.new_page.assert_awaited_once_with(stealth=False)
        page.goto.assert_awaited_once_with(URL, wait_until="domcontentloaded", timeout=10000)
        assert page.evaluate.await_count == 2
        assert no_sleep.calls[0] == 1.5
        page.close.assert_awaited_once()

    async def test_error_status_is_blocked(self, flipkart, no_sleep, diagnostics):
        page = fake_page(status=403)
        session, _ = fake_browser_session(page)
        strategy = BrowserFetchStrategy(10, sleep=no_sleep)

        with pytest.raises(BlockedPageError):
            await strategy.fetch(URL, flipkart, session, diagnostics)

        page.content.assert_not_awaited()
        page.close.assert_awaited_once()

    async def test_stealth_warms_up_on_origin(self, flipkart, no_sleep, diagnostics):
        page = fake_page()
        session, _ = fake_browser_session(page)
        strategy = StealthBrowserStrategy(10, warmup_delay_s=0, scroll_steps=0, sleep=no_sleep)

        await strategy.fetch(URL, flipkart, session, diagnostics)

        session.new_page.assert_awaited_once_with(stealth=True)
        visited = [c.args[0] for c in page.goto.await_args_list]
        assert visited == [flipkart.origin, URL]
        assert diagnostics.find("acquire.warmup")[0].fields["url"] == flipkart.origin

    async def test_stealth_prefers_warmup_url(self, no_sleep, diagnostics):
        bigbasket = get_site("bigbasket")
        page = fake_page()
        session, _ = fake_browser_session(page)
        strategy = StealthBrowserStrategy(10, warmup_delay_s=0, scroll_steps=0, sleep=no_sleep)

        await strategy.fetch("https://www.bigbasket.com/pd/10000001/", bigbasket, session, diagnostics)

        assert page.goto.await_args_list[0].args[0] == bigbasket.warmup_url

    async def test_page_closed_when_navigation_fails(self, flipkart, no_sleep, diagnostics):
        page = fake_page()
        page.goto.side_effect = OSError("connection reset")
        session, _ = fake_browser_session(page)
        strategy = StealthBrowserStrategy(10, sleep=no_sleep)

        with pytest.raises(OSError):
            await strategy.fetch(URL, flipkart, session, diagnostics)

        page.close.assert_awaited_once()

    async def test_alternate_identity_uses_own_context(self, flipkart, no_sleep, no_stealth, diagnostics):
        page = fake_page()
        session, context = fake_browser_session(page)
        strategy = AlternateIdentityStrategy(
            10, user_agent="Agent/2.0", viewport=(1366, 768), warmup_delay_s=0, scroll_steps=0, sleep=no_sleep
        )

        html = await strategy.fetch(URL, flipkart, session, diagnostics)

        assert html == GOOD
        session.new_page.assert_not_awaited()
        kwargs = session.new_context.await_args.kwargs
        assert kwargs["user_agent"] == "Agent/2.0"
        assert kwargs["viewport"] == {"width": 1366, "height": 768}
        no_stealth.assert_awaited_once_with(page)
        session.release_context.assert_awaited_once_with(context)

    async def test_alternate_context_released_on_failure(self, flipkart, no_sleep, no_stealth, diagnostics):
        page = fake_page(status=503)
        session, context = fake_browser_session(page)
        strategy = AlternateIdentityStrategy(10, user_agent="Agent/2.0", warmup_delay_s=0, sleep=no_sleep)

        with pytest.raises(BlockedPageError):
            await strategy.fetch(URL, flipkart, session, diagnostics)

        session.release_context.assert_awaited_once_with(context)
