"""Shared fixtures: fake strategies, fake browser sessions and page builders."""

import asyncio
from typing import Optional, Union

import pytest

from config.settings import PipelineConfig, ScraperConfig, StorageConfig, TrackingConfig
from shopscraper.acquisition.strategies import AcquisitionStrategy
from shopscraper.diagnostics import RecordingDiagnostics

FILLER = "<!-- " + "padding " * 200 + "-->"


def page_html(body: str, head: str = "") -> str:
    """A full page long enough to pass content-length validation."""
    return f"<html><head><title>Test</title>{head}</head><body>{body}{FILLER}</body></html>"


class FakeStrategy(AcquisitionStrategy):
    """Returns canned HTML, raises a canned error, or hangs."""

    def __init__(
        self,
        name: str,
        result: Union[str, BaseException, None] = None,
        timeout_s: float = 5.0,
        hang: bool = False,
    ):
        super().__init__(timeout_s)
        self.name = name
        self.result = result
        self.hang = hang
        self.calls: list[str] = []

    async def fetch(self, url, site, session, diagnostics) -> str:
        self.calls.append(url)
        if self.hang:
            await asyncio.sleep(60)
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


class RoutingStrategy(AcquisitionStrategy):
    """Serves HTML per URL; unknown URLs raise the given error."""

    name = "routing"

    def __init__(self, pages: dict, error: Optional[BaseException] = None, timeout_s: float = 5.0):
        super().__init__(timeout_s)
        self.pages = pages
        self.error = error or OSError("no route")
        self.calls: list[str] = []

    async def fetch(self, url, site, session, diagnostics) -> str:
        self.calls.append(url)
        if url in self.pages:
            return self.pages[url]
        raise self.error


class FakeSession:
    """Stands in for BrowserSession; records whether it was closed."""

    instances: list = []

    def __init__(self, scraper_config=None, diagnostics=None):
        self.config = scraper_config
        self.diagnostics = diagnostics
        self.closed = False
        FakeSession.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        self.closed = True


@pytest.fixture
def diagnostics():
    return RecordingDiagnostics()


@pytest.fixture
def fake_sessions():
    FakeSession.instances = []
    yield FakeSession
    FakeSession.instances = []


@pytest.fixture
def pipeline_config(tmp_path):
    return PipelineConfig(
        scraper=ScraperConfig(page_delay_seconds=0, operation_timeout_s=5),
        storage=StorageConfig(base_dir=tmp_path / "data"),
        tracking=TrackingConfig(db_path=tmp_path / "data" / "scrape_log.db"),
    )


@pytest.fixture
def no_sleep():
    calls = []

    async def sleep(seconds):
        calls.append(seconds)

    sleep.calls = calls
    return sleep
