"""Page acquisition: browser session, strategies and the escalation engine."""

from .acquirer import PageAcquirer
from .browser import BrowserSession
from .strategies import (
    DEFAULT_BLOCK_SIGNATURES,
    AcquisitionStrategy,
    AlternateIdentityStrategy,
    BrowserFetchStrategy,
    DirectFetchStrategy,
    PageValidator,
    StealthBrowserStrategy,
    default_strategies,
)

__all__ = [
    "DEFAULT_BLOCK_SIGNATURES",
    "AcquisitionStrategy",
    "AlternateIdentityStrategy",
    "BrowserFetchStrategy",
    "BrowserSession",
    "DirectFetchStrategy",
    "PageAcquirer",
    "PageValidator",
    "StealthBrowserStrategy",
    "default_strategies",
]
