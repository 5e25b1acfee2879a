"""
Error taxonomy for the scraping pipeline.

Every error carries a ``kind`` so the pipeline boundary can turn it into a
structured ``ErrorResult`` without inspecting exception types.
"""

from typing import Optional


class ScraperError(Exception):
    """Base class for all scraper errors."""

    kind = "internal"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class InvalidRequestError(ScraperError):
    """Input rejected before any acquisition was attempted."""

    kind = "validation"


class InvalidURLError(InvalidRequestError):
    """URL missing, malformed, or not belonging to a supported site."""


class BlockedPageError(ScraperError):
    """A response was received but looks like a block/challenge page."""

    kind = "blocked"

    def __init__(self, reason: str, length: int = 0):
        super().__init__(reason)
        self.reason = reason
        self.length = length


class BrowserSessionError(ScraperError):
    """The automated browser could not be launched."""

    kind = "browser"


class AcquisitionError(ScraperError):
    """Every acquisition strategy failed for a URL."""

    kind = "acquisition"

    def __init__(
        self,
        url: str,
        tried_strategies: list[str],
        last_error: Optional[str] = None,
    ):
        self.url = url
        self.tried_strategies = list(tried_strategies)
        self.last_error = last_error
        tried = ", ".join(self.tried_strategies) or "none"
        message = f"All acquisition strategies failed for {url} (tried: {tried})"
        if last_error:
            message += f"; last error: {last_error}"
        super().__init__(message)


class FieldExtractionError(ScraperError):
    """A required field could not be resolved by any locator."""

    kind = "extraction"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Required field '{field}' not found; page shape unrecognized")
