"""Product and listing page scraper for Indian e-commerce sites."""

from .diagnostics import ConsoleDiagnostics, Diagnostics, NullDiagnostics, RecordingDiagnostics
from .errors import (
    AcquisitionError,
    BlockedPageError,
    BrowserSessionError,
    FieldExtractionError,
    InvalidRequestError,
    InvalidURLError,
    ScraperError,
)
from .models import BatchResult, ErrorResult, PageOutcome, ProductRecord
from .pipeline import ScrapePipeline
from .sites import SITES, available_sites, get_site, site_for_url

__version__ = "0.1.0"

__all__ = [
    "SITES",
    "AcquisitionError",
    "BatchResult",
    "BlockedPageError",
    "BrowserSessionError",
    "ConsoleDiagnostics",
    "Diagnostics",
    "ErrorResult",
    "FieldExtractionError",
    "InvalidRequestError",
    "InvalidURLError",
    "NullDiagnostics",
    "PageOutcome",
    "ProductRecord",
    "RecordingDiagnostics",
    "ScrapePipeline",
    "ScraperError",
    "available_sites",
    "get_site",
    "site_for_url",
]
