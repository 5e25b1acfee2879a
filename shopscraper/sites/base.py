"""
Per-site configuration.

A site is data, not code: which hosts it serves, which URLs count as
product or listing pages, where its embedded JSON lives, and the schemas
the engine applies. Everything else is shared.
"""

import re
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlsplit

from shopscraper.extractors.locators import StructuredPath
from shopscraper.extractors.schema import ExtractionSchema, FieldSpec, ListingLayout, field_spec
from shopscraper.transformers.normalizers import parse_price


def host_of(url: str) -> str:
    return (urlsplit(url).hostname or "").lower()


@dataclass(frozen=True)
class SiteConfig:
    """Declarative description of one target site."""

    name: str
    label: str
    domains: tuple
    origin: str
    product_url_pattern: str
    listing_url_pattern: str
    product_schema: ExtractionSchema
    listing_schema: ExtractionSchema
    listing_layout: ListingLayout = field(default_factory=ListingLayout)
    embedded_json: tuple = ()
    block_signatures: tuple = ()
    min_content_length: Optional[int] = None
    page_param: str = "page"
    warmup_url: Optional[str] = None

    def owns(self, url: str) -> bool:
        """True when the URL's host is one of this site's domains (or a subdomain)."""
        host = host_of(url)
        return any(host == d or host.endswith("." + d) for d in self.domains)

    def is_product_url(self, url: str) -> bool:
        return self.owns(url) and re.search(self.product_url_pattern, url) is not None

    def is_listing_url(self, url: str) -> bool:
        return self.owns(url) and re.search(self.listing_url_pattern, url) is not None


# schema.org Product (JSON-LD), the built-in fallback blob for sites without
# a server-rendered state island
LD_NAME = StructuredPath("name")
LD_BRAND = StructuredPath("brand.name")
LD_PRICE = StructuredPath("offers.price")
LD_LOW_PRICE = StructuredPath("offers.lowPrice")
LD_IMAGES = StructuredPath("image")
LD_DESCRIPTION = StructuredPath("description")
LD_RATING = StructuredPath("aggregateRating.ratingValue")
LD_REVIEW_COUNT = StructuredPath("aggregateRating.reviewCount")
LD_AVAILABILITY = StructuredPath("offers.availability")
LD_SKU = StructuredPath("sku")


def price_field(name: str, *locators, required: bool = False) -> FieldSpec:
    return field_spec(name, *locators, post_process=parse_price, required=required)
