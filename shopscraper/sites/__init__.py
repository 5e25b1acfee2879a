"""
Site registry.

Each module in this package exposes one ``SITE``; adding a site means adding
a configuration module and listing it here.
"""

from typing import Optional

from shopscraper.sites import ajio, amazon, bigbasket, flipkart, myntra, tatacliq
from shopscraper.sites.base import SiteConfig

SITES: dict[str, SiteConfig] = {
    module.SITE.name: module.SITE
    for module in (flipkart, myntra, amazon, ajio, bigbasket, tatacliq)
}


def available_sites() -> list[str]:
    return sorted(SITES)


def get_site(name: str) -> SiteConfig:
    """Look up a site by name (case-insensitive)."""
    try:
        return SITES[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown site '{name}'. Available: {', '.join(available_sites())}"
        ) from None


def site_for_url(url: str) -> Optional[SiteConfig]:
    """The site whose domain owns ``url``, or None."""
    for site in SITES.values():
        if site.owns(url):
            return site
    return None


__all__ = ["SITES", "SiteConfig", "available_sites", "get_site", "site_for_url"]
