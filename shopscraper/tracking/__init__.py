"""Scrape operation log."""

from .tracker import ScrapeLogEntry, ScrapeLogTracker

__all__ = ["ScrapeLogEntry", "ScrapeLogTracker"]
