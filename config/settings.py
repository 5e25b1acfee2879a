"""
Configuration settings for the product scraping pipeline.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file from project root (optional - defaults below apply otherwise)
load_dotenv(Path(__file__).parent.parent / ".env")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class ScraperConfig:
    """Configuration for page acquisition and pagination."""

    # Browser settings
    headless: bool = field(default_factory=lambda: _env_bool("SCRAPER_HEADLESS", True))
    browser_type: str = field(
        default_factory=lambda: os.getenv("SCRAPER_BROWSER", "chromium")
    )
    viewport_width: int = 1920
    viewport_height: int = 1080
    timeout_ms: int = field(
        default_factory=lambda: int(_env_float("SCRAPER_TIMEOUT_MS", 30000))
    )
    locale: str = "en-IN"
    timezone_id: str = "Asia/Kolkata"

    # Direct HTTP fetch (cheapest acquisition strategy)
    http_timeout_s: float = 20.0

    # Rendered-page settling
    settle_delay_s: float = 2.0  # Wait after navigation for dynamic content
    warmup_delay_s: float = 2.0  # Pause on the home page before the target
    scroll_steps: int = 3  # Scrolls to trigger lazy-loaded images

    # Rate limiting (be respectful)
    page_delay_seconds: float = field(
        default_factory=lambda: _env_float("SCRAPER_PAGE_DELAY", 2.0)
    )

    # Whole-operation deadline for one scrape call
    operation_timeout_s: float = 180.0

    # Block/challenge page detection
    min_content_length: int = 1000

    # User agents: the first pool is used for normal fetches, the alternate
    # identity is used by the last escalation step
    user_agents: list = field(
        default_factory=lambda: [
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
        ]
    )
    alternate_user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    alternate_viewport: tuple = (1366, 768)


@dataclass
class StorageConfig:
    """Configuration for result storage (used by the CLI, not the engine)."""

    base_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv("SCRAPER_DATA_DIR", Path(__file__).parent.parent / "data")
        )
    )

    save_results: bool = False
    download_images: bool = False
    max_images_per_product: int = 5  # 0 = unlimited

    # Offline fallback: <fixture_dir>/<site>.html is parsed when a single
    # product cannot be acquired. None disables the fallback.
    fixture_dir: Optional[Path] = None

    def site_dir(self, site: str) -> Path:
        """Get the output directory for one site."""
        return self.base_dir / site

    def ensure_dirs(self) -> None:
        """Create necessary directories if they don't exist."""
        self.base_dir.mkdir(parents=True, exist_ok=True)


@dataclass
class TrackingConfig:
    """Configuration for the scrape operation log."""

    enabled: bool = True
    db_path: Path = field(
        default_factory=lambda: Path(
            os.getenv("SCRAPER_DATA_DIR", Path(__file__).parent.parent / "data")
        )
        / "scrape_log.db"
    )

    def ensure_dirs(self) -> None:
        """Create tracking directory if it doesn't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    log_dir: Path = field(default_factory=lambda: Path(__file__).parent.parent / "logs")
    log_level: str = field(default_factory=lambda: os.getenv("SCRAPER_LOG_LEVEL", "INFO"))
    log_to_file: bool = False
    log_to_console: bool = True

    def ensure_dirs(self) -> None:
        """Create log directory if it doesn't exist."""
        self.log_dir.mkdir(parents=True, exist_ok=True)


@dataclass
class PipelineConfig:
    """Main configuration combining all settings."""

    scraper: ScraperConfig = field(default_factory=ScraperConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    tracking: TrackingConfig = field(default_factory=TrackingConfig)


# Default configuration instance
config = PipelineConfig()
