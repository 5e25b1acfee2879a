#!/usr/bin/env python3
"""
Shop Scraper - Main Entry Point

Scrapes product pages and listing pages from Indian e-commerce sites into
canonical product records.

Usage:
    python main.py product URL                  # One product page
    python main.py listing URL --pages 1 2 3    # Several listing pages
    python main.py --sites                      # Supported sites
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from config.settings import PipelineConfig, ScraperConfig, StorageConfig, config as default_config
from shopscraper.diagnostics import ConsoleDiagnostics
from shopscraper.loaders import FileLoader
from shopscraper.models import BatchResult, ErrorResult, ProductRecord
from shopscraper.pipeline import ScrapePipeline
from shopscraper.sites import SITES, site_for_url
from shopscraper.tracking import ScrapeLogTracker

console = Console()

SUMMARY_FIELDS = (
    "title",
    "brand",
    "selling_price",
    "mrp",
    "discount",
    "discount_percent",
    "rating",
    "review_count",
    "availability",
    "product_id",
)


class CustomHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Custom formatter that preserves formatting and adds width."""

    def __init__(self, prog):
        super().__init__(prog, max_help_position=40, width=100)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    site_list = "\n".join(f"    {site.name:<12} {', '.join(site.domains)}" for site in SITES.values())

    epilog = f"""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
SUPPORTED SITES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
{site_list}

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
EXAMPLES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    python main.py product https://www.flipkart.com/x/p/itm123?pid=ABC --save
    python main.py listing "https://www.flipkart.com/search?q=phone" --pages 1 2 3
    python main.py listing https://www.myntra.com/men-tshirts --pages 3 1 3 2
    python main.py product URL --headless false        Watch the browser
    python main.py product URL --fixture-dir fixtures  Offline fallback
    python main.py --stats                             Scrape log statistics
"""

    parser = argparse.ArgumentParser(
        description="Scrape e-commerce product and listing pages into structured records.",
        formatter_class=CustomHelpFormatter,
        epilog=epilog,
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    product_parser = subparsers.add_parser("product", help="Scrape a single product page")
    product_parser.add_argument("url", help="Product page URL")

    listing_parser = subparsers.add_parser("listing", help="Scrape listing/category pages")
    listing_parser.add_argument("url", help="Listing page URL")
    listing_parser.add_argument(
        "--pages",
        "-p",
        type=int,
        nargs="+",
        default=[1],
        metavar="N",
        help="Page numbers to scrape (default: 1). Duplicates are ignored.",
    )

    for sub in (product_parser, listing_parser):
        run_group = sub.add_argument_group("Run Options")
        run_group.add_argument(
            "--timeout",
            type=float,
            default=None,
            metavar="SECONDS",
            help="Overall deadline for the operation (default: from config)",
        )
        run_group.add_argument(
            "--headless",
            type=str,
            default=None,
            choices=["true", "false"],
            metavar="BOOL",
            help="Run browser invisibly (default: true). Set 'false' to watch.",
        )
        run_group.add_argument(
            "--browser",
            type=str,
            default=None,
            choices=["chromium", "firefox", "webkit"],
            help="Browser engine (default: chromium)",
        )

        storage_group = sub.add_argument_group("Storage Options")
        storage_group.add_argument(
            "--save",
            action="store_true",
            help="Save results as JSON under the data directory",
        )
        storage_group.add_argument(
            "--download-images",
            action="store_true",
            help="Also download product images (implies --save)",
        )
        storage_group.add_argument(
            "--output",
            "-o",
            type=str,
            default=None,
            metavar="DIR",
            help="Data directory (default: ./data)",
        )
        storage_group.add_argument(
            "--fixture-dir",
            type=str,
            default=None,
            metavar="DIR",
            help="Use DIR/<site>.html when a product page cannot be acquired",
        )
        storage_group.add_argument(
            "--verbose",
            "-v",
            action="store_true",
            help="Show debug diagnostics",
        )

    log_group = parser.add_argument_group("Scrape Log", "Inspect the operation log")
    log_group.add_argument("--stats", action="store_true", help="Show scrape log statistics and exit")
    log_group.add_argument("--clear-log", action="store_true", help="Clear the scrape log")
    log_group.add_argument("--sites", action="store_true", help="List supported sites and exit")

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def create_config(args) -> PipelineConfig:
    """Create pipeline configuration from arguments."""
    scraper_config = ScraperConfig()
    if args.headless is not None:
        scraper_config.headless = args.headless.lower() == "true"
    if args.browser:
        scraper_config.browser_type = args.browser
    if args.timeout:
        scraper_config.operation_timeout_s = args.timeout

    storage_config = StorageConfig(
        save_results=args.save or args.download_images,
        download_images=args.download_images,
    )
    if args.output:
        storage_config.base_dir = Path(args.output)
    if args.fixture_dir:
        storage_config.fixture_dir = Path(args.fixture_dir)

    pipeline_config = PipelineConfig(scraper=scraper_config, storage=storage_config)
    if args.verbose:
        pipeline_config.logging.log_level = "DEBUG"
    return pipeline_config


def print_sites() -> None:
    table = Table(title="Supported Sites", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Label", style="green")
    table.add_column("Domains")
    table.add_column("Page Param", style="dim")
    for site in SITES.values():
        table.add_row(site.name, site.label, ", ".join(site.domains), site.page_param)
    console.print(table)


def print_record(record: ProductRecord) -> None:
    """Print one product record."""
    table = Table(title=record.get("title", "Product"), show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    for name in SUMMARY_FIELDS:
        if name in record:
            value = escape(str(record[name]))
            if name in record.inferred:
                value += " [dim](inferred)[/dim]"
            table.add_row(name, value)

    images = record.get("images") or ([record["image"]] if "image" in record else [])
    table.add_row("images", str(len(images)))
    if "attributes" in record:
        table.add_row("attributes", str(len(record["attributes"])))
    if record.url:
        table.add_row("url", record.url)

    console.print(table)
    if record.note:
        console.print(f"[yellow]Note: {record.note}[/yellow]")


def print_records(records: list[ProductRecord], title: str) -> None:
    table = Table(title=title, show_header=True)
    table.add_column("#", style="dim")
    table.add_column("Title", style="cyan", max_width=50)
    table.add_column("Price", style="green")
    table.add_column("MRP")
    table.add_column("Off")
    for i, record in enumerate(records, 1):
        table.add_row(
            str(i),
            escape(str(record.get("title", ""))),
            str(record.get("selling_price", "N/A")),
            str(record.get("mrp", "")),
            f"{record['discount_percent']}%" if "discount_percent" in record else "",
        )
    console.print(table)


def print_batch(batch: BatchResult) -> None:
    """Print pagination results: per-page outcomes then the records."""
    table = Table(title="Pagination Results", show_header=True)
    table.add_column("Page", style="cyan")
    table.add_column("Status")
    table.add_column("Products", style="green")
    table.add_column("Error", style="red")
    for outcome in batch.outcomes:
        table.add_row(
            str(outcome.page_number),
            "[green]✓[/green]" if outcome.ok else "[red]✗[/red]",
            str(len(outcome.records)),
            escape(outcome.error or ""),
        )
    console.print(table)

    if batch.all_records:
        print_records(batch.all_records, f"{len(batch.all_records)} Products")

    console.print(
        Panel(
            f"Requested: {batch.requested_pages}\n"
            f"Unique: {batch.unique_pages}\n"
            f"Succeeded: {batch.success_count}  Failed: {batch.failure_count}",
            title="Summary",
            border_style="yellow" if batch.partial else ("green" if batch.failure_count == 0 else "red"),
        )
    )


def print_error(error: ErrorResult) -> None:
    lines = [escape(error.message)]
    for key, value in error.details.items():
        lines.append(f"[dim]{key}:[/dim] {escape(str(value))}")
    console.print(Panel("\n".join(lines), title=f"Error ({error.kind})", border_style="red"))


async def run_command(args, pipeline_config: PipelineConfig, tracker: Optional[ScrapeLogTracker]) -> int:
    """Run one scrape command and render its result."""
    diagnostics = ConsoleDiagnostics(pipeline_config.logging, console)
    pipeline = ScrapePipeline(pipeline_config, diagnostics=diagnostics, tracker=tracker)
    loader = FileLoader(pipeline_config.storage) if pipeline_config.storage.save_results else None

    if args.command == "product":
        result = await pipeline.scrape_single(args.url, timeout=args.timeout)
        if isinstance(result, ErrorResult):
            print_error(result)
            return 1
        print_record(result)
        if loader:
            await loader.save_record(result.source, result, referer=SITES[result.source].origin + "/")
        return 0

    if len(set(args.pages)) == 1:
        result = await pipeline.scrape_listing_page(args.url, args.pages[0], timeout=args.timeout)
        if isinstance(result, ErrorResult):
            print_error(result)
            return 1
        result = BatchResult.from_outcomes(args.pages, [result])
    else:
        result = await pipeline.scrape_listing_pages(args.url, args.pages, timeout=args.timeout)
        if isinstance(result, ErrorResult):
            print_error(result)
            return 1

    print_batch(result)
    if loader and result.success_count:
        await loader.save_batch(site_for_url(args.url).name, result)
    return 0 if result.success_count > 0 else 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    tracker = None
    if default_config.tracking.enabled:
        default_config.tracking.ensure_dirs()
        tracker = ScrapeLogTracker(default_config.tracking.db_path)

    if args.sites:
        print_sites()
        return 0

    if args.stats:
        if tracker:
            tracker.print_stats()
        return 0

    if args.clear_log and tracker:
        deleted = tracker.clear()
        console.print(f"[yellow]Cleared {deleted} entries from the scrape log[/yellow]")
        if not args.command:
            return 0

    if not args.command:
        parser.print_help()
        return 1

    pipeline_config = create_config(args)

    console.print("\n[bold cyan]═══════════════════════════════════════════[/bold cyan]")
    console.print("[bold cyan]             SHOP SCRAPER                  [/bold cyan]")
    console.print("[bold cyan]═══════════════════════════════════════════[/bold cyan]\n")
    console.print(f"[dim]Command:[/dim] {args.command}")
    console.print(f"[dim]URL:[/dim] {args.url}")
    if args.command == "listing":
        console.print(f"[dim]Pages:[/dim] {args.pages}")
    console.print(f"[dim]Headless mode:[/dim] {pipeline_config.scraper.headless}")
    console.print(f"[dim]Browser:[/dim] {pipeline_config.scraper.browser_type}")

    try:
        return asyncio.run(run_command(args, pipeline_config, tracker))
    except KeyboardInterrupt:
        console.print("\n[yellow]Scrape cancelled by user[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
