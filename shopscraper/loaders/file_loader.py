"""
File loader for saving scrape results and product images under data/<site>/.
"""

import asyncio
import json
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

import aiofiles
import aiohttp
from rich.console import Console

from config.settings import StorageConfig, config
from shopscraper.models import BatchResult, ProductRecord

console = Console()

IMAGE_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
    "Accept": "image/webp,image/apng,image/*,*/*;q=0.8",
}


class FileLoader:
    """Saves records, batches and images to an organized directory structure."""

    def __init__(self, storage_config: Optional[StorageConfig] = None):
        self.config = storage_config or config.storage
        self.config.ensure_dirs()

    def _sanitize_filename(self, name: str) -> str:
        """Create a safe filename from a title or id."""
        name = re.sub(r"[^\w\s-]", "", name.lower())
        name = re.sub(r"[\s]+", "_", name)
        return name[:50] or "item"

    def _timestamp(self) -> str:
        return datetime.now().strftime("%Y%m%d_%H%M%S")

    def _record_dir(self, site: str, record: ProductRecord) -> Path:
        """Get the directory for one product record."""
        key = str(record.get("product_id") or record.get("title") or "product")
        record_dir = self.config.site_dir(site) / f"{self._timestamp()}_{self._sanitize_filename(key)}"
        record_dir.mkdir(parents=True, exist_ok=True)
        return record_dir

    async def _write_json(self, path: Path, payload: dict) -> None:
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(payload, indent=2, ensure_ascii=False))

    async def download_image(
        self,
        url: str,
        save_path: Path,
        session: aiohttp.ClientSession,
        referer: Optional[str] = None,
        delay: float = 0.5,
    ) -> bool:
        """
        Download a single image.

        Args:
            url: Image URL
            save_path: Path to save the image
            session: aiohttp session
            referer: Site origin sent as Referer
            delay: Delay after download (rate limiting)

        Returns:
            True if successful, False otherwise
        """
        headers = dict(IMAGE_HEADERS)
        if referer:
            headers["Referer"] = referer

        try:
            async with session.get(
                url, headers=headers, timeout=aiohttp.ClientTimeout(total=30)
            ) as response:
                if response.status != 200:
                    console.print(
                        f"[yellow]Failed to download {url}: HTTP {response.status}[/yellow]"
                    )
                    return False
                content = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            console.print(f"[red]Error downloading {url}: {e}[/red]")
            return False

        async with aiofiles.open(save_path, "wb") as f:
            await f.write(content)
        await asyncio.sleep(delay)
        return True

    async def download_record_images(
        self,
        record: ProductRecord,
        record_dir: Path,
        referer: Optional[str] = None,
    ) -> list[str]:
        """
        Download the images of one record.

        Returns:
            List of saved image filenames
        """
        image_urls = list(record.get("images") or [])
        if not image_urls and record.get("image"):
            image_urls = [record["image"]]
        if not image_urls:
            console.print(f"[yellow]No images to download for {record.get('title', 'product')}[/yellow]")
            return []

        # Apply limit if configured (0 = unlimited)
        max_images = self.config.max_images_per_product
        images_to_download = image_urls if max_images == 0 else image_urls[:max_images]

        saved_images = []
        async with aiohttp.ClientSession() as session:
            for i, url in enumerate(images_to_download):
                lowered = url.lower()
                extension = "jpg"
                if ".png" in lowered:
                    extension = "png"
                elif ".webp" in lowered:
                    extension = "webp"

                filename = f"image_{i+1:02d}.{extension}"
                if await self.download_image(url, record_dir / filename, session, referer=referer):
                    saved_images.append(filename)
                    console.print(f"  [green]✓[/green] {filename}")

        return saved_images

    async def save_record(
        self,
        site: str,
        record: ProductRecord,
        referer: Optional[str] = None,
    ) -> Path:
        """
        Save one product record (and optionally its images).

        Returns:
            Path to the record directory
        """
        record_dir = self._record_dir(site, record)
        console.print(f"\n[cyan]Saving {record.get('title', 'product')} to {record_dir}[/cyan]")

        payload = record.to_dict()
        if self.config.download_images:
            payload["local_images"] = await self.download_record_images(record, record_dir, referer)

        await self._write_json(record_dir / "record.json", payload)
        console.print("  [green]✓[/green] record.json")
        return record_dir

    async def save_batch(self, site: str, batch: BatchResult) -> Path:
        """
        Save a pagination result as one JSON file.

        Returns:
            Path to the written file
        """
        site_dir = self.config.site_dir(site)
        site_dir.mkdir(parents=True, exist_ok=True)
        batch_path = site_dir / f"listing_{self._timestamp()}.json"

        await self._write_json(batch_path, batch.to_dict())
        console.print(
            f"\n[cyan]Saved {len(batch.all_records)} product(s) from "
            f"{batch.success_count}/{len(batch.unique_pages)} page(s) to {batch_path}[/cyan]"
        )
        return batch_path
