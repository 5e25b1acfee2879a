"""
SQLite-based log of scrape operations.

One row per top-level call (single product or listing run), opened as
``in_progress`` and closed with its final status and counts.
"""

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from shopscraper.models import utc_now

console = Console()

STATUSES = ("in_progress", "success", "partial", "failed")
TYPES = ("product", "category")


@dataclass
class ScrapeLogEntry:
    """One logged scrape operation."""

    id: int
    platform: str
    type: str
    url: str
    status: str
    started_at: str
    finished_at: Optional[str] = None
    pages_requested: int = 0
    pages_succeeded: int = 0
    pages_failed: int = 0
    records: int = 0
    error_kind: Optional[str] = None
    error: Optional[str] = None


class ScrapeLogTracker:
    """
    Records scrape operations in a SQLite database.

    The pipeline only calls ``start`` and ``finish``; the rest is for the CLI.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize the scrape log.

        Args:
            db_path: Path to the SQLite database file. Defaults to data/scrape_log.db
        """
        if db_path is None:
            db_path = Path(__file__).parent.parent.parent / "data" / "scrape_log.db"

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _get_connection(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS scrape_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    platform TEXT NOT NULL,
                    type TEXT NOT NULL,
                    url TEXT NOT NULL,
                    status TEXT NOT NULL,
                    started_at TEXT NOT NULL,
                    finished_at TEXT,
                    pages_requested INTEGER NOT NULL DEFAULT 0,
                    pages_succeeded INTEGER NOT NULL DEFAULT 0,
                    pages_failed INTEGER NOT NULL DEFAULT 0,
                    records INTEGER NOT NULL DEFAULT 0,
                    error_kind TEXT,
                    error TEXT
                )
            """
            )
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_platform ON scrape_log(platform)"
            )
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_started_at ON scrape_log(started_at)"
            )
            conn.commit()

    def start(self, platform: str, type: str, url: str, pages_requested: int = 0) -> int:
        """
        Open a log entry for an operation.

        Returns:
            The new entry's id
        """
        if type not in TYPES:
            raise ValueError(f"Unknown operation type: {type}")

        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO scrape_log (platform, type, url, status, started_at, pages_requested)
                VALUES (?, ?, ?, 'in_progress', ?, ?)
            """,
                (platform, type, url, utc_now(), pages_requested),
            )
            conn.commit()
            return cursor.lastrowid

    def finish(
        self,
        entry_id: int,
        status: str,
        records: int = 0,
        pages_succeeded: int = 0,
        pages_failed: int = 0,
        error_kind: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        """Close a log entry with its final status and counts."""
        if status not in STATUSES:
            raise ValueError(f"Unknown status: {status}")

        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE scrape_log SET
                    status = ?,
                    finished_at = ?,
                    records = ?,
                    pages_succeeded = ?,
                    pages_failed = ?,
                    error_kind = ?,
                    error = ?
                WHERE id = ?
            """,
                (
                    status,
                    utc_now(),
                    records,
                    pages_succeeded,
                    pages_failed,
                    error_kind,
                    error,
                    entry_id,
                ),
            )
            conn.commit()

    def get(self, entry_id: int) -> Optional[ScrapeLogEntry]:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM scrape_log WHERE id = ?", (entry_id,))
            row = cursor.fetchone()
            return ScrapeLogEntry(**dict(row)) if row else None

    def recent(self, limit: int = 20, platform: Optional[str] = None) -> list[ScrapeLogEntry]:
        """Most recent entries first."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            if platform:
                cursor.execute(
                    "SELECT * FROM scrape_log WHERE platform = ? ORDER BY id DESC LIMIT ?",
                    (platform, limit),
                )
            else:
                cursor.execute("SELECT * FROM scrape_log ORDER BY id DESC LIMIT ?", (limit,))
            return [ScrapeLogEntry(**dict(row)) for row in cursor.fetchall()]

    def get_stats(self) -> dict:
        """
        Get scrape log statistics.

        Returns:
            Dictionary with totals per status and per platform
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("SELECT COUNT(*) as total, SUM(records) as records FROM scrape_log")
            row = cursor.fetchone()
            total = row["total"]
            records = row["records"] or 0

            cursor.execute("SELECT status, COUNT(*) as count FROM scrape_log GROUP BY status")
            by_status = {row["status"]: row["count"] for row in cursor.fetchall()}

            cursor.execute(
                "SELECT platform, COUNT(*) as count FROM scrape_log GROUP BY platform"
            )
            by_platform = {row["platform"]: row["count"] for row in cursor.fetchall()}

            cursor.execute(
                "SELECT MIN(started_at) as first, MAX(started_at) as last FROM scrape_log"
            )
            row = cursor.fetchone()

            return {
                "total_operations": total,
                "total_records": records,
                "by_status": by_status,
                "by_platform": by_platform,
                "first_started": row["first"],
                "last_started": row["last"],
            }

    def clear(self, platform: Optional[str] = None) -> int:
        """
        Clear log entries.

        Args:
            platform: If provided, only clear entries for this platform.

        Returns:
            Number of entries deleted
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            if platform:
                cursor.execute("DELETE FROM scrape_log WHERE platform = ?", (platform,))
            else:
                cursor.execute("DELETE FROM scrape_log")
            deleted = cursor.rowcount
            conn.commit()
            return deleted

    def print_stats(self) -> None:
        """Print scrape log statistics to console."""
        stats = self.get_stats()

        if stats["total_operations"] == 0:
            console.print("[dim]No scrape operations logged yet.[/dim]")
            return

        console.print("\n[bold cyan]Scrape Log Stats[/bold cyan]")
        console.print(f"  Total operations: [green]{stats['total_operations']}[/green]")
        console.print(f"  Total records: [green]{stats['total_records']}[/green]")

        table = Table(show_header=True)
        table.add_column("Platform", style="cyan")
        table.add_column("Operations", style="green")
        for platform, count in sorted(stats["by_platform"].items()):
            table.add_row(platform, str(count))
        console.print(table)

        if stats["by_status"]:
            console.print("  By status:")
            for status, count in stats["by_status"].items():
                console.print(f"    • {status}: {count}")

        if stats["first_started"]:
            console.print(f"  First run: {stats['first_started']}")
        if stats["last_started"]:
            console.print(f"  Last run: {stats['last_started']}")
