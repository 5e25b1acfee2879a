"""
Structured diagnostics sink.

Engine components never print. They call ``Diagnostics.event`` with a
dotted event name and structured fields; the sink decides how (or whether)
to render it. The console sink uses rich markup the same way the rest of
the CLI does.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape

from config.settings import LoggingConfig
from shopscraper.models import utc_now

LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40}

LEVEL_STYLES = {
    "debug": "dim",
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
}


@dataclass
class DiagnosticEvent:
    """One structured diagnostic event."""

    name: str
    message: str
    level: str = "info"
    fields: dict = field(default_factory=dict)
    at: str = field(default_factory=utc_now)


class Diagnostics:
    """Base sink. Subclasses override ``emit``."""

    def emit(self, event: DiagnosticEvent) -> None:
        raise NotImplementedError

    def event(self, name: str, message: str, level: str = "info", **fields: Any) -> None:
        """Build and emit an event."""
        self.emit(DiagnosticEvent(name=name, message=message, level=level, fields=fields))


class NullDiagnostics(Diagnostics):
    """Discards everything."""

    def emit(self, event: DiagnosticEvent) -> None:
        return None


class RecordingDiagnostics(Diagnostics):
    """Keeps events in memory."""

    def __init__(self):
        self.events: list[DiagnosticEvent] = []

    def emit(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        return [e.name for e in self.events]

    def find(self, name: str) -> list[DiagnosticEvent]:
        return [e for e in self.events if e.name == name]


class ConsoleDiagnostics(Diagnostics):
    """Renders events to a rich console, optionally mirrored to a log file."""

    def __init__(
        self,
        logging_config: Optional[LoggingConfig] = None,
        console: Optional[Console] = None,
    ):
        self.config = logging_config or LoggingConfig()
        self.console = console or Console()
        self.threshold = LEVELS.get(self.config.log_level.lower(), LEVELS["info"])
        self.log_path: Optional[Path] = None

        if self.config.log_to_file:
            self.config.ensure_dirs()
            self.log_path = self.config.log_dir / (
                f"scrape-{datetime.now().strftime('%Y%m%d')}.log"
            )

    def emit(self, event: DiagnosticEvent) -> None:
        if LEVELS.get(event.level, LEVELS["info"]) < self.threshold:
            return

        if self.config.log_to_console:
            style = LEVEL_STYLES.get(event.level, "white")
            self.console.print(f"[{style}]{escape(event.message)}[/{style}]")

        if self.log_path:
            details = " ".join(f"{k}={v}" for k, v in event.fields.items())
            with self.log_path.open("a", encoding="utf-8") as f:
                f.write(
                    f"{event.at} {event.level.upper():<7} {event.name} {event.message} {details}\n"
                )
