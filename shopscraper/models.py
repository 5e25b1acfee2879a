"""
Result models: extracted records, per-page outcomes, batch results and
structured errors.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shopscraper.errors import ScraperError


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ProductRecord(BaseModel):
    """Sparse mapping of canonical field name -> extracted value.

    A key is present only when its field was found; absence means
    "not found". Records are immutable; ``with_url`` returns a copy.
    """

    model_config = ConfigDict(frozen=True)

    data: dict[str, Any] = Field(default_factory=dict)
    source: str
    scraped_at: str = Field(default_factory=utc_now)
    url: Optional[str] = None
    inferred: tuple[str, ...] = ()  # heuristic, low-confidence fields
    note: Optional[str] = None

    def __getitem__(self, name: str) -> Any:
        return self.data[name]

    def __contains__(self, name: str) -> bool:
        return name in self.data

    def get(self, name: str, default: Any = None) -> Any:
        return self.data.get(name, default)

    def with_url(self, url: str) -> "ProductRecord":
        return self.model_copy(update={"url": url})

    def with_note(self, note: str) -> "ProductRecord":
        return self.model_copy(update={"note": note})

    def to_dict(self) -> dict:
        """Flat JSON-ready dict: fields plus metadata."""
        result = dict(self.data)
        result["scraped_at"] = self.scraped_at
        result["source"] = self.source
        if self.url:
            result["url"] = self.url
        if self.inferred:
            result["inferred"] = list(self.inferred)
        if self.note:
            result["note"] = self.note
        return result


class PageOutcome(BaseModel):
    """Result of one page in a pagination run.

    ``records`` is meaningful when ``error`` is None; both are always present.
    """

    page_number: int
    url: Optional[str] = None
    records: list[ProductRecord] = Field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, page_number: int, records: list[ProductRecord], url: Optional[str] = None) -> "PageOutcome":
        return cls(page_number=page_number, url=url, records=list(records))

    @classmethod
    def failure(
        cls,
        page_number: int,
        error: str,
        kind: Optional[str] = None,
        url: Optional[str] = None,
    ) -> "PageOutcome":
        return cls(page_number=page_number, url=url, records=[], error=error, error_kind=kind)

    def to_dict(self) -> dict:
        return {
            "page_number": self.page_number,
            "url": self.url,
            "records": [r.to_dict() for r in self.records],
            "total_records": len(self.records),
            "error": self.error,
            "error_kind": self.error_kind,
        }


class BatchResult(BaseModel):
    """Aggregate of a pagination run."""

    requested_pages: list[int]
    unique_pages: list[int]
    outcomes: list[PageOutcome]
    success_count: int
    failure_count: int
    all_records: list[ProductRecord]
    scraped_at: str = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_counts(self) -> "BatchResult":
        if self.success_count + self.failure_count != len(self.unique_pages):
            raise ValueError("success_count + failure_count must equal the number of unique pages")
        expected = sum(len(o.records) for o in self.outcomes if o.ok)
        if len(self.all_records) != expected:
            raise ValueError("all_records must concatenate the records of successful outcomes")
        if [o.page_number for o in self.outcomes] != self.unique_pages:
            raise ValueError("outcomes must follow unique_pages order")
        return self

    @classmethod
    def from_outcomes(cls, requested_pages: list[int], outcomes: list[PageOutcome]) -> "BatchResult":
        ordered = sorted(outcomes, key=lambda o: o.page_number)
        successful = [o for o in ordered if o.ok]
        return cls(
            requested_pages=list(requested_pages),
            unique_pages=[o.page_number for o in ordered],
            outcomes=ordered,
            success_count=len(successful),
            failure_count=len(ordered) - len(successful),
            all_records=[record for o in successful for record in o.records],
        )

    @property
    def partial(self) -> bool:
        return self.success_count > 0 and self.failure_count > 0

    def to_dict(self) -> dict:
        return {
            "requested_pages": self.requested_pages,
            "unique_pages": self.unique_pages,
            "total_pages": len(self.unique_pages),
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "all_records": [r.to_dict() for r in self.all_records],
            "outcomes": [o.to_dict() for o in self.outcomes],
            "scraped_at": self.scraped_at,
        }


class ErrorResult(BaseModel):
    """Structured error returned across the pipeline boundary."""

    kind: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorResult":
        if isinstance(exc, ScraperError):
            details = {}
            for attr in ("url", "tried_strategies", "last_error", "field"):
                if hasattr(exc, attr):
                    details[attr] = getattr(exc, attr)
            return cls(kind=exc.kind, message=exc.message, details=details)
        return cls(kind="internal", message=f"{type(exc).__name__}: {exc}")

    def to_dict(self) -> dict:
        return {"success": False, "kind": self.kind, "message": self.message, **self.details}
