"""
Parsed page document: queryable markup plus an optional embedded-JSON blob.

Sites that server-render their state (``window.__INITIAL_STATE__``,
``__NEXT_DATA__``, ``window.__myx`` ...) expose far more reliable data there
than in the DOM, so the blob is extracted once at parse time and kept next
to the markup for ``StructuredPath`` locators.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from bs4 import BeautifulSoup, Tag

PARSER = "lxml"

_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class EmbeddedJson:
    """A data island: regex matching the text right before the JSON value."""

    name: str
    pattern: str

    def find(self, html: str) -> Optional[Any]:
        """Return the decoded JSON following the first match, or None."""
        for match in re.finditer(self.pattern, html, re.DOTALL):
            start = match.end()
            while start < len(html) and html[start] not in "{[":
                if not html[start].isspace() and html[start] != "=":
                    break
                start += 1
            if start >= len(html) or html[start] not in "{[":
                continue
            try:
                value, _ = _decoder.raw_decode(html, start)
                return value
            except json.JSONDecodeError:
                continue
        return None


# Common server-rendered state islands, in priority order
NEXT_DATA = EmbeddedJson("next_data", r'<script[^>]*id="__NEXT_DATA__"[^>]*>')
INITIAL_STATE = EmbeddedJson("initial_state", r"window\.__INITIAL_STATE__\s*=")
PRELOADED_STATE = EmbeddedJson("preloaded_state", r"window\.__PRELOADED_STATE__\s*=")


def find_ld_json_product(soup: BeautifulSoup) -> Optional[dict]:
    """Find a schema.org Product object in ld+json scripts."""
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = script.string or script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            data = json.loads(raw.strip())
        except json.JSONDecodeError:
            continue

        candidates = data if isinstance(data, list) else [data]
        for item in candidates:
            if not isinstance(item, dict):
                continue
            if "@graph" in item and isinstance(item["@graph"], list):
                candidates.extend(i for i in item["@graph"] if isinstance(i, dict))
                continue
            item_type = item.get("@type")
            types = item_type if isinstance(item_type, list) else [item_type]
            if "Product" in types:
                return item
    return None


def extract_embedded_json(
    html: str, islands: Iterable[EmbeddedJson], soup: Optional[BeautifulSoup] = None
) -> tuple[Optional[str], Optional[Any]]:
    """Return (island name, blob) for the first island that decodes.

    Falls back to a JSON-LD Product object when no configured island matches.
    """
    for island in islands:
        value = island.find(html)
        if value is not None:
            return island.name, value

    if soup is not None:
        product = find_ld_json_product(soup)
        if product is not None:
            return "ld_json", product
    return None, None


class Document:
    """Queryable markup (a BeautifulSoup tree or sub-tree) plus embedded JSON."""

    def __init__(
        self,
        root: Optional[Tag] = None,
        data: Any = None,
        url: Optional[str] = None,
        data_source: Optional[str] = None,
    ):
        self.root = root if root is not None else BeautifulSoup("", PARSER)
        self.data = data
        self.url = url
        self.data_source = data_source
        self._text: Optional[str] = None
        self._html: Optional[str] = None

    @classmethod
    def from_html(
        cls,
        html: str,
        url: Optional[str] = None,
        islands: Iterable[EmbeddedJson] = (),
    ) -> "Document":
        soup = BeautifulSoup(html or "", PARSER)
        source, data = extract_embedded_json(html or "", islands, soup)
        doc = cls(root=soup, data=data, url=url, data_source=source)
        doc._html = html or ""
        return doc

    @classmethod
    def from_node(cls, node: Tag, url: Optional[str] = None) -> "Document":
        """Sub-document scoped to one element (a listing item card)."""
        return cls(root=node, url=url)

    @classmethod
    def from_data(cls, data: Any, url: Optional[str] = None, source: str = "item") -> "Document":
        """JSON-only sub-document (a listing item from a state island)."""
        return cls(data=data, url=url, data_source=source)

    @property
    def has_data(self) -> bool:
        return self.data is not None

    @property
    def html(self) -> str:
        if self._html is None:
            self._html = str(self.root)
        return self._html

    @property
    def text(self) -> str:
        """Flattened visible text, whitespace-joined."""
        if self._text is None:
            self._text = self.root.get_text(" ", strip=True)
        return self._text

    def select(self, selector: str) -> list[Tag]:
        return self.root.select(selector)

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.root.select_one(selector)
