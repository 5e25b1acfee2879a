"""
Locators and the prioritized fallback chain that resolves them.

A locator says where one field's raw value lives: a CSS selector, a regex
over the page text, or a path into the embedded JSON. ``resolve`` walks an
ordered list front to back and stops at the first non-empty value, so list
order is the site's confidence ranking.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence, Union

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from shopscraper.diagnostics import Diagnostics, NullDiagnostics
from shopscraper.extractors.document import Document


def is_empty(value: Any) -> bool:
    """None, blank strings and empty containers count as "not found"."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def _node_text(node: Tag) -> str:
    return node.get_text(" ", strip=True)


@dataclass(frozen=True)
class DomSelector:
    """CSS selector; text by default, or an attribute, a list, or row pairs."""

    selector: str
    attr: Optional[str] = None
    many: bool = False
    pairs: bool = False

    kind = "dom"

    def _value(self, node: Tag) -> Any:
        if self.attr:
            value = node.get(self.attr)
            if isinstance(value, list):  # class and friends
                value = " ".join(value)
            return value.strip() if isinstance(value, str) else None
        return _node_text(node)

    def read(self, document: Document) -> Any:
        nodes = document.select(self.selector)
        if not nodes:
            return None

        if self.pairs:
            result = {}
            for row in nodes:
                cells = [c for c in row.find_all(["td", "th", "span", "div", "li"], recursive=False)]
                if len(cells) < 2:
                    continue
                key = _node_text(cells[0])
                value = _node_text(cells[-1])
                if key and value and key not in result:
                    result[key] = value
            return result

        if self.many:
            values = [self._value(node) for node in nodes]
            return [v for v in values if not is_empty(v)]

        for node in nodes:
            value = self._value(node)
            if not is_empty(value):
                return value
        return None


@dataclass(frozen=True)
class TextPattern:
    """Regex over the flattened page text (or raw markup)."""

    pattern: str
    source: str = "text"  # "text" or "html"
    flags: int = re.IGNORECASE

    kind = "pattern"

    @property
    def compiled(self) -> re.Pattern:
        return _compile(self.pattern, self.flags)

    def read(self, document: Document) -> Any:
        haystack = document.html if self.source == "html" else document.text
        match = self.compiled.search(haystack or "")
        if not match:
            return None
        return match.group(1) if match.re.groups else match.group(0)


_pattern_cache: dict = {}


def _compile(pattern: str, flags: int) -> re.Pattern:
    key = (pattern, flags)
    if key not in _pattern_cache:
        _pattern_cache[key] = re.compile(pattern, flags)
    return _pattern_cache[key]


@dataclass(frozen=True)
class StructuredPath:
    """Path into the embedded-JSON blob.

    ``"pdpData.price.mrp"`` or a tuple of segments. Integer segments index
    lists; ``*`` fans out over a list (results are flattened).
    """

    path: Union[str, tuple]
    segments: tuple = field(init=False, repr=False)

    kind = "structured"

    def __post_init__(self):
        raw = self.path.split(".") if isinstance(self.path, str) else list(self.path)
        parsed = []
        for segment in raw:
            if isinstance(segment, str) and segment.lstrip("-").isdigit():
                parsed.append(int(segment))
            else:
                parsed.append(segment)
        object.__setattr__(self, "segments", tuple(parsed))

    def read(self, document: Document) -> Any:
        if not document.has_data:
            return None
        return walk_path(document.data, self.segments)


def walk_path(data: Any, segments: Sequence) -> Any:
    current = data
    for i, segment in enumerate(segments):
        if current is None:
            return None
        if segment == "*":
            if not isinstance(current, list):
                return None
            rest = segments[i + 1:]
            collected = []
            for item in current:
                value = walk_path(item, rest)
                if isinstance(value, list):
                    collected.extend(value)
                elif not is_empty(value):
                    collected.append(value)
            return collected
        if isinstance(segment, int):
            if not isinstance(current, list) or not -len(current) <= segment < len(current):
                return None
            current = current[segment]
        elif isinstance(current, dict):
            current = current.get(segment)
        else:
            return None
    return current


Locator = Union[DomSelector, TextPattern, StructuredPath]


def resolve(
    document: Document,
    locators: Sequence[Locator],
    post_process: Optional[Callable[[Any], Any]] = None,
    diagnostics: Optional[Diagnostics] = None,
    field_name: str = "",
) -> Any:
    """
    Return the first non-empty (post-processed) value, or None.

    Locators after the first hit are never consulted. A locator that raises
    while reading (bad selector, unexpected JSON shape) counts as a miss.
    """
    diagnostics = diagnostics or NullDiagnostics()

    for position, locator in enumerate(locators):
        try:
            raw = locator.read(document)
        except (
            ValueError,
            TypeError,
            AttributeError,
            KeyError,
            re.error,
            SelectorSyntaxError,
        ) as e:
            diagnostics.event(
                "extract.locator_error",
                f"Locator {locator!r} failed for '{field_name}': {e}",
                level="debug",
                field=field_name,
                position=position,
            )
            continue
        if is_empty(raw):
            continue

        value = post_process(raw) if post_process else raw
        if is_empty(value):
            continue

        diagnostics.event(
            "extract.field_resolved",
            f"  {field_name or 'field'} <- {locator.kind} #{position}",
            level="debug",
            field=field_name,
            locator_kind=locator.kind,
            position=position,
        )
        return value

    return None
