"""
Declarative extraction schemas.

A site describes each canonical field once, as an ordered locator list plus
a normalizer. Schemas are built at import time by the site modules and only
ever read by the engine.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from shopscraper.extractors.locators import Locator
from shopscraper.transformers.normalizers import clean_text


@dataclass(frozen=True)
class FieldSpec:
    """How one canonical field is located and normalized."""

    name: str
    locators: tuple
    post_process: Optional[Callable[[Any], Any]] = clean_text
    required: bool = False

    def __post_init__(self):
        if not self.name:
            raise ValueError("FieldSpec needs a name")
        object.__setattr__(self, "locators", tuple(self.locators))


@dataclass(frozen=True)
class ExtractionSchema:
    """
    Ordered, name-unique set of FieldSpecs for one entity type.

    ``derive_discounts`` computes ``discount``/``discount_percent`` from
    ``mrp`` and ``selling_price``. ``derive_brand`` guesses ``brand`` from
    the title when no brand locator matched.
    """

    entity: str
    fields: tuple
    derive_discounts: bool = True
    derive_brand: bool = False

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        seen = set()
        for spec in self.fields:
            if spec.name in seen:
                raise ValueError(f"Duplicate field '{spec.name}' in {self.entity} schema")
            seen.add(spec.name)

    def get(self, name: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None


@dataclass(frozen=True)
class ListingLayout:
    """Where the item cards of a listing page live.

    ``items_path`` (JSON) wins when it resolves to a non-empty list; otherwise
    the first CSS selector with matches defines the item nodes.
    """

    item_selectors: tuple = ()
    items_path: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "item_selectors", tuple(self.item_selectors))


def field_spec(
    name: str,
    *locators: Locator,
    post_process: Optional[Callable[[Any], Any]] = clean_text,
    required: bool = False,
) -> FieldSpec:
    """Shorthand used by the site tables."""
    return FieldSpec(name=name, locators=locators, post_process=post_process, required=required)


def schema(entity: str, specs: Sequence[FieldSpec], **options: Any) -> ExtractionSchema:
    return ExtractionSchema(entity=entity, fields=tuple(specs), **options)
