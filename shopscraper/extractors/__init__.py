"""Document parsing, locators and the field extraction engine."""

from .document import (
    INITIAL_STATE,
    NEXT_DATA,
    PRELOADED_STATE,
    Document,
    EmbeddedJson,
    extract_embedded_json,
    find_ld_json_product,
)
from .engine import extract, extract_listing, item_documents
from .locators import DomSelector, Locator, StructuredPath, TextPattern, is_empty, resolve
from .schema import ExtractionSchema, FieldSpec, ListingLayout, field_spec, schema

__all__ = [
    "INITIAL_STATE",
    "NEXT_DATA",
    "PRELOADED_STATE",
    "Document",
    "DomSelector",
    "EmbeddedJson",
    "ExtractionSchema",
    "FieldSpec",
    "ListingLayout",
    "Locator",
    "StructuredPath",
    "TextPattern",
    "extract",
    "extract_embedded_json",
    "extract_listing",
    "field_spec",
    "find_ld_json_product",
    "is_empty",
    "item_documents",
    "resolve",
    "schema",
]
