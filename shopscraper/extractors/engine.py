"""
Field extraction engine.

Applies an ExtractionSchema to a Document and builds a sparse ProductRecord.
The only hard failure is a required field that no locator resolves.
"""

from typing import Optional

from soupsieve import SelectorSyntaxError

from shopscraper.diagnostics import Diagnostics, NullDiagnostics
from shopscraper.errors import FieldExtractionError
from shopscraper.extractors.document import Document
from shopscraper.extractors.locators import StructuredPath, is_empty, resolve
from shopscraper.extractors.schema import ExtractionSchema, ListingLayout
from shopscraper.models import ProductRecord
from shopscraper.transformers.normalizers import (
    compute_discount_amount,
    compute_discount_percent,
    derive_brand_from_title,
)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def extract(
    document: Document,
    schema: ExtractionSchema,
    source: str,
    diagnostics: Optional[Diagnostics] = None,
) -> ProductRecord:
    """
    Build one record from one document.

    Args:
        document: Parsed page (or listing item sub-document)
        schema: Field rules for the entity
        source: Tag stored on the record (usually the site name)
        diagnostics: Event sink

    Returns:
        ProductRecord holding only the fields that were found

    Raises:
        FieldExtractionError: A required field resolved to nothing
    """
    diagnostics = diagnostics or NullDiagnostics()
    data = {}
    inferred = []

    for spec in schema.fields:
        value = resolve(
            document,
            spec.locators,
            post_process=spec.post_process,
            diagnostics=diagnostics,
            field_name=spec.name,
        )
        if is_empty(value):
            if spec.required:
                diagnostics.event(
                    "extract.required_missing",
                    f"Required field '{spec.name}' not found ({schema.entity})",
                    level="warning",
                    field=spec.name,
                    entity=schema.entity,
                )
                raise FieldExtractionError(spec.name)
            continue
        data[spec.name] = value

    if schema.derive_discounts:
        # Discount fields come only from both base prices
        data.pop("discount", None)
        data.pop("discount_percent", None)
        mrp = data.get("mrp")
        selling = data.get("selling_price")
        if _is_number(mrp) and _is_number(selling):
            data["discount"] = compute_discount_amount(mrp, selling)
            data["discount_percent"] = compute_discount_percent(mrp, selling)

    if schema.derive_brand and "brand" not in data and data.get("title"):
        brand = derive_brand_from_title(data["title"])
        if brand:
            data["brand"] = brand
            inferred.append("brand")

    diagnostics.event(
        "extract.record_built",
        f"Extracted {len(data)} field(s) for {schema.entity}",
        level="debug",
        entity=schema.entity,
        fields=sorted(data),
        data_source=document.data_source,
    )
    return ProductRecord(data=data, source=source, inferred=tuple(inferred))


def item_documents(
    document: Document,
    layout: ListingLayout,
    diagnostics: Optional[Diagnostics] = None,
) -> list[Document]:
    """Split a listing page into one sub-document per item."""
    diagnostics = diagnostics or NullDiagnostics()

    if layout.items_path and document.has_data:
        items = StructuredPath(layout.items_path).read(document)
        if isinstance(items, list) and items:
            diagnostics.event(
                "extract.listing_items",
                f"Found {len(items)} item(s) in embedded data",
                level="debug",
                source="structured",
                count=len(items),
            )
            return [
                Document.from_data(item, url=document.url)
                for item in items
                if isinstance(item, dict)
            ]

    for selector in layout.item_selectors:
        try:
            nodes = document.select(selector)
        except SelectorSyntaxError as e:
            diagnostics.event(
                "extract.locator_error",
                f"Bad item selector {selector!r}: {e}",
                level="debug",
            )
            continue
        if nodes:
            diagnostics.event(
                "extract.listing_items",
                f"Found {len(nodes)} item(s) via {selector}",
                level="debug",
                source="dom",
                selector=selector,
                count=len(nodes),
            )
            return [Document.from_node(node, url=document.url) for node in nodes]

    return []


def extract_listing(
    document: Document,
    schema: ExtractionSchema,
    layout: ListingLayout,
    source: str,
    diagnostics: Optional[Diagnostics] = None,
) -> list[ProductRecord]:
    """
    Extract every item card of a listing page.

    Items missing a required field are skipped, not fatal; a page without
    items yields an empty list.
    """
    diagnostics = diagnostics or NullDiagnostics()
    records = []
    skipped = 0

    for position, item in enumerate(item_documents(document, layout, diagnostics)):
        try:
            records.append(extract(item, schema, source, diagnostics))
        except FieldExtractionError as e:
            skipped += 1
            diagnostics.event(
                "extract.item_skipped",
                f"Skipping item #{position}: missing '{e.field}'",
                level="debug",
                position=position,
                field=e.field,
            )

    diagnostics.event(
        "extract.listing_done",
        f"Extracted {len(records)} item(s), skipped {skipped}",
        level="info",
        count=len(records),
        skipped=skipped,
    )
    return records
