"""Tests for schemas and the field extraction engine."""

import pytest
from conftest import page_html

from shopscraper.errors import FieldExtractionError
from shopscraper.extractors.document import Document, EmbeddedJson
from shopscraper.extractors.engine import extract, extract_listing, item_documents
from shopscraper.extractors.locators import DomSelector as Dom
from shopscraper.extractors.locators import StructuredPath as Json
from shopscraper.extractors.schema import ListingLayout, field_spec, schema
from shopscraper.transformers.normalizers import parse_percent, parse_price

DATA = EmbeddedJson("data", r"window\.__DATA__\s*=")

PRODUCT = schema(
    "product",
    [
        field_spec("title", Json("title"), Dom("h1"), required=True),
        field_spec("brand", Json("brand")),
        field_spec("selling_price", Json("price.selling"), Dom(".price"), post_process=parse_price),
        field_spec("mrp", Json("price.mrp"), Dom(".mrp"), post_process=parse_price),
        field_spec("discount_percent", Dom(".off"), post_process=parse_percent),
        field_spec("description", Dom(".desc")),
    ],
    derive_brand=True,
)


def product_doc(state: str = "", body: str = "") -> Document:
    script = f"<script>window.__DATA__ = {state};</script>" if state else ""
    return Document.from_html(page_html(script + body), islands=(DATA,))


class TestSchema:
    def test_duplicate_field_names_rejected(self):
        with pytest.raises(ValueError):
            schema("product", [field_spec("title", Dom("h1")), field_spec("title", Dom("h2"))])

    def test_lookup_by_name(self):
        assert [spec.name for spec in PRODUCT.fields][:3] == ["title", "brand", "selling_price"]
        assert PRODUCT.get("mrp").post_process is parse_price
        assert PRODUCT.get("missing") is None


class TestExtract:
    def test_embedded_json_prices_and_derived_discount(self):
        document = product_doc('{"title": "Blue Shirt", "brand": "Acme", "price": {"mrp": 999, "selling": 799}}')
        record = extract(document, PRODUCT, "test")

        assert record["title"] == "Blue Shirt"
        assert record["mrp"] == 999
        assert record["selling_price"] == 799
        assert record["discount"] == 200
        assert record["discount_percent"] == 20
        assert record.inferred == ()

    def test_record_is_sparse(self):
        record = extract(product_doc(body="<h1>Plain Tee</h1>"), PRODUCT, "test")
        assert "description" not in record
        assert "selling_price" not in record
        assert "discount" not in record
        assert record.get("description") is None

    def test_missing_required_field_fails(self, diagnostics):
        with pytest.raises(FieldExtractionError) as exc_info:
            extract(product_doc(body="<p>not a product</p>"), PRODUCT, "test", diagnostics)

        assert exc_info.value.field == "title"
        assert exc_info.value.kind == "extraction"
        assert diagnostics.find("extract.required_missing")

    def test_derived_discount_replaces_located_value(self):
        body = '<h1>Tee</h1><span class="price">₹750</span><span class="mrp">₹1,000</span><span class="off">50% off</span>'
        record = extract(product_doc(body=body), PRODUCT, "test")
        assert record["discount_percent"] == 25
        assert record["discount"] == 250

    def test_no_discount_without_both_prices(self):
        body = '<h1>Tee</h1><span class="price">₹750</span><span class="off">50% off</span>'
        record = extract(product_doc(body=body), PRODUCT, "test")
        assert record["selling_price"] == 750
        assert "discount_percent" not in record
        assert "discount" not in record

    def test_no_discount_without_any_price(self):
        body = '<h1>Tee</h1><span class="off">(40% OFF)</span>'
        record = extract(product_doc(body=body), PRODUCT, "test")
        assert "selling_price" not in record
        assert "mrp" not in record
        assert "discount_percent" not in record

    def test_brand_inferred_from_title(self):
        record = extract(product_doc(body="<h1>Puma Running Shoes</h1>"), PRODUCT, "test")
        assert record["brand"] == "Puma"
        assert record.inferred == ("brand",)
        assert record.to_dict()["inferred"] == ["brand"]

    def test_brand_not_inferred_when_disabled(self):
        plain = schema("product", [field_spec("title", Dom("h1"), required=True)])
        record = extract(product_doc(body="<h1>Puma Running Shoes</h1>"), plain, "test")
        assert "brand" not in record

    def test_record_metadata(self):
        record = extract(product_doc(body="<h1>Tee</h1>"), PRODUCT, "shop").with_url("https://x.in/p/1")
        data = record.to_dict()
        assert data["source"] == "shop"
        assert data["url"] == "https://x.in/p/1"
        assert "scraped_at" in data


LISTING = schema(
    "listing_item",
    [
        field_spec("title", Json("name"), Dom(".t"), required=True),
        field_spec("selling_price", Json("price"), Dom(".p"), post_process=parse_price),
    ],
)


class TestListing:
    def test_dom_items_with_skips(self, diagnostics):
        body = (
            '<div class="card"><a class="t">Shirt</a><span class="p">₹499</span></div>'
            '<div class="card"><span class="p">₹10</span></div>'
            '<div class="card"><a class="t">Jeans</a></div>'
        )
        layout = ListingLayout(item_selectors=(".missing", ".card"))
        records = extract_listing(product_doc(body=body), LISTING, layout, "test", diagnostics)

        assert [r["title"] for r in records] == ["Shirt", "Jeans"]
        assert records[0]["selling_price"] == 499.0
        assert "selling_price" not in records[1]
        assert len(diagnostics.find("extract.item_skipped")) == 1

    def test_json_items_take_priority(self):
        state = '{"grid": {"items": [{"name": "A", "price": 100}, {"name": "B"}, "junk"]}}'
        body = '<div class="card"><a class="t">From DOM</a></div>'
        layout = ListingLayout(item_selectors=(".card",), items_path="grid.items")
        records = extract_listing(product_doc(state, body), LISTING, layout, "test")

        assert [r["title"] for r in records] == ["A", "B"]
        assert records[0]["selling_price"] == 100.0

    def test_empty_json_items_fall_back_to_dom(self):
        state = '{"grid": {"items": []}}'
        body = '<div class="card"><a class="t">From DOM</a></div>'
        layout = ListingLayout(item_selectors=(".card",), items_path="grid.items")
        assert len(item_documents(product_doc(state, body), layout)) == 1

    def test_page_without_items(self, diagnostics):
        layout = ListingLayout(item_selectors=(".card",))
        assert extract_listing(product_doc(body="<p>empty</p>"), LISTING, layout, "test", diagnostics) == []
        assert diagnostics.find("extract.listing_done")[0].fields["count"] == 0
