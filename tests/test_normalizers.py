"""Tests for field normalizers."""

import pytest

from shopscraper.transformers.normalizers import (
    absolute_url,
    attribute_map,
    clean_text,
    compute_discount_amount,
    compute_discount_percent,
    derive_brand_from_title,
    first_image,
    image_urls,
    normalize_image_url,
    parse_count,
    parse_percent,
    parse_price,
    parse_rating,
    text_list,
)

ORIGIN = "https://www.example.in"


class TestParsePrice:
    def test_rupee_with_separators(self):
        assert parse_price("₹1,234.50") == 1234.5

    def test_rs_prefix(self):
        assert parse_price("Rs. 499") == 499.0

    def test_numbers_pass_through(self):
        assert parse_price(799) == 799.0

    def test_unparseable_is_none(self):
        assert parse_price(None) is None
        assert parse_price("") is None
        assert parse_price("call for price") is None
        assert parse_price(True) is None


class TestParseNumbers:
    def test_percent(self):
        assert parse_percent("40% off") == 40
        assert parse_percent("no discount") is None

    def test_rating_in_range(self):
        assert parse_rating("4.3 out of 5 stars") == 4.3
        assert parse_rating("7.5") is None

    def test_count(self):
        assert parse_count("12,345 Ratings") == 12345
        assert parse_count("no reviews") is None


class TestDiscounts:
    def test_amount(self):
        assert compute_discount_amount(999, 799) == 200
        assert compute_discount_amount(500, 600) == 0

    def test_percent(self):
        assert compute_discount_percent(1000, 750) == 25
        assert compute_discount_percent(0, 10) == 0
        assert compute_discount_percent(100, 100) == 0


class TestImageUrls:
    def test_protocol_relative(self):
        assert normalize_image_url("//img.cdn.in/a.jpg", ORIGIN) == "https://img.cdn.in/a.jpg"

    def test_root_relative(self):
        assert normalize_image_url("/media/a.jpg", ORIGIN) == f"{ORIGIN}/media/a.jpg"

    def test_srcset_takes_first_candidate(self):
        raw = "https://cdn.in/a.jpg 1x, https://cdn.in/b.jpg 2x"
        assert normalize_image_url(raw, ORIGIN) == "https://cdn.in/a.jpg"

    def test_non_urls_dropped(self):
        assert normalize_image_url("data:image/png;base64,xyz", ORIGIN) == ""
        assert normalize_image_url(None, ORIGIN) == ""

    def test_list_is_normalized_and_deduplicated(self):
        normalize = image_urls(ORIGIN)
        assert normalize(["/a.jpg", "/a.jpg", "", "https://cdn.in/b.jpg"]) == [
            f"{ORIGIN}/a.jpg",
            "https://cdn.in/b.jpg",
        ]

    def test_first_image(self):
        assert first_image(ORIGIN)(["", "/a.jpg"]) == f"{ORIGIN}/a.jpg"

    @pytest.mark.parametrize(
        "raw",
        [
            "//img.cdn.in/a.jpg",
            "/media/a.jpg",
            "https://cdn.in/a.jpg",
            "https://cdn.in/a.jpg 1x, https://cdn.in/b.jpg 2x",
            "/a.jpg 480w, /b.jpg 960w",
            "data:image/png;base64,xyz",
            "",
        ],
    )
    def test_normalizing_twice_changes_nothing(self, raw):
        once = normalize_image_url(raw, ORIGIN)
        assert normalize_image_url(once, ORIGIN) == once


class TestText:
    def test_clean_text(self):
        assert clean_text("  Blue \n  Shirt ") == "Blue Shirt"
        assert clean_text(None) == ""

    def test_text_list(self):
        assert text_list(["a", " a ", "", "b"]) == ["a", "b"]

    def test_attribute_map_drops_placeholders(self):
        assert attribute_map({"Color:": " Blue ", "Size": "NA", "": "x"}) == {"Color": "Blue"}

    def test_absolute_url(self):
        assert absolute_url(ORIGIN)("/p/itm1") == f"{ORIGIN}/p/itm1"
        assert absolute_url(ORIGIN)("https://other.in/x") == "https://other.in/x"

    def test_brand_from_title(self):
        assert derive_brand_from_title("Samsung Galaxy S23 (Green)") == "Samsung"
        assert derive_brand_from_title("") == ""
        assert derive_brand_from_title("123 Widgets") == ""
