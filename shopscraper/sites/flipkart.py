"""Flipkart: DOM-first, with JSON-LD as a fallback for the basics."""

from shopscraper.extractors.locators import DomSelector as Dom
from shopscraper.extractors.locators import TextPattern
from shopscraper.extractors.schema import ListingLayout, field_spec, schema
from shopscraper.sites.base import (
    LD_AVAILABILITY,
    LD_IMAGES,
    LD_NAME,
    LD_PRICE,
    LD_RATING,
    LD_REVIEW_COUNT,
    SiteConfig,
    price_field,
)
from shopscraper.transformers.normalizers import (
    absolute_url,
    attribute_map,
    first_image,
    image_urls,
    parse_count,
    parse_rating,
)

ORIGIN = "https://www.flipkart.com"

PRODUCT_SCHEMA = schema(
    "product",
    [
        field_spec(
            "title",
            Dom("h1 .VU-ZEz"),
            Dom("span.B_NuCI"),
            Dom("h1[class*=title]"),
            LD_NAME,
            Dom("h1"),
            required=True,
        ),
        price_field("selling_price", Dom(".Nx9bqj"), Dom("._30jeq3"), Dom("._1_WHN1"), LD_PRICE),
        price_field("mrp", Dom(".yRaY8j"), Dom("._3I9_wc"), Dom("._2pFdJl")),
        field_spec(
            "images",
            Dom('img[src*="rukminim"]', attr="src", many=True),
            Dom("img[srcset]", attr="srcset", many=True),
            LD_IMAGES,
            post_process=image_urls(ORIGIN),
        ),
        field_spec("description", Dom(".yN\\+eNk"), Dom("._1mXcCf"), Dom(".product-description")),
        field_spec(
            "attributes",
            Dom("._0ZhAN9 tr", pairs=True),
            Dom("div._3npa3F tr", pairs=True),
            Dom("table[class*=spec] tr", pairs=True),
            post_process=attribute_map,
        ),
        field_spec("rating", Dom(".Y1HWO0"), Dom("._3LWZlK"), Dom(".XQDdHH"), LD_RATING, post_process=parse_rating),
        field_spec(
            "review_count",
            Dom(".Wphh3N span"),
            TextPattern(r"([\d,]+)\s+Reviews"),
            LD_REVIEW_COUNT,
            post_process=parse_count,
        ),
        field_spec("availability", Dom(".IMpDNt"), Dom("._16FRp0"), LD_AVAILABILITY),
        field_spec("product_id", TextPattern(r"[?&]pid=([A-Z0-9]+)", source="html")),
    ],
    derive_brand=True,
)

LISTING_SCHEMA = schema(
    "listing_item",
    [
        field_spec(
            "title",
            Dom(".wjcEIp"),
            Dom(".KzDlHZ"),
            Dom("a[title]", attr="title"),
            Dom(".s1Q9rs"),
            required=True,
        ),
        price_field("selling_price", Dom(".Nx9bqj"), Dom("._30jeq3")),
        price_field("mrp", Dom(".yRaY8j"), Dom("._3I9_wc")),
        field_spec("image", Dom("img.DByuf4", attr="src"), Dom("img", attr="src"), post_process=first_image(ORIGIN)),
        field_spec(
            "product_url",
            Dom('a[href*="/p/"]', attr="href"),
            Dom("a.CGtC98", attr="href"),
            Dom("a", attr="href"),
            post_process=absolute_url(ORIGIN),
        ),
        field_spec("rating", Dom(".XQDdHH"), post_process=parse_rating),
        field_spec("review_count", Dom(".Wphh3N"), post_process=parse_count),
        field_spec("availability", Dom(".DShtpz span"), Dom(".yiggsN")),
        field_spec("product_id", TextPattern(r'data-id="([^"]+)"', source="html")),
    ],
    derive_brand=True,
)

SITE = SiteConfig(
    name="flipkart",
    label="Flipkart",
    domains=("flipkart.com",),
    origin=ORIGIN,
    product_url_pattern=r"/p/itm",
    listing_url_pattern=r"/(search|pr)\b|[?&]sid=",
    product_schema=PRODUCT_SCHEMA,
    listing_schema=LISTING_SCHEMA,
    listing_layout=ListingLayout(item_selectors=("[data-id]", ".slAVV4", "._1AtVbE")),
)
