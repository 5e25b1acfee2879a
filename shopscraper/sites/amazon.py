"""Amazon India."""

from shopscraper.extractors.locators import DomSelector as Dom
from shopscraper.extractors.locators import TextPattern
from shopscraper.extractors.schema import ListingLayout, field_spec, schema
from shopscraper.sites.base import SiteConfig, price_field
from shopscraper.transformers.normalizers import (
    absolute_url,
    attribute_map,
    first_image,
    image_urls,
    parse_count,
    parse_rating,
)

ORIGIN = "https://www.amazon.in"

PRODUCT_SCHEMA = schema(
    "product",
    [
        field_spec("title", Dom("#productTitle"), Dom("#title"), Dom(".a-size-large.a-spacing-none"), required=True),
        field_spec("brand", Dom("#bylineInfo"), Dom("tr.po-brand td:last-child")),
        price_field(
            "selling_price",
            Dom("#corePriceDisplay_desktop_feature_div .a-price .a-offscreen"),
            Dom(".a-price .a-offscreen"),
            Dom(".a-price-whole"),
            Dom("#priceblock_ourprice"),
            Dom("#priceblock_dealprice"),
        ),
        price_field(
            "mrp",
            Dom(".a-price.a-text-price .a-offscreen"),
            Dom(".a-text-strike"),
            Dom(".basisPrice .a-offscreen"),
        ),
        field_spec(
            "images",
            Dom("#landingImage", attr="data-old-hires", many=True),
            Dom("#landingImage", attr="src", many=True),
            Dom("#imgBlkFront", attr="src", many=True),
            Dom(".a-dynamic-image", attr="src", many=True),
            post_process=image_urls(ORIGIN),
        ),
        field_spec("description", Dom("#productDescription"), Dom("#feature-bullets")),
        field_spec(
            "attributes",
            Dom("#productDetails_techSpec_section_1 tr", pairs=True),
            Dom("#productOverview_feature_div tr", pairs=True),
            Dom("#productDetails_detailBullets_sections1 tr", pairs=True),
            post_process=attribute_map,
        ),
        field_spec(
            "rating",
            Dom("#acrPopover", attr="title"),
            Dom("#acrPopover .a-icon-alt"),
            Dom(".a-icon-star .a-icon-alt"),
            post_process=parse_rating,
        ),
        field_spec("review_count", Dom("#acrCustomerReviewText"), post_process=parse_count),
        field_spec(
            "availability",
            Dom("#availability .a-size-medium"),
            Dom("#availability .a-color-success"),
            Dom("#availability .a-color-state"),
            Dom("#availability"),
        ),
        field_spec(
            "product_id",
            Dom("input#ASIN", attr="value"),
            TextPattern(r'"asin"\s*:\s*"([A-Z0-9]{10})"', source="html"),
            TextPattern(r"/dp/([A-Z0-9]{10})", source="html"),
        ),
    ],
)

LISTING_SCHEMA = schema(
    "listing_item",
    [
        field_spec("title", Dom("h2 a span"), Dom("h2 span"), Dom(".a-size-base-plus"), required=True),
        price_field("selling_price", Dom(".a-price:not(.a-text-price) .a-offscreen"), Dom(".a-price-whole")),
        price_field("mrp", Dom(".a-price.a-text-price .a-offscreen"), Dom(".a-text-strike")),
        field_spec("image", Dom("img.s-image", attr="src"), Dom(".a-dynamic-image", attr="src"), post_process=first_image(ORIGIN)),
        field_spec(
            "product_url",
            Dom("h2 a", attr="href"),
            Dom("a.a-link-normal.s-no-outline", attr="href"),
            post_process=absolute_url(ORIGIN),
        ),
        field_spec("rating", Dom(".a-icon-star-small .a-icon-alt"), Dom(".a-icon-alt"), post_process=parse_rating),
        field_spec("review_count", Dom(".s-underline-text"), Dom("a[href*=customerReviews] span"), post_process=parse_count),
        field_spec("product_id", TextPattern(r'data-asin="([A-Z0-9]{10})"', source="html")),
    ],
    derive_brand=True,
)

SITE = SiteConfig(
    name="amazon",
    label="Amazon India",
    domains=("amazon.in",),
    origin=ORIGIN,
    product_url_pattern=r"/(dp|gp/product)/[A-Z0-9]{10}",
    listing_url_pattern=r"/s\?|/s/|[?&]k=",
    product_schema=PRODUCT_SCHEMA,
    listing_schema=LISTING_SCHEMA,
    listing_layout=ListingLayout(
        item_selectors=(
            'div[data-component-type="s-search-result"]',
            ".s-result-item[data-asin]",
        ),
    ),
    block_signatures=(
        "enter the characters you see below",
        "to discuss automated access to amazon data",
    ),
)
