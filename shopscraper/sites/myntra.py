"""Myntra: everything useful is in the ``window.__myx`` state island."""

from shopscraper.extractors.document import EmbeddedJson
from shopscraper.extractors.locators import DomSelector as Dom
from shopscraper.extractors.locators import StructuredPath as Json
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

ORIGIN = "https://www.myntra.com"

MYX = EmbeddedJson("myx", r"window\.__myx\s*=")

PRODUCT_SCHEMA = schema(
    "product",
    [
        field_spec("title", Json("pdpData.name"), Dom("h1.pdp-name"), Dom("h1"), required=True),
        field_spec("brand", Json("pdpData.brand.name"), Dom("h1.pdp-title"), Dom(".pdp-brand")),
        price_field(
            "selling_price",
            Json("pdpData.price.discounted"),
            Dom(".pdp-price strong"),
            Dom(".pdp-price"),
        ),
        price_field("mrp", Json("pdpData.mrp"), Json("pdpData.price.mrp"), Dom(".pdp-mrp s"), Dom(".pdp-mrp")),
        field_spec(
            "images",
            Json("pdpData.media.albums.*.images.*.imageURL"),
            Dom(".image-grid-image img", attr="src", many=True),
            Dom("img.image-grid-imageContainer", attr="src", many=True),
            post_process=image_urls(ORIGIN),
        ),
        field_spec(
            "description",
            Json("pdpData.productDetails.0.description"),
            Dom(".pdp-product-description-content"),
        ),
        field_spec(
            "attributes",
            Json("pdpData.articleAttributes"),
            Dom(".index-tableContainer .index-row", pairs=True),
            post_process=attribute_map,
        ),
        field_spec(
            "rating",
            Json("pdpData.ratings.averageRating"),
            Dom(".index-overallRating div"),
            post_process=parse_rating,
        ),
        field_spec(
            "review_count",
            Json("pdpData.ratings.totalCount"),
            Dom(".index-ratingsCount"),
            post_process=parse_count,
        ),
        field_spec("product_id", Json("pdpData.id"), Dom(".supplier-styleId")),
    ],
)

LISTING_SCHEMA = schema(
    "listing_item",
    [
        field_spec("title", Json("productName"), Json("product"), Dom(".product-product"), required=True),
        field_spec("brand", Json("brand"), Dom(".product-brand")),
        price_field("selling_price", Json("price"), Dom(".product-discountedPrice"), Dom(".product-price")),
        price_field("mrp", Json("mrp"), Dom(".product-strike")),
        field_spec(
            "image",
            Json("searchImage"),
            Json("images.0.src"),
            Dom("img.img-responsive", attr="src"),
            Dom("img", attr="src"),
            post_process=first_image(ORIGIN),
        ),
        field_spec(
            "product_url",
            Json("landingPageUrl"),
            Dom("a", attr="href"),
            post_process=absolute_url(ORIGIN),
        ),
        field_spec("rating", Json("rating"), Dom(".product-ratingsContainer span"), post_process=parse_rating),
        field_spec("review_count", Json("ratingCount"), Dom(".product-ratingsCount"), post_process=parse_count),
        field_spec("product_id", Json("productId"), TextPattern(r"/(\d+)/buy", source="html")),
    ],
)

SITE = SiteConfig(
    name="myntra",
    label="Myntra",
    domains=("myntra.com",),
    origin=ORIGIN,
    product_url_pattern=r"/\d+/buy\b|/buy$",
    listing_url_pattern=r"myntra\.com/[a-z0-9-]+(\?|$)",
    product_schema=PRODUCT_SCHEMA,
    listing_schema=LISTING_SCHEMA,
    listing_layout=ListingLayout(
        item_selectors=("li.product-base", ".product-base"),
        items_path="searchData.results.products",
    ),
    embedded_json=(MYX,),
    block_signatures=("oops! something went wrong",),
    page_param="p",
)
